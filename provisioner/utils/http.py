"""
Minimal HTTP helpers over urllib.

Proxy settings (HTTP_PROXY, HTTPS_PROXY, NO_PROXY) are honored by urllib's
default opener.
"""

import json
import logging
import os
import shutil
import urllib.request
from pathlib import Path
from typing import Any, Dict, Optional


USER_AGENT = "tool-provisioner"

logger = logging.getLogger(__name__)


def _build_request(url: str, headers: Optional[Dict[str, str]] = None) -> urllib.request.Request:
    request = urllib.request.Request(url)
    request.add_header("User-Agent", USER_AGENT)
    for key, value in (headers or {}).items():
        request.add_header(key, value)
    return request


def github_headers(token: Optional[str] = None) -> Dict[str, str]:
    """Headers for the GitHub REST API, authenticated when a token is available."""
    headers = {"Accept": "application/vnd.github.v3+json"}
    token = token or os.environ.get("GITHUB_TOKEN")
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


def fetch_json(url: str, timeout: float, headers: Optional[Dict[str, str]] = None) -> Any:
    """
    GET a URL and decode its JSON body.

    Raises urllib.error.URLError, TimeoutError or ValueError (bad JSON).
    """
    request = _build_request(url, headers)
    logger.debug(f"GET {url}")
    with urllib.request.urlopen(request, timeout=timeout) as response:
        return json.loads(response.read().decode())


def download_file(url: str, destination: Path, timeout: float) -> Path:
    """Stream a URL into a local file."""
    request = _build_request(url)
    logger.debug(f"Downloading {url} -> {destination}")
    with urllib.request.urlopen(request, timeout=timeout) as response:
        with open(destination, "wb") as f:
            shutil.copyfileobj(response, f)
    return destination
