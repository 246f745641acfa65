"""
GitHub Releases resolver.

Input formats:

* ``GET /repos/{repo}/releases/latest`` -> object with ``tag_name``
* ``GET /repos/{repo}/releases`` -> list of objects (newest first) with
  ``tag_name``, ``draft`` and ``prerelease``
"""

import os
from typing import Any, Dict, List, Optional

from .base import VersionResolver, strip_tag_prefix
from ..errors import ConfigError
from ..utils.http import fetch_json, github_headers


class GitHubReleaseResolver(VersionResolver):
    """
    Resolves versions from a repository's GitHub releases.

    Options:
        repo: ``owner/name`` of the repository
        lts_tag_prefix: tag prefix marking the LTS line, e.g. ``v7.4.``;
            enables the ``lts`` channel
        api_url: override for the API base (GitHub Enterprise)
    """

    kind = "github"

    def __init__(self, options: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(options, **kwargs)
        self.repo = self.options.get("repo")
        if not self.repo or "/" not in self.repo:
            raise ConfigError(f"github resolver needs 'repo' as owner/name, got {self.repo!r}")
        self.api_url = self.options.get("api_url", "https://api.github.com").rstrip("/")
        self.lts_tag_prefix = self.options.get("lts_tag_prefix")
        self.channels = ("latest", "lts") if self.lts_tag_prefix else ("latest",)

        if os.environ.get("GITHUB_TOKEN"):
            self.logger.debug("Using GitHub authentication (rate limit: 5000/hour)")

    def _resolve(self, channel: str) -> str:
        if channel == "lts":
            releases = fetch_json(
                f"{self.api_url}/repos/{self.repo}/releases",
                timeout=self.timeout,
                headers=github_headers()
            )
            return self.pick_lts(releases, self.lts_tag_prefix)

        release = fetch_json(
            f"{self.api_url}/repos/{self.repo}/releases/latest",
            timeout=self.timeout,
            headers=github_headers()
        )
        return release["tag_name"]

    @staticmethod
    def pick_lts(releases: List[Dict[str, Any]], prefix: str) -> str:
        """Newest stable release whose tag starts with ``prefix``."""
        if not isinstance(releases, list):
            raise ValueError("Expected a list of releases")
        normalized_prefix = strip_tag_prefix(prefix)
        for release in releases:
            if release.get("draft") or release.get("prerelease"):
                continue
            tag = release.get("tag_name", "")
            if strip_tag_prefix(tag).startswith(normalized_prefix):
                return tag
        raise ValueError(f"No release tagged {prefix}* found")
