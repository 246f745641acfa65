"""
Node.js distribution index resolver.

Input format: ``https://nodejs.org/dist/index.json``, a list ordered newest
first of ``{"version": "v22.3.0", "lts": false | "Jod", ...}``.
"""

from typing import Any, Dict, List

from .base import VersionResolver
from ..utils.http import fetch_json


DIST_INDEX_URL = "https://nodejs.org/dist/index.json"


class NodeDistResolver(VersionResolver):
    kind = "nodejs"
    channels = ("latest", "lts")

    def _resolve(self, channel: str) -> str:
        index = fetch_json(self.options.get("index_url", DIST_INDEX_URL), timeout=self.timeout)
        return self.pick(index, channel)

    @staticmethod
    def pick(index: List[Dict[str, Any]], channel: str) -> str:
        if not isinstance(index, list) or not index:
            raise ValueError("Node.js index is empty or malformed")
        if channel == "latest":
            return index[0]["version"]
        for entry in index:
            if entry.get("lts") not in (False, None):
                return entry["version"]
        raise ValueError("No LTS release in Node.js index")
