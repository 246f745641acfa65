"""
.NET release metadata resolver.

Input format: ``releases-index.json`` with a ``releases-index`` list ordered
newest first of ``{"channel-version": "9.0", "latest-sdk": "9.0.101",
"release-type": "sts" | "lts", "support-phase": "active" | "eol" | ...}``.
"""

from typing import Any, Dict

from .base import VersionResolver
from ..utils.http import fetch_json


RELEASES_INDEX_URL = (
    "https://dotnetcli.blob.core.windows.net/dotnet/release-metadata/releases-index.json"
)

UNSUPPORTED_PHASES = ("eol", "preview", "go-live")


class DotnetReleaseResolver(VersionResolver):
    """Resolves the newest SDK of the requested .NET release type."""

    kind = "dotnet"
    channels = ("latest", "lts", "sts")

    def _resolve(self, channel: str) -> str:
        index = fetch_json(self.options.get("index_url", RELEASES_INDEX_URL), timeout=self.timeout)
        return self.pick(index, channel)

    @staticmethod
    def pick(index: Dict[str, Any], channel: str) -> str:
        for entry in index["releases-index"]:
            if entry.get("support-phase") in UNSUPPORTED_PHASES:
                continue
            if channel != "latest" and entry.get("release-type") != channel:
                continue
            return entry["latest-sdk"]
        raise ValueError(f"No supported {channel} release in .NET index")
