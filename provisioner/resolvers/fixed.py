"""
Resolver for versions pinned in configuration.
"""

from typing import Any, Dict, Optional

from .base import VersionResolver
from ..errors import ConfigError


class FixedVersionResolver(VersionResolver):
    """
    Returns pinned versions without any network access.

    Options:
        versions: mapping of channel name to version
    """

    kind = "fixed"

    def __init__(self, options: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(options, **kwargs)
        versions = self.options.get("versions")
        if not isinstance(versions, dict) or not versions:
            raise ConfigError("fixed resolver needs a non-empty 'versions' mapping")
        self.versions = {str(k): str(v) for k, v in versions.items()}
        self.channels = tuple(self.versions)

    def _resolve(self, channel: str) -> str:
        return self.versions[channel]
