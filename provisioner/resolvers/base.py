"""
Base class for remote version resolvers.
"""

import logging
import urllib.error
from typing import Any, Dict, Optional, Tuple

from ..errors import ConfigError, ResolutionError
from ..utils.retry import retry_call


# Failures that count as "source unreachable or response unparseable"
RESOLVE_FAILURES = (urllib.error.URLError, OSError, ValueError, KeyError, TypeError, IndexError)


class VersionResolver:
    """
    Resolves the version identifier a channel currently points to.

    Subclasses declare the channels they understand and implement
    ``_resolve``. Network and parse failures are retried a bounded number
    of times and then surface as ``ResolutionError``.
    """

    kind = "base"
    channels: Tuple[str, ...] = ("latest",)

    def __init__(self,
                 options: Optional[Dict[str, Any]] = None,
                 timeout: float = 30.0,
                 retry_attempts: int = 1,
                 retry_delay_seconds: float = 2.0):
        self.logger = logging.getLogger(__name__)
        self.options = dict(options or {})
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_delay_seconds = retry_delay_seconds

    def supports(self, channel: str) -> bool:
        return channel in self.channels

    def check_channel(self, channel: str) -> None:
        if not self.supports(channel):
            raise ConfigError(
                f"{self.kind} resolver does not know channel {channel!r} "
                f"(expected one of {', '.join(self.channels)})"
            )

    def resolve(self, channel: str) -> str:
        """
        Resolve ``channel`` to a version string.

        Raises:
            ConfigError: channel is not recognized (no network call made)
            ResolutionError: source unreachable or response unparseable
        """
        self.check_channel(channel)
        try:
            version = retry_call(
                lambda: self._resolve(channel),
                retry_on=RESOLVE_FAILURES,
                attempts=self.retry_attempts,
                delay_seconds=self.retry_delay_seconds,
                description=f"{self.kind} version lookup ({channel})"
            )
        except RESOLVE_FAILURES as e:
            raise ResolutionError(f"Could not resolve {channel} version: {e}") from e

        if not version:
            raise ResolutionError(f"Empty version returned for channel {channel}")
        version = strip_tag_prefix(version)
        self.logger.info(f"{self.kind}: channel {channel} resolves to {version}")
        return version

    def _resolve(self, channel: str) -> str:
        raise NotImplementedError


def strip_tag_prefix(tag: str) -> str:
    """``v7.4.6`` -> ``7.4.6``."""
    tag = tag.strip()
    if tag[:1] in ("v", "V") and tag[1:2].isdigit():
        return tag[1:]
    return tag
