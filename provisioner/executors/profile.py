"""
Marker-keyed, idempotent edits of shell profile files.
"""

import logging
from pathlib import Path
from typing import List, Tuple

from ..errors import ProfileWriteError


class ProfileEditor:
    """
    Appends configuration blocks to profile files exactly once.

    A block is bracketed by start/end marker comments derived from a key.
    If the start marker is already present the edit is a no-op.
    """

    def __init__(self, marker_prefix: str = "tool-provisioner"):
        self.logger = logging.getLogger(__name__)
        self.marker_prefix = marker_prefix

    def markers(self, key: str) -> Tuple[str, str]:
        return (
            f"# >>> {self.marker_prefix}:{key} >>>",
            f"# <<< {self.marker_prefix}:{key} <<<",
        )

    def render_block(self, key: str, lines: List[str]) -> str:
        start, end = self.markers(key)
        return "\n".join([start, *lines, end]) + "\n"

    def has_block(self, path: Path, key: str) -> bool:
        start, _ = self.markers(key)
        try:
            content = path.read_text()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise ProfileWriteError(f"Cannot read {path}: {e}") from e
        return any(line.strip() == start for line in content.splitlines())

    def ensure_block(self, path: Path, key: str, lines: List[str]) -> bool:
        """
        Append the block for ``key`` unless it is already present.

        Returns:
            True if the file was changed
        """
        path = Path(path)
        if self.has_block(path, key):
            self.logger.info(f"Profile block {key} already present in {path}")
            return False

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            prefix = ""
            if path.exists():
                existing = path.read_text()
                if existing and not existing.endswith("\n"):
                    prefix = "\n"
            with open(path, "a") as f:
                f.write(prefix + "\n" + self.render_block(key, lines))
        except OSError as e:
            raise ProfileWriteError(f"Cannot write {path}: {e}") from e

        self.logger.info(f"Added profile block {key} to {path}")
        return True
