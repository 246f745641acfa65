"""
Read-only detection of installed tools.
"""

import logging
import re
import shutil
import subprocess
from typing import Optional

from ..errors import ProbeError
from ..models.plan import ProbeResult
from ..models.tool import ToolSpec
from ..utils.paths import expand_path


class StateProbe:
    """Inspects the local system for a tool and its version."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def locate(self, tool: ToolSpec, channel: Optional[str] = None) -> Optional[str]:
        binary = expand_path(tool.detect.binary_for(channel or tool.channel))
        return shutil.which(binary)

    def probe(self, tool: ToolSpec, channel: Optional[str] = None) -> ProbeResult:
        """
        Detect ``tool``.

        A missing binary is a normal ``installed=False`` result. ProbeError is
        raised only when the version command itself cannot run normally.
        """
        path = self.locate(tool, channel)
        if not path:
            self.logger.debug(f"{tool.name}: not found")
            return ProbeResult(installed=False)

        cmd = [path] + list(tool.detect.version_args)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                stdin=subprocess.DEVNULL,
                timeout=tool.detect.timeout_seconds
            )
        except FileNotFoundError:
            # Removed between which() and exec
            return ProbeResult(installed=False)
        except PermissionError as e:
            raise ProbeError(f"Permission denied running {path}: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise ProbeError(
                f"Version command timed out after {tool.detect.timeout_seconds}s: {' '.join(cmd)}"
            ) from e
        except OSError as e:
            raise ProbeError(f"Could not run {path}: {e}") from e

        raw = (result.stdout or "") + (result.stderr or "")
        if result.returncode != 0:
            self.logger.warning(
                f"{tool.name}: version command exited {result.returncode}; version unknown"
            )
            return ProbeResult(installed=True, version=None, raw_output=raw.strip())

        version = self.extract_version(raw, tool.detect.version_regex)
        self.logger.debug(f"{tool.name}: found at {path}, version {version}")
        return ProbeResult(installed=True, version=version, raw_output=raw.strip())

    @staticmethod
    def extract_version(output: str, pattern: str) -> Optional[str]:
        match = re.search(pattern, output)
        if not match:
            return None
        return match.group(1) if match.groups() else match.group(0)
