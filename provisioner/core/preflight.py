"""
Environment checks made once before any tool is processed.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from packaging.version import InvalidVersion, Version

from ..errors import PreconditionError
from ..executors.runner import CommandRunner


OS_RELEASE_PATH = Path("/etc/os-release")

DEFAULT_PREREQUISITES = (
    "curl",
    "wget",
    "ca-certificates",
    "gnupg",
    "lsb-release",
    "apt-transport-https",
)


def read_os_release(path: Path = OS_RELEASE_PATH) -> Dict[str, str]:
    """Parse an ``os-release`` file into a dict of its ``KEY=value`` lines."""
    info = {}
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        info[key] = value.strip().strip('"').strip("'")
    return info


class Preflight:
    """
    Checks the machine can be provisioned and installs prerequisite packages.

    Failures raise ``PreconditionError`` (or the error of the failing
    prerequisite install) before any tool is touched.
    """

    def __init__(self,
                 runner: Optional[CommandRunner] = None,
                 supported_os: Sequence[str] = ("ubuntu",),
                 min_os_version: Optional[str] = "22.04",
                 allow_root: bool = False,
                 prerequisites: Sequence[str] = DEFAULT_PREREQUISITES,
                 os_release_path: Path = OS_RELEASE_PATH):
        """
        Initialize the checks.

        Args:
            runner: Command runner used for sudo and apt
            supported_os: Accepted ``ID``/``ID_LIKE`` values of os-release
            min_os_version: Older releases only produce a warning
            allow_root: Permit running as root (tools then land in root's home)
            prerequisites: apt packages installed when missing
            os_release_path: Location of the os-release file
        """
        self.logger = logging.getLogger(__name__)
        self.runner = runner or CommandRunner()
        self.supported_os = [name.lower() for name in supported_os]
        self.min_os_version = min_os_version
        self.allow_root = allow_root
        self.prerequisites = list(prerequisites)
        self.os_release_path = os_release_path

    def check_platform(self) -> Dict[str, str]:
        try:
            info = read_os_release(self.os_release_path)
        except OSError as e:
            raise PreconditionError(
                f"Cannot determine the operating system from {self.os_release_path}: {e}"
            ) from e

        ids = {info.get("ID", "").lower(), *info.get("ID_LIKE", "").lower().split()}
        if not ids & set(self.supported_os):
            raise PreconditionError(
                f"Unsupported operating system {info.get('ID') or 'unknown'!r} "
                f"(supported: {', '.join(self.supported_os)})"
            )

        version = info.get("VERSION_ID")
        if self.min_os_version and version:
            try:
                too_old = Version(version) < Version(self.min_os_version)
            except InvalidVersion:
                too_old = False
            if too_old:
                self.logger.warning(
                    f"{info.get('NAME', info.get('ID'))} {version} is older than the "
                    f"tested {self.min_os_version}; continuing"
                )
        self.logger.info(f"Platform: {info.get('PRETTY_NAME', info.get('ID'))}")
        return info

    async def check_user(self, needs_elevation: bool) -> None:
        if os.geteuid() == 0:
            if not self.allow_root:
                raise PreconditionError(
                    "Running as root would install per-user tools into root's home; "
                    "run as a regular user with sudo rights"
                )
            return
        if not needs_elevation:
            return

        # Raises PermissionDeniedError when sudo is missing
        result = await self.runner.run(["true"], elevate=True, timeout=30)
        if not result.ok:
            raise PreconditionError(
                "sudo needs a password; run 'sudo -v' first or allow passwordless sudo",
                output=result.output
            )

    async def missing_prerequisites(self) -> List[str]:
        missing = []
        for package in self.prerequisites:
            result = await self.runner.run(
                ["dpkg-query", "-W", "-f", "${Status}", package], timeout=30
            )
            if not (result.ok and "install ok installed" in result.output):
                missing.append(package)
        return missing

    async def run(self, needs_elevation: bool = True, dry_run: bool = False) -> None:
        """
        Run every check, then install missing prerequisites.

        In dry-run mode missing prerequisites are only reported.
        """
        self.check_platform()
        await self.check_user(needs_elevation)

        missing = await self.missing_prerequisites()
        if not missing:
            self.logger.info("Prerequisite packages present")
            return
        if dry_run:
            self.logger.info(f"Would install prerequisite packages: {', '.join(missing)}")
            return

        self.logger.info(f"Installing prerequisite packages: {', '.join(missing)}")
        await self.runner.run_checked(["apt-get", "update", "-qq"], elevate=True)
        await self.runner.run_checked(["apt-get", "install", "-y", "-qq", *missing], elevate=True)
