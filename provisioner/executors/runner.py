"""
Non-interactive command execution with timeouts and elevation.
"""

import asyncio
import logging
import os
import shutil
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Type

from ..errors import PackageManagerError, PermissionDeniedError, ProvisionError, StepTimeoutError


# Output fragments that mean "this needed root and did not get it"
PERMISSION_MARKERS = (
    "a password is required",
    "is not in the sudoers",
    "are you root",
    "requires superuser privilege",
    "permission denied",
)


@dataclass
class CommandResult:
    argv: List[str]
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def tail(self, lines: int = 20) -> str:
        return "\n".join(self.output.strip().splitlines()[-lines:])


def looks_like_permission_failure(output: str) -> bool:
    lowered = output.lower()
    return any(marker in lowered for marker in PERMISSION_MARKERS)


class CommandRunner:
    """Runs commands with stdin closed so nothing can block on a prompt."""

    def __init__(self, default_timeout: float = 900.0):
        self.logger = logging.getLogger(__name__)
        self.default_timeout = default_timeout

    def elevation_prefix(self) -> List[str]:
        """Prefix that runs a command as root without prompting."""
        if os.geteuid() == 0:
            return []
        if not shutil.which("sudo"):
            raise PermissionDeniedError("Root privileges required but sudo is not available")
        return ["sudo", "-n", "-E"]

    def build_env(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        env = os.environ.copy()
        env["DEBIAN_FRONTEND"] = "noninteractive"
        if extra:
            env.update(extra)
        return env

    async def run(self,
                  argv: Sequence[str],
                  timeout: Optional[float] = None,
                  env: Optional[Dict[str, str]] = None,
                  elevate: bool = False) -> CommandResult:
        """
        Run a command and capture its combined output.

        Raises:
            StepTimeoutError: the command outlived its timeout and was killed
            PermissionDeniedError: elevation needed but unavailable
        """
        cmd = (self.elevation_prefix() if elevate else []) + list(argv)
        timeout = timeout or self.default_timeout
        self.logger.info(f"Running: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                env=self.build_env(env)
            )
        except PermissionError as e:
            raise PermissionDeniedError(f"Cannot execute {cmd[0]}: {e}") from e
        except FileNotFoundError as e:
            raise PackageManagerError(f"Command not found: {cmd[0]}") from e

        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise StepTimeoutError(f"{' '.join(cmd)} timed out after {timeout:.0f} seconds")

        output = stdout.decode(errors="replace") if stdout else ""
        return CommandResult(argv=cmd, returncode=process.returncode, output=output)

    async def run_checked(self,
                          argv: Sequence[str],
                          error_cls: Type[ProvisionError] = PackageManagerError,
                          **kwargs) -> CommandResult:
        """Like ``run`` but raises on a non-zero exit code."""
        result = await self.run(argv, **kwargs)
        if result.ok:
            return result
        if kwargs.get("elevate") and looks_like_permission_failure(result.output):
            raise PermissionDeniedError(
                f"{' '.join(argv)} needs elevation: {result.tail(3)}",
                output=result.output
            )
        raise error_cls(
            f"{' '.join(argv)} exited with code {result.returncode}: {result.tail(3)}",
            output=result.output
        )
