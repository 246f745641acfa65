"""
Base executor: the only component that mutates the system.
"""

import asyncio
import logging
import os
import re
import tempfile
import urllib.error
from pathlib import Path
from typing import Any, Dict, List, Optional

from .profile import ProfileEditor
from .runner import CommandRunner
from ..errors import ConfigError, DownloadError, PackageManagerError
from ..models.outcome import ExecutionResult
from ..models.plan import Plan
from ..utils.http import download_file
from ..utils.paths import expand_path
from ..utils.retry import retry_call


DOWNLOAD_FAILURES = (urllib.error.URLError, OSError, ValueError)


def template_context(plan: Plan) -> Dict[str, str]:
    version = plan.target_version
    return {
        "version": version,
        "major": version.split(".")[0],
        "channel": plan.channel,
        "tool": plan.tool.name,
        "home": os.path.expanduser("~"),
        "binary": plan.tool.detect.binary_for(plan.channel),
    }


PLACEHOLDER = re.compile(r"\{(version|major|channel|tool|home|binary)\}")


def render(template: str, plan: Plan) -> str:
    """
    Fill the known placeholders ``{version}``, ``{major}``, ``{channel}``,
    ``{tool}``, ``{home}`` and ``{binary}``.

    Templates are mostly shell text, so any other brace (``${HOME}``,
    ``awk '{print $1}'``) is left exactly as written.
    """
    context = template_context(plan)
    return PLACEHOLDER.sub(lambda match: context[match.group(1)], template)


class Executor:
    """
    Performs the planned install/upgrade/reinstall of one tool.

    Subclasses implement ``_install`` using ``self.runner`` for commands and
    ``self.download`` for artifacts. Artifacts live in a private temporary
    directory that is removed on every exit path. Post-install commands and
    the tool's profile block are applied afterwards.
    """

    kind = "base"
    required_options: tuple = ()

    def __init__(self,
                 options: Optional[Dict[str, Any]] = None,
                 runner: Optional[CommandRunner] = None,
                 profile_editor: Optional[ProfileEditor] = None,
                 download_timeout: float = 300.0,
                 retry_attempts: int = 1,
                 retry_delay_seconds: float = 2.0):
        self.logger = logging.getLogger(__name__)
        self.options = dict(options or {})
        self.runner = runner or CommandRunner()
        self.profile_editor = profile_editor or ProfileEditor()
        self.download_timeout = download_timeout
        self.retry_attempts = retry_attempts
        self.retry_delay_seconds = retry_delay_seconds

        missing = [key for key in self.required_options if not self.options.get(key)]
        if missing:
            raise ConfigError(f"{self.kind} installer is missing options: {', '.join(missing)}")

    @property
    def needs_root(self) -> bool:
        """Whether installing runs commands through sudo."""
        return False

    async def execute(self, plan: Plan) -> ExecutionResult:
        tool = plan.tool
        self.logger.info(
            f"{tool.name}: {plan.action.value} {plan.target_version} via {self.kind}"
        )
        log: List[str] = []

        with tempfile.TemporaryDirectory(prefix=f"provision-{tool.name}-") as workdir:
            await self._install(plan, Path(workdir), log)

        for command in tool.post_install:
            result = await self.runner.run_checked(["bash", "-c", render(command, plan)])
            log.append(result.tail())

        profile_changed = False
        if tool.profile_lines:
            profile_changed = self.profile_editor.ensure_block(
                Path(expand_path(tool.profile_path)),
                tool.name,
                [render(line, plan) for line in tool.profile_lines]
            )

        excerpt = "\n".join(line for line in log if line).splitlines()[-20:]
        return ExecutionResult(log_excerpt="\n".join(excerpt), profile_changed=profile_changed)

    async def _install(self, plan: Plan, workdir: Path, log: List[str]) -> None:
        raise NotImplementedError

    async def download(self, url: str, destination: Path) -> Path:
        """Download with one bounded retry; failures raise DownloadError."""
        try:
            return await asyncio.to_thread(
                retry_call,
                lambda: download_file(url, destination, self.download_timeout),
                DOWNLOAD_FAILURES,
                self.retry_attempts,
                self.retry_delay_seconds,
                f"download {url}"
            )
        except DOWNLOAD_FAILURES as e:
            raise DownloadError(f"Failed to download {url}: {e}") from e

    async def run(self, argv: List[str], log: List[str], elevate: bool = False,
                  env: Optional[Dict[str, str]] = None,
                  timeout: Optional[float] = None) -> None:
        result = await self.runner.run_checked(
            argv, error_cls=PackageManagerError, elevate=elevate, env=env, timeout=timeout
        )
        log.append(result.tail())

