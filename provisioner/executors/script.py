"""
Runs remote installer scripts.
"""

from pathlib import Path
from typing import List

from .base import Executor, render
from ..models.plan import Plan


class InstallerScriptExecutor(Executor):
    """
    Downloads an installer script and runs it; its exit code is the only
    success signal.

    Options:
        url: script URL template
        args: argument templates passed to the script
        env: extra environment variables (templates)
        interpreter: program running the script (default ``bash``)
        elevate: run the script as root (default false)
        timeout: seconds before the script is killed
    """

    kind = "script"
    required_options = ("url",)

    @property
    def needs_root(self) -> bool:
        return bool(self.options.get("elevate", False))

    async def _install(self, plan: Plan, workdir: Path, log: List[str]) -> None:
        script = await self.download(render(self.options["url"], plan), workdir / "install.sh")
        script.chmod(0o700)

        argv = [self.options.get("interpreter", "bash"), str(script)]
        argv.extend(render(arg, plan) for arg in self.options.get("args", []))
        env = {key: render(str(value), plan) for key, value in self.options.get("env", {}).items()}

        await self.run(
            argv,
            log,
            elevate=self.needs_root,
            env=env or None,
            timeout=self.options.get("timeout")
        )
