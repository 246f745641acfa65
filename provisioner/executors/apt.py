"""
Installs tools from apt repositories.
"""

from pathlib import Path
from typing import List

from .base import Executor, render
from ..models.plan import Plan, PlanAction


class AptExecutor(Executor):
    """
    Options:
        packages: apt package templates; ``nodejs={version}-1nodesource1``
            pins the package to the planned version
        setup_script_url: optional repository setup script run as root first
            (e.g. ``https://deb.nodesource.com/setup_{major}.x``)
        update: refresh package lists before installing (default true)
    """

    kind = "apt"
    required_options = ("packages",)

    @property
    def needs_root(self) -> bool:
        return True

    def package_args(self, plan: Plan) -> List[str]:
        return [render(package, plan) for package in self.options["packages"]]

    async def _install(self, plan: Plan, workdir: Path, log: List[str]) -> None:
        setup_url = self.options.get("setup_script_url")
        if setup_url:
            script = await self.download(render(setup_url, plan), workdir / "setup.sh")
            await self.run(["bash", str(script)], log, elevate=True)

        if self.options.get("update", True):
            await self.run(["apt-get", "update", "-qq"], log, elevate=True)

        packages = self.package_args(plan)
        cmd = ["apt-get", "install", "-y", "-qq"]
        if plan.action == PlanAction.REINSTALL:
            cmd.append("--reinstall")
        # A pinned version may be older than the installed one after a channel switch
        if any("=" in package for package in packages):
            cmd.append("--allow-downgrades")
        cmd.extend(packages)
        await self.run(cmd, log, elevate=True)
