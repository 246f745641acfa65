"""
Installs a downloaded .deb package.
"""

from pathlib import Path
from typing import List

from .base import Executor, render
from ..errors import PackageManagerError
from ..models.plan import Plan


class DebPackageExecutor(Executor):
    """
    Options:
        url: download URL template for the package
        channel_urls: optional per-channel URL templates overriding ``url``
    """

    kind = "deb"
    required_options = ("url",)

    @property
    def needs_root(self) -> bool:
        return True

    def package_url(self, plan: Plan) -> str:
        template = self.options.get("channel_urls", {}).get(plan.channel, self.options["url"])
        return render(template, plan)

    async def _install(self, plan: Plan, workdir: Path, log: List[str]) -> None:
        url = self.package_url(plan)
        package = await self.download(url, workdir / url.rsplit("/", 1)[-1])

        try:
            await self.run(["dpkg", "-i", str(package)], log, elevate=True)
        except PackageManagerError:
            self.logger.info(f"{plan.tool.name}: resolving package dependencies")
            await self.run(["apt-get", "install", "-f", "-y", "-qq"], log, elevate=True)
