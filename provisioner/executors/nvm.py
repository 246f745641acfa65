"""
Installs Node.js through nvm in the user's home directory.
"""

from pathlib import Path
from typing import List

from .base import Executor, render
from ..models.plan import Plan


DEFAULT_NVM_VERSION = "v0.40.2"
NVM_INSTALL_URL = "https://raw.githubusercontent.com/nvm-sh/nvm/{nvm_version}/install.sh"


class NvmExecutor(Executor):
    """
    Installs nvm when it is missing, then the planned Node.js version, which
    becomes nvm's default.

    nvm maintains ``$NVM_DIR/current`` as a symlink to the active version, so
    the tool can be probed without loading nvm into a shell.

    Options:
        nvm_version: nvm release installed when nvm is missing
        nvm_dir: nvm location template (default ``{home}/.nvm``)
    """

    kind = "nvm"

    def nvm_dir(self, plan: Plan) -> Path:
        return Path(render(self.options.get("nvm_dir", "{home}/.nvm"), plan))

    async def _install(self, plan: Plan, workdir: Path, log: List[str]) -> None:
        nvm_dir = self.nvm_dir(plan)
        env = {
            "NVM_DIR": str(nvm_dir),
            # Profile lines are managed through the profile block instead
            "PROFILE": "/dev/null",
            "NVM_SYMLINK_CURRENT": "true",
        }

        if not (nvm_dir / "nvm.sh").exists():
            nvm_version = self.options.get("nvm_version", DEFAULT_NVM_VERSION)
            self.logger.info(f"{plan.tool.name}: installing nvm {nvm_version} into {nvm_dir}")
            # The nvm installer refuses an NVM_DIR that does not exist yet
            nvm_dir.mkdir(parents=True, exist_ok=True)
            script = await self.download(
                NVM_INSTALL_URL.format(nvm_version=nvm_version),
                workdir / "install-nvm.sh"
            )
            await self.run(["bash", str(script)], log, env=env)

        version = plan.target_version
        await self.run(
            [
                "bash", "-c",
                f'. "$NVM_DIR/nvm.sh" && nvm install {version} '
                f'&& nvm alias default {version} && nvm use {version}'
            ],
            log,
            env=env
        )
