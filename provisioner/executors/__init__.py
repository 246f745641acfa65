"""
Executors that perform installs.
"""

from .base import Executor
from .apt import AptExecutor
from .deb import DebPackageExecutor
from .nvm import NvmExecutor
from .script import InstallerScriptExecutor
from .profile import ProfileEditor
from .runner import CommandRunner, CommandResult

EXECUTOR_KINDS = {
    cls.kind: cls
    for cls in (AptExecutor, DebPackageExecutor, InstallerScriptExecutor, NvmExecutor)
}

__all__ = [
    "Executor",
    "AptExecutor",
    "DebPackageExecutor",
    "InstallerScriptExecutor",
    "NvmExecutor",
    "ProfileEditor",
    "CommandRunner",
    "CommandResult",
    "EXECUTOR_KINDS"
]
