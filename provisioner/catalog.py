"""
Built-in tool catalog and construction of resolvers/executors from config.

Tools are listed in dependency order: runtimes first, shell integration
that assumes them last.
"""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from .core.sequencer import ToolEntry
from .errors import ConfigError
from .executors import EXECUTOR_KINDS, CommandRunner, ProfileEditor
from .models.tool import ToolSpec
from .resolvers import RESOLVER_KINDS


DEFAULT_TOOLS: List[Dict[str, Any]] = [
    {
        "name": "dotnet",
        "description": ".NET SDK installed per user with dotnet-install.sh",
        "channels": ["lts", "sts", "latest"],
        "channel": "lts",
        "detect": {"binary": "~/.dotnet/dotnet"},
        "resolver": {"kind": "dotnet"},
        "installer": {
            "kind": "script",
            "options": {
                "url": "https://dot.net/v1/dotnet-install.sh",
                "args": ["--version", "{version}", "--install-dir", "{home}/.dotnet"],
            },
        },
        "profile_lines": [
            'export DOTNET_ROOT="$HOME/.dotnet"',
            'export PATH="$PATH:$DOTNET_ROOT:$DOTNET_ROOT/tools"',
        ],
    },
    {
        "name": "dotnet-sts",
        "description": ".NET STS SDK side by side with the LTS one, run as dotnet-sts",
        "channels": ["sts"],
        "channel": "sts",
        "required": False,
        "detect": {"binary": "~/.dotnet-sts/dotnet"},
        "resolver": {"kind": "dotnet"},
        "installer": {
            "kind": "script",
            "options": {
                "url": "https://dot.net/v1/dotnet-install.sh",
                "args": ["--version", "{version}", "--install-dir", "{home}/.dotnet-sts"],
            },
        },
        "profile_lines": [
            "alias dotnet-sts='DOTNET_ROOT=$HOME/.dotnet-sts $HOME/.dotnet-sts/dotnet'",
        ],
    },
    {
        "name": "powershell",
        "description": "PowerShell from the GitHub release .deb packages",
        "channels": ["latest", "lts"],
        "channel": "latest",
        "detect": {
            "binary": "pwsh",
            "version_args": ["-NoProfile", "-NonInteractive", "-Command",
                             "$PSVersionTable.PSVersion.ToString()"],
            "channel_binaries": {"lts": "pwsh-lts"},
        },
        "resolver": {
            "kind": "github",
            "options": {"repo": "PowerShell/PowerShell", "lts_tag_prefix": "v7.4."},
        },
        "installer": {
            "kind": "deb",
            "options": {
                "url": "https://github.com/PowerShell/PowerShell/releases/download/"
                       "v{version}/powershell_{version}-1.deb_amd64.deb",
                "channel_urls": {
                    "lts": "https://github.com/PowerShell/PowerShell/releases/download/"
                           "v{version}/powershell-lts_{version}-1.deb_amd64.deb",
                },
            },
        },
        "post_install": [
            '{binary} -NoProfile -NonInteractive -Command "Install-Module -Name '
            'Terminal-Icons, PSReadLine -Repository PSGallery -Scope CurrentUser -Force"',
        ],
        "profile_path": "~/.config/powershell/Microsoft.PowerShell_profile.ps1",
        "profile_lines": [
            "if (Get-Module -ListAvailable -Name Terminal-Icons) { Import-Module -Name Terminal-Icons }",
            "if (Get-Module -ListAvailable -Name PSReadLine) {",
            "    Set-PSReadLineOption -PredictionSource History -PredictionViewStyle ListView "
            "-ErrorAction SilentlyContinue",
            "}",
            "if (Get-Command oh-my-posh -ErrorAction SilentlyContinue) {",
            "    oh-my-posh init pwsh | Invoke-Expression",
            "}",
        ],
    },
    {
        "name": "nodejs",
        "description": "Node.js from the NodeSource apt repository",
        "channels": ["lts", "latest"],
        "channel": "lts",
        "detect": {"binary": "node"},
        "resolver": {"kind": "nodejs"},
        "installer": {
            "kind": "apt",
            "options": {
                "packages": ["nodejs={version}-1nodesource1"],
                "setup_script_url": "https://deb.nodesource.com/setup_{major}.x",
            },
        },
    },
    {
        "name": "uv",
        "description": "uv Python package manager, plus a managed Python",
        "channels": ["latest"],
        "channel": "latest",
        "detect": {"binary": "~/.local/bin/uv"},
        "resolver": {"kind": "github", "options": {"repo": "astral-sh/uv"}},
        "installer": {
            "kind": "script",
            "options": {
                "url": "https://astral.sh/uv/{version}/install.sh",
                "env": {"UV_NO_MODIFY_PATH": "1"},
            },
        },
        "profile_lines": ['export PATH="$HOME/.local/bin:$PATH"'],
        "post_install": ["{home}/.local/bin/uv python install"],
    },
    {
        "name": "oh-my-posh",
        "description": "oh-my-posh prompt with bash integration",
        "channels": ["latest"],
        "channel": "latest",
        "required": False,
        "detect": {"binary": "~/.local/bin/oh-my-posh", "version_args": ["version"]},
        "resolver": {"kind": "github", "options": {"repo": "JanDeDobbeleer/oh-my-posh"}},
        "installer": {
            "kind": "script",
            "options": {
                "url": "https://ohmyposh.dev/install.sh",
                "args": ["-d", "{home}/.local/bin"],
            },
        },
        "profile_lines": [
            "if command -v oh-my-posh >/dev/null 2>&1; then",
            '    eval "$(oh-my-posh init bash)"',
            "fi",
        ],
    },
]

NVM_NODEJS_TOOL: Dict[str, Any] = {
    "name": "nodejs",
    "description": "Node.js managed by nvm in the user's home",
    "channels": ["lts", "latest"],
    "channel": "lts",
    "detect": {"binary": "~/.nvm/current/bin/node"},
    "resolver": {"kind": "nodejs"},
    "installer": {"kind": "nvm"},
    "profile_lines": [
        'export NVM_DIR="$HOME/.nvm"',
        '[ -s "$NVM_DIR/nvm.sh" ] && . "$NVM_DIR/nvm.sh"',
        '[ -s "$NVM_DIR/bash_completion" ] && . "$NVM_DIR/bash_completion"',
    ],
}

NODEJS_METHODS: Dict[str, Dict[str, Any]] = {
    "nodesource": next(data for data in DEFAULT_TOOLS if data["name"] == "nodejs"),
    "nvm": NVM_NODEJS_TOOL,
}


def default_tools() -> List[ToolSpec]:
    return [ToolSpec(**data) for data in DEFAULT_TOOLS]


def apply_nodejs_method(tools: List[ToolSpec], method: Optional[str]) -> List[ToolSpec]:
    """
    Swap the ``nodejs`` tool for the definition installing it via ``method``.

    The tool keeps its channel and required flag.
    """
    if not method:
        return list(tools)
    if method not in NODEJS_METHODS:
        raise ConfigError(
            f"Unknown Node.js install method {method!r} "
            f"(expected one of {', '.join(NODEJS_METHODS)})"
        )
    result = []
    for tool in tools:
        if tool.name == "nodejs":
            data = dict(NODEJS_METHODS[method], channel=tool.channel, required=tool.required)
            try:
                tool = ToolSpec(**data)
            except ValidationError as e:
                raise ConfigError(f"nodejs cannot use {method}: {e}") from e
        result.append(tool)
    return result


def select_tools(tools: List[ToolSpec], only: Optional[Iterable[str]]) -> List[ToolSpec]:
    """
    Keep only the named tools, preserving catalog order.

    Raises:
        ConfigError: a requested name is unknown
    """
    if not only:
        return list(tools)
    wanted = [name.strip() for name in only if name.strip()]
    known = {tool.name for tool in tools}
    unknown = [name for name in wanted if name not in known]
    if unknown:
        raise ConfigError(
            f"Unknown tools: {', '.join(unknown)} (known: {', '.join(sorted(known))})"
        )
    return [tool for tool in tools if tool.name in wanted]


def build_entries(tools: List[ToolSpec],
                  metadata_timeout: float = 30.0,
                  download_timeout: float = 300.0,
                  command_timeout: float = 900.0,
                  retry_attempts: int = 1,
                  retry_delay_seconds: float = 2.0,
                  runner: Optional[CommandRunner] = None,
                  profile_editor: Optional[ProfileEditor] = None) -> List[ToolEntry]:
    """
    Instantiate the resolver and executor each tool refers to.

    All executors share one runner and one profile editor so that profile
    writes go through a single writer.

    Raises:
        ConfigError: unknown resolver/installer kind or bad options
    """
    runner = runner or CommandRunner(default_timeout=command_timeout)
    profile_editor = profile_editor or ProfileEditor()

    entries = []
    for tool in tools:
        resolver_cls = RESOLVER_KINDS.get(tool.resolver.kind)
        if resolver_cls is None:
            raise ConfigError(f"{tool.name}: unknown resolver kind {tool.resolver.kind!r}")
        executor_cls = EXECUTOR_KINDS.get(tool.installer.kind)
        if executor_cls is None:
            raise ConfigError(f"{tool.name}: unknown installer kind {tool.installer.kind!r}")

        resolver = resolver_cls(
            tool.resolver.options,
            timeout=metadata_timeout,
            retry_attempts=retry_attempts,
            retry_delay_seconds=retry_delay_seconds
        )
        executor = executor_cls(
            tool.installer.options,
            runner=runner,
            profile_editor=profile_editor,
            download_timeout=download_timeout,
            retry_attempts=retry_attempts,
            retry_delay_seconds=retry_delay_seconds
        )
        entries.append(ToolEntry(spec=tool, resolver=resolver, executor=executor))
    return entries
