"""
Tool-related data models.
"""

from enum import Enum
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field, validator


class ToolState(str, Enum):
    """State of a tool within one provisioning run."""
    PENDING = "pending"
    PROBING = "probing"
    PLANNING = "planning"
    SKIPPED = "skipped"
    EXECUTING = "executing"
    VERIFYING = "verifying"
    DONE = "done"
    FAILED = "failed"
    PLANNED = "planned"


class ComponentRef(BaseModel):
    """Reference to a resolver or executor implementation by kind."""
    kind: str = Field(..., description="Registered implementation name")
    options: Dict[str, Any] = Field(default_factory=dict, description="Implementation options")

    class Config:
        frozen = True


class DetectSpec(BaseModel):
    """How to find a tool on the system and read its version."""
    binary: str = Field(..., description="Executable name on PATH or path (~ allowed)")
    version_args: List[str] = Field(default_factory=lambda: ["--version"])
    version_regex: str = Field(
        default=r"v?(\d+\.\d+\.\d+(?:[-.][0-9A-Za-z.]+)?)",
        description="Regex whose first group is the version"
    )
    channel_binaries: Dict[str, str] = Field(
        default_factory=dict,
        description="Binary override per channel"
    )
    timeout_seconds: float = Field(default=15.0)

    class Config:
        frozen = True

    def binary_for(self, channel: Optional[str]) -> str:
        if channel and channel in self.channel_binaries:
            return self.channel_binaries[channel]
        return self.binary


class ToolSpec(BaseModel):
    """Static description of an installable tool."""
    name: str = Field(..., description="Tool name")
    channels: List[str] = Field(default_factory=lambda: ["latest"], description="Accepted channels")
    channel: str = Field(..., description="Version channel to provision")
    required: bool = Field(default=True, description="Whether failure fails the run")
    description: Optional[str] = Field(None, description="Tool description")
    detect: DetectSpec
    resolver: ComponentRef
    installer: ComponentRef
    profile_path: str = Field(default="~/.bashrc", description="Shell profile to edit")
    profile_lines: List[str] = Field(default_factory=list, description="Lines of the profile block")
    post_install: List[str] = Field(default_factory=list, description="Shell commands run after install")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "name": "nodejs",
                "channel": "lts",
                "channels": ["lts", "latest"],
                "detect": {"binary": "node"},
                "resolver": {"kind": "nodejs"},
                "installer": {
                    "kind": "apt",
                    "options": {
                        "packages": ["nodejs"],
                        "setup_script_url": "https://deb.nodesource.com/setup_{major}.x"
                    }
                }
            }
        }

    @validator('name')
    def validate_name(cls, v):
        if not v or not v.replace("-", "").replace("_", "").isalnum():
            raise ValueError(f"Invalid tool name: {v!r}")
        return v

    @validator('channel')
    def validate_channel_listed(cls, v, values):
        channels = values.get("channels")
        if channels and v not in channels:
            raise ValueError(f"Channel {v!r} is not one of {channels}")
        return v

    def with_channel(self, channel: str) -> "ToolSpec":
        """Return a copy provisioning another channel."""
        return self.model_copy(update={"channel": channel})
