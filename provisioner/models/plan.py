"""
Probe and plan models.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from .tool import ToolSpec


class ProbeResult(BaseModel):
    """Observed local state of a tool."""
    installed: bool
    version: Optional[str] = None
    raw_output: str = ""

    class Config:
        frozen = True


class PlanAction(str, Enum):
    SKIP = "skip"
    INSTALL = "install"
    UPGRADE = "upgrade"
    REINSTALL = "reinstall"


class Plan(BaseModel):
    """The action decided for one tool."""
    tool: ToolSpec
    action: PlanAction
    target_version: str
    channel: str
    reason: str = Field(..., description="Human-readable reason for the action")

    class Config:
        frozen = True

    @property
    def mutates(self) -> bool:
        return self.action != PlanAction.SKIP

    def summary(self) -> dict:
        return {
            "tool": self.tool.name,
            "action": self.action.value,
            "target_version": self.target_version,
            "channel": self.channel,
            "reason": self.reason,
        }
