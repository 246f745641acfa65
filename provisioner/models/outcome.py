"""
Execution, verification and run outcome models.
"""

from enum import Enum
from typing import Optional, List, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field

from .tool import ToolState
from .plan import Plan


class ErrorKind(str, Enum):
    """Kinds of failure recorded in a step outcome."""
    CONFIG = "ConfigError"
    PRECONDITION = "PreconditionError"
    RESOLUTION = "ResolutionError"
    PROBE = "ProbeError"
    DOWNLOAD = "DownloadError"
    PACKAGE_MANAGER = "PackageManagerError"
    PERMISSION = "PermissionError"
    PROFILE_WRITE = "ProfileWriteError"
    TIMEOUT = "TimeoutError"
    VERIFICATION = "VerificationError"


class ExecutionResult(BaseModel):
    log_excerpt: str = ""
    profile_changed: bool = False


class VerifyResult(BaseModel):
    ok: bool
    observed_version: Optional[str] = None


class StepOutcome(BaseModel):
    """Immutable record of what happened to one tool."""
    tool: str
    required: bool = True
    plan: Optional[Plan] = None
    state: ToolState
    success: bool
    error_kind: Optional[ErrorKind] = None
    phase: Optional[ToolState] = Field(None, description="State in which the failure happened")
    message: str = ""
    duration_ms: int = 0
    observed_version: Optional[str] = None
    log_excerpt: str = ""

    class Config:
        frozen = True

    def summary(self) -> Dict[str, Any]:
        data = {
            "tool": self.tool,
            "required": self.required,
            "state": self.state.value,
            "success": self.success,
            "duration_ms": self.duration_ms,
        }
        if self.plan:
            data["plan"] = self.plan.summary()
        if self.error_kind:
            data["error_kind"] = self.error_kind.value
            data["phase"] = self.phase.value if self.phase else None
        if self.message:
            data["message"] = self.message
        if self.observed_version:
            data["observed_version"] = self.observed_version
        if self.log_excerpt:
            data["log_excerpt"] = self.log_excerpt
        return data


class RunReport(BaseModel):
    """Ordered outcomes of one sequencer run."""
    outcomes: List[StepOutcome] = Field(default_factory=list)
    not_run: List[str] = Field(default_factory=list, description="Tools never reached")
    not_run_required: List[str] = Field(default_factory=list)
    dry_run: bool = False
    stopped: bool = False
    preflight_error: Optional[str] = Field(None, description="Why the environment checks failed")
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    def add(self, outcome: StepOutcome) -> None:
        self.outcomes.append(outcome)

    def complete(self) -> None:
        self.completed_at = datetime.utcnow()

    @property
    def failed_required(self) -> List[StepOutcome]:
        return [o for o in self.outcomes if not o.success and o.required]

    @property
    def succeeded(self) -> bool:
        return not self.preflight_error and not self.failed_required and not self.not_run_required

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    def outcome_for(self, tool_name: str) -> Optional[StepOutcome]:
        for outcome in self.outcomes:
            if outcome.tool == tool_name:
                return outcome
        return None

    def summary(self) -> Dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "stopped": self.stopped,
            "preflight_error": self.preflight_error,
            "succeeded": self.succeeded,
            "exit_code": self.exit_code,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "outcomes": [o.summary() for o in self.outcomes],
            "not_run": list(self.not_run),
        }
