"""
Data models for the provisioning system.
"""

from .tool import ToolSpec, ToolState, DetectSpec, ComponentRef
from .plan import ProbeResult, Plan, PlanAction
from .outcome import ErrorKind, ExecutionResult, VerifyResult, StepOutcome, RunReport

__all__ = [
    "ToolSpec",
    "ToolState",
    "DetectSpec",
    "ComponentRef",
    "ProbeResult",
    "Plan",
    "PlanAction",
    "ErrorKind",
    "ExecutionResult",
    "VerifyResult",
    "StepOutcome",
    "RunReport"
]
