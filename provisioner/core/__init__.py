"""
Core modules for the provisioning system.
"""

from .probe import StateProbe
from .planner import StepPlanner, versions_equal
from .verifier import Verifier
from .preflight import Preflight
from .sequencer import ProvisioningSequencer, ToolEntry

__all__ = [
    "StateProbe",
    "StepPlanner",
    "versions_equal",
    "Verifier",
    "Preflight",
    "ProvisioningSequencer",
    "ToolEntry"
]
