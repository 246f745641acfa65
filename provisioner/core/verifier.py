"""
Post-execution verification.
"""

import logging
from typing import Optional

from .planner import versions_equal
from .probe import StateProbe
from ..models.outcome import VerifyResult
from ..models.tool import ToolSpec


class Verifier:
    """Re-probes a tool and checks it matches the expected version."""

    def __init__(self, probe: Optional[StateProbe] = None):
        self.logger = logging.getLogger(__name__)
        self.probe = probe or StateProbe()

    def verify(self, tool: ToolSpec, expected_version: str,
               channel: Optional[str] = None) -> VerifyResult:
        result = self.probe.probe(tool, channel)
        ok = result.installed and versions_equal(result.version, expected_version)
        if not ok:
            self.logger.warning(
                f"{tool.name}: expected {expected_version}, observed "
                f"{result.version if result.installed else 'nothing installed'}"
            )
        return VerifyResult(ok=ok, observed_version=result.version)
