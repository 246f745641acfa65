"""
Step planning: decides what to do with a tool.
"""

from typing import Optional

from packaging.version import InvalidVersion, Version

from ..models.plan import Plan, PlanAction, ProbeResult
from ..models.tool import ToolSpec
from ..resolvers.base import strip_tag_prefix


def versions_equal(installed: Optional[str], target: Optional[str]) -> bool:
    """
    Compare two version strings by version ordering.

    Missing or unparseable versions never compare equal.
    """
    if not installed or not target:
        return False
    try:
        return Version(strip_tag_prefix(installed)) == Version(strip_tag_prefix(target))
    except InvalidVersion:
        return False


class StepPlanner:
    """Pure decision table from probe result to plan."""

    def plan(self,
             tool: ToolSpec,
             probe: ProbeResult,
             target_version: str,
             force_reinstall: bool = False,
             channel: Optional[str] = None) -> Plan:
        channel = channel or tool.channel

        if not probe.installed:
            action = PlanAction.INSTALL
            reason = f"{tool.name} is not installed"
        elif versions_equal(probe.version, target_version):
            if force_reinstall:
                action = PlanAction.REINSTALL
                reason = f"{tool.name} {probe.version} is current; reinstall forced"
            else:
                action = PlanAction.SKIP
                reason = f"{tool.name} {probe.version} is already the {channel} version"
        else:
            action = PlanAction.UPGRADE
            reason = (
                f"{tool.name} {probe.version or 'unknown version'} differs from "
                f"{channel} {target_version}"
            )

        return Plan(
            tool=tool,
            action=action,
            target_version=target_version,
            channel=channel,
            reason=reason
        )
