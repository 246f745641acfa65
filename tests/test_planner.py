"""Tests for the step planner decision table."""

import pytest

from provisioner.core.planner import StepPlanner, versions_equal
from provisioner.models.plan import PlanAction, ProbeResult


@pytest.fixture
def planner():
    return StepPlanner()


@pytest.mark.parametrize("force", [False, True])
def test_absent_tool_is_installed_regardless_of_force(planner, make_tool, force):
    plan = planner.plan(make_tool(), ProbeResult(installed=False), "7.4.6", force_reinstall=force)
    assert plan.action == PlanAction.INSTALL
    assert plan.target_version == "7.4.6"


def test_current_tool_is_skipped(planner, make_tool):
    plan = planner.plan(make_tool(), ProbeResult(installed=True, version="7.4.6"), "7.4.6")
    assert plan.action == PlanAction.SKIP
    assert not plan.mutates


def test_current_tool_is_reinstalled_when_forced(planner, make_tool):
    plan = planner.plan(
        make_tool(), ProbeResult(installed=True, version="7.4.6"), "7.4.6", force_reinstall=True
    )
    assert plan.action == PlanAction.REINSTALL


@pytest.mark.parametrize("force", [False, True])
def test_outdated_tool_is_upgraded(planner, make_tool, force):
    plan = planner.plan(
        make_tool(), ProbeResult(installed=True, version="7.4.5"), "7.4.6", force_reinstall=force
    )
    assert plan.action == PlanAction.UPGRADE
    assert "7.4.5" in plan.reason


@pytest.mark.parametrize("installed_version", [None, "garbage", "7.4.x"])
def test_unknown_or_malformed_version_plans_upgrade(planner, make_tool, installed_version):
    plan = planner.plan(
        make_tool(), ProbeResult(installed=True, version=installed_version), "7.4.6"
    )
    assert plan.action == PlanAction.UPGRADE


def test_plan_records_channel(planner, make_tool):
    plan = planner.plan(make_tool(channel="lts"), ProbeResult(installed=False), "7.5.0", channel="latest")
    assert plan.channel == "latest"


def test_versions_equal_uses_version_ordering():
    assert versions_equal("v7.4.6", "7.4.6")
    assert versions_equal("8.0", "8.0.0")
    assert not versions_equal("1.10.0", "1.9.0")
    assert not versions_equal(None, "1.0.0")
    assert not versions_equal("not-a-version", "not-a-version")
