"""Shared fakes and fixtures.

The fakes model the machine as a dict of installed tool versions so that
sequencer behavior can be tested without touching the real system.
"""

from typing import Dict, List, Optional

import pytest

from provisioner.core.probe import StateProbe
from provisioner.core.sequencer import ToolEntry
from provisioner.executors.base import Executor
from provisioner.models.outcome import ExecutionResult
from provisioner.models.plan import Plan, ProbeResult
from provisioner.models.tool import ToolSpec
from provisioner.resolvers.base import VersionResolver


class FakeSystem:
    def __init__(self, installed: Optional[Dict[str, str]] = None):
        self.installed = dict(installed or {})


class FakeProbe(StateProbe):
    def __init__(self, system: FakeSystem):
        super().__init__()
        self.system = system
        self.calls: List[str] = []

    def probe(self, tool, channel=None):
        self.calls.append(tool.name)
        version = self.system.installed.get(tool.name)
        return ProbeResult(installed=version is not None, version=version)


class FakeResolver(VersionResolver):
    kind = "fake"

    def __init__(self, versions: Dict[str, str], failures: int = 0, error=TimeoutError):
        super().__init__({}, retry_attempts=1, retry_delay_seconds=0)
        self.versions = versions
        self.channels = tuple(versions)
        self.failures = failures
        self.error = error
        self.calls = 0

    def _resolve(self, channel):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error("timed out")
        return self.versions[channel]


class FakeExecutor(Executor):
    kind = "fake"

    def __init__(self, system: FakeSystem, fail_with: Optional[Exception] = None,
                 installs: Optional[str] = None, on_execute=None):
        super().__init__({})
        self.system = system
        self.fail_with = fail_with
        self.installs = installs
        self.on_execute = on_execute
        self.plans: List[Plan] = []

    async def execute(self, plan):
        self.plans.append(plan)
        if self.on_execute:
            self.on_execute(plan)
        if self.fail_with:
            raise self.fail_with
        self.system.installed[plan.tool.name] = self.installs or plan.target_version
        return ExecutionResult(log_excerpt=f"installed {plan.tool.name}")


def build_tool(name: str = "pwsh", channel: str = "lts",
               channels=("lts", "latest"), required: bool = True, **extra) -> ToolSpec:
    data = {
        "name": name,
        "channel": channel,
        "channels": list(channels),
        "required": required,
        "detect": {"binary": name},
        "resolver": {"kind": "fake"},
        "installer": {"kind": "fake"},
    }
    data.update(extra)
    return ToolSpec(**data)


@pytest.fixture
def system():
    return FakeSystem()


@pytest.fixture
def make_tool():
    return build_tool


@pytest.fixture
def make_entry(system):
    def _make(name="pwsh", versions=None, failures=0, channel="lts", required=True,
              executor=None, **executor_kwargs):
        versions = versions or {"lts": "7.4.6", "latest": "7.5.0"}
        spec = build_tool(name, channel=channel, channels=tuple(versions), required=required)
        resolver = FakeResolver(versions, failures=failures)
        executor = executor or FakeExecutor(system, **executor_kwargs)
        return ToolEntry(spec=spec, resolver=resolver, executor=executor)
    return _make


@pytest.fixture
def fake_state(system):
    return FakeProbe(system)
