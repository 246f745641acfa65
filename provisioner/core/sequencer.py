"""
Provisioning sequencer - runs the probe/plan/execute/verify cycle per tool.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from .planner import StepPlanner
from .preflight import Preflight
from .probe import StateProbe
from .verifier import Verifier
from ..errors import ConfigError, ProvisionError, VerificationError
from ..executors.base import Executor
from ..models.outcome import ErrorKind, RunReport, StepOutcome
from ..models.plan import Plan, PlanAction
from ..models.tool import ToolSpec, ToolState
from ..resolvers.base import VersionResolver
from ..utils.logging import format_failure


# Error kind recorded for unexpected exceptions, by the state they escaped from
UNEXPECTED_ERROR_KINDS = {
    ToolState.PROBING: ErrorKind.PROBE,
    ToolState.PLANNING: ErrorKind.RESOLUTION,
    ToolState.EXECUTING: ErrorKind.PACKAGE_MANAGER,
    ToolState.VERIFYING: ErrorKind.VERIFICATION,
}


@dataclass
class ToolEntry:
    """A tool together with the resolver and executor serving it."""
    spec: ToolSpec
    resolver: VersionResolver
    executor: Executor


class ProvisioningSequencer:
    """Provisions an ordered list of tools, one at a time."""

    def __init__(self,
                 entries: List[ToolEntry],
                 probe: Optional[StateProbe] = None,
                 planner: Optional[StepPlanner] = None,
                 verifier: Optional[Verifier] = None,
                 force_reinstall: bool = False,
                 continue_on_error: bool = False,
                 dry_run: bool = False,
                 channel_override: Optional[str] = None,
                 preflight: Optional[Preflight] = None):
        """
        Initialize the sequencer.

        Args:
            entries: Tools in processing order
            probe: State probe shared by planning and verification
            planner: Step planner
            verifier: Post-install verifier (defaults to one using ``probe``)
            force_reinstall: Reinstall tools that are already current
            continue_on_error: Keep going after a required tool fails
            dry_run: Plan only; never execute or verify
            channel_override: Channel used instead of each tool's own, for
                the tools that offer it
            preflight: Environment checks run before the first tool
        """
        self.logger = logging.getLogger(__name__)
        self.entries = list(entries)
        self.probe = probe or StateProbe()
        self.planner = planner or StepPlanner()
        self.verifier = verifier or Verifier(self.probe)
        self.force_reinstall = force_reinstall
        self.continue_on_error = continue_on_error
        self.dry_run = dry_run
        self.channel_override = channel_override
        self.preflight = preflight

        self.states: Dict[str, ToolState] = {e.spec.name: ToolState.PENDING for e in self.entries}
        self._stop_requested = False

    def request_stop(self) -> None:
        """Stop after the tool currently in flight finishes."""
        if not self._stop_requested:
            self.logger.warning("Stop requested; finishing the current tool first")
        self._stop_requested = True

    def channel_for(self, spec: ToolSpec) -> str:
        if self.channel_override and self.channel_override in spec.channels:
            return self.channel_override
        return spec.channel

    def validate(self) -> None:
        """
        Check every tool's channel before anything runs.

        The channel override applies to the tools that list it; the others
        keep their own channel.

        Raises:
            ConfigError: duplicate tool, no tool offers the override, or a
                channel is not accepted by its tool or resolver
        """
        seen = set()
        kept = []
        for entry in self.entries:
            spec = entry.spec
            if spec.name in seen:
                raise ConfigError(f"Tool {spec.name} is listed twice")
            seen.add(spec.name)

            channel = self.channel_for(spec)
            if self.channel_override and channel != self.channel_override:
                kept.append(f"{spec.name} ({channel})")
            if channel not in spec.channels:
                raise ConfigError(
                    f"{spec.name} does not offer channel {channel!r} "
                    f"(available: {', '.join(spec.channels)})"
                )
            entry.resolver.check_channel(channel)

        if kept and len(kept) == len(self.entries):
            raise ConfigError(f"No selected tool offers channel {self.channel_override!r}")
        if kept:
            self.logger.info(
                f"Channel {self.channel_override} not offered by: {', '.join(kept)}; "
                f"using their own channel"
            )

    async def run(self) -> RunReport:
        """
        Process every tool in order.

        Returns:
            The run report

        Raises:
            ConfigError: invalid configuration; nothing further is processed
        """
        self.validate()
        mode = " (dry run)" if self.dry_run else ""
        self.logger.info(f"Provisioning {len(self.entries)} tools{mode}")

        report = RunReport(dry_run=self.dry_run)
        if self.preflight and not await self._run_preflight(report):
            self._mark_not_run(report, self.entries)
            report.complete()
            self._log_summary(report)
            return report

        for index, entry in enumerate(self.entries):
            outcome = await self._process(entry)
            report.add(outcome)

            remaining = self.entries[index + 1:]
            # Cooperative checkpoint between tool cycles
            if self._stop_requested:
                report.stopped = True
            if not remaining:
                break
            if not outcome.success and outcome.required and not self.continue_on_error:
                self.logger.error(f"Halting after required tool {entry.spec.name} failed")
                self._mark_not_run(report, remaining)
                break
            if report.stopped:
                self._mark_not_run(report, remaining)
                break

        report.complete()
        self._log_summary(report)
        return report

    async def _run_preflight(self, report: RunReport) -> bool:
        needs_elevation = any(entry.executor.needs_root for entry in self.entries)
        try:
            await self.preflight.run(needs_elevation=needs_elevation, dry_run=self.dry_run)
        except ProvisionError as e:
            self.logger.error(format_failure("preflight", "preflight", e.kind.value, e.message))
            report.preflight_error = f"{e.kind.value}: {e.message}"
            return False
        return True

    async def _process(self, entry: ToolEntry) -> StepOutcome:
        """
        Run one tool through its state machine.

        Probing, resolving and verifying block on subprocesses and HTTP, so
        they run in a worker thread to keep the loop free for stop signals.
        """
        started = time.monotonic()
        name = entry.spec.name
        channel = self.channel_for(entry.spec)
        spec = entry.spec if channel == entry.spec.channel else entry.spec.with_channel(channel)
        plan: Optional[Plan] = None

        try:
            self._transition(name, ToolState.PROBING)
            probe = await asyncio.to_thread(self.probe.probe, spec, channel)

            self._transition(name, ToolState.PLANNING)
            target = await asyncio.to_thread(entry.resolver.resolve, channel)
            plan = self.planner.plan(spec, probe, target, self.force_reinstall, channel)
            self.logger.info(f"{name}: {plan.action.value} {plan.target_version} - {plan.reason}")

            if plan.action == PlanAction.SKIP:
                self._transition(name, ToolState.SKIPPED)
                return self._outcome(entry, plan, started, observed_version=probe.version)

            if self.dry_run:
                self._transition(name, ToolState.PLANNED)
                return self._outcome(entry, plan, started, observed_version=probe.version)

            self._transition(name, ToolState.EXECUTING)
            execution = await entry.executor.execute(plan)

            self._transition(name, ToolState.VERIFYING)
            verification = await asyncio.to_thread(
                self.verifier.verify, spec, plan.target_version, channel
            )
            if not verification.ok:
                raise VerificationError(
                    f"Expected {name} {plan.target_version} after {plan.action.value}, "
                    f"found {verification.observed_version or 'no usable installation'}",
                    output=execution.log_excerpt
                )

            self._transition(name, ToolState.DONE)
            self.logger.info(f"{name}: {verification.observed_version} installed and verified")
            return self._outcome(
                entry, plan, started,
                observed_version=verification.observed_version,
                log_excerpt=execution.log_excerpt
            )

        except ProvisionError as e:
            return self._failure(entry, plan, started, e.kind, e.message, e.output)
        except Exception as e:
            self.logger.error(f"Unexpected error provisioning {name}: {e}", exc_info=True)
            kind = UNEXPECTED_ERROR_KINDS.get(self.states[name], ErrorKind.PACKAGE_MANAGER)
            return self._failure(entry, plan, started, kind, f"{type(e).__name__}: {e}")

    def _transition(self, name: str, state: ToolState) -> None:
        self.logger.debug(f"{name}: {self.states[name].value} -> {state.value}")
        self.states[name] = state

    def _outcome(self, entry: ToolEntry, plan: Plan, started: float,
                 observed_version: Optional[str] = None, log_excerpt: str = "") -> StepOutcome:
        return StepOutcome(
            tool=entry.spec.name,
            required=entry.spec.required,
            plan=plan,
            state=self.states[entry.spec.name],
            success=True,
            duration_ms=_elapsed_ms(started),
            observed_version=observed_version,
            log_excerpt=log_excerpt
        )

    def _failure(self, entry: ToolEntry, plan: Optional[Plan], started: float,
                 kind: ErrorKind, message: str, output: str = "") -> StepOutcome:
        name = entry.spec.name
        phase = self.states[name]
        self.logger.error(format_failure(name, phase.value, kind.value, message))
        self._transition(name, ToolState.FAILED)
        excerpt = "\n".join(output.strip().splitlines()[-20:]) if output else ""
        return StepOutcome(
            tool=name,
            required=entry.spec.required,
            plan=plan,
            state=ToolState.FAILED,
            success=False,
            error_kind=kind,
            phase=phase,
            message=message,
            duration_ms=_elapsed_ms(started),
            log_excerpt=excerpt
        )

    def _mark_not_run(self, report: RunReport, remaining: List[ToolEntry]) -> None:
        for entry in remaining:
            report.not_run.append(entry.spec.name)
            if entry.spec.required:
                report.not_run_required.append(entry.spec.name)
        self.logger.warning(f"Not processed: {', '.join(report.not_run)}")

    def _log_summary(self, report: RunReport) -> None:
        self.logger.info("=" * 60)
        self.logger.info("SUMMARY")
        self.logger.info("=" * 60)
        for outcome in report.outcomes:
            action = outcome.plan.action.value if outcome.plan else "-"
            target = outcome.plan.target_version if outcome.plan else "-"
            flag = "" if outcome.required else " (optional)"
            self.logger.info(
                f"{outcome.tool}{flag}: {outcome.state.value} "
                f"[{action} {target}] in {outcome.duration_ms} ms"
            )
        for name in report.not_run:
            self.logger.info(f"{name}: not run")
        self.logger.info(f"Result: {'success' if report.succeeded else 'failure'}")
        self.logger.info("=" * 60)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
