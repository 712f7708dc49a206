"""
Report coordinator.

One reporting cycle is a small state machine:

checksum
Report the current schema inventory without the full payload. When the
collector answers PreconditionFailed, report the legacy schema inventory
instead, still checksum only.

escalate
Entered only when the successful call asked for the full inventory. Resend on
the operation that succeeded, now with the full payload, with the same
fallback rule. A failure here ends the cycle.

done
Terminal phase.

No state survives a cycle. Every cycle starts with the current schema, even on
hosts where it was rejected last time; the extra round trip is accepted to
keep the coordinator stateless.

Errors other than PreconditionFailed never switch schema. They end the cycle,
are logged, and are returned on the result unchanged. Retrying is the job of
the APICaller retry policy and of the next scheduled cycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from guest_inventory.core.errors import PreconditionFailed, ReportError
from guest_inventory.report.base import APICaller, CycleContext, ReportResponse, ReportSchema
from guest_inventory.schema.inventory import Inventory
from guest_inventory.schema.vm_inventory import VmInventory

LOGGER = logging.getLogger(__name__)


class ReportPhase(StrEnum):
    checksum = "checksum"
    escalate = "escalate"
    done = "done"


@dataclass(frozen=True)
class ReportCall:
    """
    One call made to the APICaller.

    error_code is None when the call succeeded.
    """

    schema: ReportSchema
    full: bool
    error_code: str | None = None


@dataclass(frozen=True)
class ReportCycleResult:
    """
    Outcome of one reporting cycle.

    ok
    True when every call the cycle needed succeeded.

    phase
    Always done once run_cycle returns.

    failed_phase
    Phase in which the cycle failed, None on success.

    schema
    Schema of the last successful call, None when nothing succeeded.

    full_sent
    True when the full inventory was delivered.

    calls
    Every call in order, for audit and tests.

    error
    The error that ended the cycle, unchanged.
    """

    ok: bool
    phase: ReportPhase
    failed_phase: ReportPhase | None
    schema: ReportSchema | None
    full_sent: bool
    calls: tuple[ReportCall, ...]
    error: ReportError | None = None


class ReportCoordinator:
    """Run the checksum then escalate protocol against an APICaller."""

    def __init__(self, caller: APICaller) -> None:
        self._caller = caller

    def run_cycle(
        self,
        ctx: CycleContext,
        inventory: Inventory,
        vm_inventory: VmInventory,
    ) -> ReportCycleResult:
        """
        Execute a single reporting cycle.

        Steps
        1) checksum report with fallback
        2) escalate to a full report when asked
        3) done

        Raises CycleCancelled when ctx is cancelled before a call.
        """
        calls: list[ReportCall] = []

        LOGGER.debug("cycle %s: reporting inventory checksum", ctx.cycle_id)
        try:
            schema, response = self._report(
                ctx, ReportSchema.current, inventory, vm_inventory, False, calls
            )
        except ReportError as exc:
            LOGGER.error("cycle %s: error reporting inventory checksum: %s", ctx.cycle_id, exc)
            return ReportCycleResult(
                ok=False,
                phase=ReportPhase.done,
                failed_phase=ReportPhase.checksum,
                schema=None,
                full_sent=False,
                calls=tuple(calls),
                error=exc,
            )

        if not response.report_full_inventory:
            LOGGER.info("cycle %s: inventory checksum accepted (%s schema)", ctx.cycle_id, schema)
            return ReportCycleResult(
                ok=True,
                phase=ReportPhase.done,
                failed_phase=None,
                schema=schema,
                full_sent=False,
                calls=tuple(calls),
            )

        LOGGER.info("cycle %s: collector asked for full inventory (%s schema)", ctx.cycle_id, schema)
        checksum_schema = schema
        try:
            schema, response = self._report(ctx, schema, inventory, vm_inventory, True, calls)
        except ReportError as exc:
            LOGGER.error("cycle %s: error reporting full inventory: %s", ctx.cycle_id, exc)
            return ReportCycleResult(
                ok=False,
                phase=ReportPhase.done,
                failed_phase=ReportPhase.escalate,
                schema=checksum_schema,
                full_sent=False,
                calls=tuple(calls),
                error=exc,
            )

        LOGGER.info("cycle %s: full inventory reported (%s schema)", ctx.cycle_id, schema)
        return ReportCycleResult(
            ok=True,
            phase=ReportPhase.done,
            failed_phase=None,
            schema=schema,
            full_sent=True,
            calls=tuple(calls),
        )

    def _report(
        self,
        ctx: CycleContext,
        start: ReportSchema,
        inventory: Inventory,
        vm_inventory: VmInventory,
        full: bool,
        calls: list[ReportCall],
    ) -> tuple[ReportSchema, ReportResponse]:
        """
        Report starting at start, falling back once from current to legacy.

        Returns the schema that succeeded and its response.
        """
        if start == ReportSchema.current:
            try:
                return ReportSchema.current, self._call(
                    ctx, ReportSchema.current, inventory, vm_inventory, full, calls
                )
            except PreconditionFailed as exc:
                LOGGER.warning(
                    "cycle %s: current schema rejected, falling back to legacy schema: %s",
                    ctx.cycle_id,
                    exc,
                )

        return ReportSchema.legacy, self._call(
            ctx, ReportSchema.legacy, inventory, vm_inventory, full, calls
        )

    def _call(
        self,
        ctx: CycleContext,
        schema: ReportSchema,
        inventory: Inventory,
        vm_inventory: VmInventory,
        full: bool,
        calls: list[ReportCall],
    ) -> ReportResponse:
        ctx.raise_if_cancelled()
        LOGGER.debug("cycle %s: report_%s full=%s", ctx.cycle_id, schema, full)
        try:
            if schema == ReportSchema.current:
                response = self._caller.report_current(ctx, inventory, full)
            else:
                response = self._caller.report_legacy(ctx, vm_inventory, full)
        except ReportError as exc:
            calls.append(ReportCall(schema=schema, full=full, error_code=exc.code))
            raise
        calls.append(ReportCall(schema=schema, full=full))
        return response
