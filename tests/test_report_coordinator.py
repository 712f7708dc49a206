import logging

import pytest

from guest_inventory.core.errors import CycleCancelled, PreconditionFailed, ReportError
from guest_inventory.report.base import CycleContext, ReportResponse, ReportSchema
from guest_inventory.report.coordinator import ReportCall, ReportCoordinator, ReportPhase
from guest_inventory.report.mock import InMemoryApiCaller
from guest_inventory.schema.inventory import Inventory, OsInfo
from guest_inventory.schema.vm_inventory import VmInventory, VmOsInfo


def _run(caller: InMemoryApiCaller, ctx: CycleContext | None = None):
    coordinator = ReportCoordinator(caller)
    return coordinator.run_cycle(
        ctx or CycleContext(),
        Inventory(os_info=OsInfo(hostname="h1")),
        VmInventory(os_info=VmOsInfo(host_name="h1")),
    )


def test_checksum_accepted_ends_without_second_round_trip():
    caller = InMemoryApiCaller()

    result = _run(caller)

    assert result.ok
    assert result.phase == ReportPhase.done
    assert result.schema == ReportSchema.current
    assert not result.full_sent
    assert result.calls == (ReportCall(ReportSchema.current, full=False),)
    assert "inventory" not in caller.requests[0].payload


def test_precondition_failed_falls_back_to_legacy_schema():
    caller = InMemoryApiCaller(default=PreconditionFailed("schema not enabled"))
    caller.legacy.append(ReportResponse(report_full_inventory=False))

    result = _run(caller)

    assert result.ok
    assert result.phase == ReportPhase.done
    assert result.schema == ReportSchema.legacy
    assert len(caller.calls_for(ReportSchema.current)) == 1
    assert len(caller.calls_for(ReportSchema.legacy)) == 1
    assert result.calls == (
        ReportCall(ReportSchema.current, full=False, error_code="FAILED_PRECONDITION"),
        ReportCall(ReportSchema.legacy, full=False),
    )


def test_send_full_escalates_on_current_schema():
    caller = InMemoryApiCaller(
        current=[ReportResponse(report_full_inventory=True), ReportResponse()],
    )

    result = _run(caller)

    assert result.ok
    assert result.full_sent
    current_calls = caller.calls_for(ReportSchema.current)
    assert [r.full for r in current_calls] == [False, True]
    assert caller.calls_for(ReportSchema.legacy) == []
    assert current_calls[1].payload["inventory"]["os_info"]["hostname"] == "h1"


def test_escalation_resends_on_legacy_when_legacy_answered_checksum():
    caller = InMemoryApiCaller(
        legacy=[ReportResponse(report_full_inventory=True), ReportResponse()],
        default=PreconditionFailed(),
    )

    result = _run(caller)

    assert result.ok
    assert result.full_sent
    assert result.schema == ReportSchema.legacy
    assert [(c.schema, c.full) for c in result.calls] == [
        (ReportSchema.current, False),
        (ReportSchema.legacy, False),
        (ReportSchema.legacy, True),
    ]


def test_escalation_falls_back_when_full_current_report_is_rejected():
    caller = InMemoryApiCaller(
        current=[ReportResponse(report_full_inventory=True), PreconditionFailed()],
    )

    result = _run(caller)

    assert result.ok
    assert result.full_sent
    assert result.schema == ReportSchema.legacy
    assert [(c.schema, c.full) for c in result.calls] == [
        (ReportSchema.current, False),
        (ReportSchema.current, True),
        (ReportSchema.legacy, True),
    ]


def test_opaque_error_does_not_switch_schema(caplog):
    caplog.set_level(logging.ERROR)
    error = ReportError("collector unavailable", code="UNAVAILABLE")
    caller = InMemoryApiCaller(current=[error])

    result = _run(caller)

    assert not result.ok
    assert result.phase == ReportPhase.done
    assert result.failed_phase == ReportPhase.checksum
    assert result.error is error
    assert caller.calls_for(ReportSchema.legacy) == []
    assert "error reporting inventory checksum" in caplog.text


def test_legacy_failure_after_fallback_fails_the_cycle():
    caller = InMemoryApiCaller(
        current=[PreconditionFailed()],
        legacy=[ReportError("quota", code="RESOURCE_EXHAUSTED")],
    )

    result = _run(caller)

    assert not result.ok
    assert result.failed_phase == ReportPhase.checksum
    assert result.error.code == "RESOURCE_EXHAUSTED"


def test_failure_during_escalation_is_terminal(caplog):
    caplog.set_level(logging.ERROR)
    caller = InMemoryApiCaller(
        current=[
            ReportResponse(report_full_inventory=True),
            ReportError("deadline", code="DEADLINE_EXCEEDED"),
        ],
    )

    result = _run(caller)

    assert not result.ok
    assert result.failed_phase == ReportPhase.escalate
    assert result.schema == ReportSchema.current
    assert not result.full_sent
    assert len(result.calls) == 2
    assert caller.calls_for(ReportSchema.legacy) == []
    assert "error reporting full inventory" in caplog.text


def test_every_cycle_starts_with_current_schema():
    caller = InMemoryApiCaller(default=PreconditionFailed())
    caller.legacy.extend([ReportResponse(), ReportResponse()])
    coordinator = ReportCoordinator(caller)

    for _ in range(2):
        coordinator.run_cycle(CycleContext(), Inventory(), VmInventory())

    assert [r.schema for r in caller.requests] == [
        ReportSchema.current,
        ReportSchema.legacy,
        ReportSchema.current,
        ReportSchema.legacy,
    ]


def test_cancelled_context_stops_before_any_call():
    caller = InMemoryApiCaller()
    ctx = CycleContext()
    ctx.cancel()

    with pytest.raises(CycleCancelled):
        _run(caller, ctx)

    assert caller.requests == []


def test_context_is_passed_to_caller():
    caller = InMemoryApiCaller()
    ctx = CycleContext(cycle_id="cycle-1")

    _run(caller, ctx)

    assert caller.requests[0].cycle_id == "cycle-1"
