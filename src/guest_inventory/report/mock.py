"""
In memory API caller.

This caller is used for tests and local simulations.
It behaves like a collector that answers from a script.

Features
- Scripted outcomes per schema, consumed in call order
- A fallback outcome once a script runs out
- Records every request body it would have sent
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from guest_inventory.core.errors import ReportError
from guest_inventory.report.base import APICaller, CycleContext, ReportResponse, ReportSchema
from guest_inventory.report.payload import build_report_payload, build_vm_report_payload
from guest_inventory.schema.inventory import Inventory
from guest_inventory.schema.vm_inventory import VmInventory

Outcome = Union[ReportResponse, ReportError]


@dataclass(frozen=True)
class RecordedRequest:
    schema: ReportSchema
    full: bool
    cycle_id: str
    payload: dict[str, Any]


@dataclass
class InMemoryApiCaller(APICaller):
    """
    Scripted collector.

    current and legacy
    Outcomes returned by successive calls of each operation. A ReportError
    outcome is raised instead of returned.

    default
    Outcome used once a script is exhausted.
    """

    current: list[Outcome] = field(default_factory=list)
    legacy: list[Outcome] = field(default_factory=list)
    default: Outcome = field(default_factory=ReportResponse)
    requests: list[RecordedRequest] = field(default_factory=list)

    def report_current(self, ctx: CycleContext, inventory: Inventory, full: bool) -> ReportResponse:
        payload = build_report_payload(inventory, full)
        self.requests.append(RecordedRequest(ReportSchema.current, full, ctx.cycle_id, payload))
        return self._next(self.current)

    def report_legacy(self, ctx: CycleContext, inventory: VmInventory, full: bool) -> ReportResponse:
        payload = build_vm_report_payload(inventory, full)
        self.requests.append(RecordedRequest(ReportSchema.legacy, full, ctx.cycle_id, payload))
        return self._next(self.legacy)

    def calls_for(self, schema: ReportSchema) -> list[RecordedRequest]:
        return [r for r in self.requests if r.schema == schema]

    def _next(self, script: list[Outcome]) -> ReportResponse:
        outcome = script.pop(0) if script else self.default
        if isinstance(outcome, ReportError):
            raise outcome
        return outcome
