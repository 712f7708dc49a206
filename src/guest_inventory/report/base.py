"""
Report interfaces.

Goal
Define the narrow capability the coordinator needs from the collector client
without binding it to a transport.

Design notes
An APICaller already applies retry and backoff and classifies failures.
It returns a ReportResponse on success and raises ReportError otherwise.
PreconditionFailed is the only error kind the coordinator reacts to.

Every call receives the CycleContext of the running cycle. Timeouts and
cancellation semantics belong to the caller implementation; the context only
carries the cancellation signal through.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from guest_inventory.core.errors import CycleCancelled
from guest_inventory.schema.inventory import Inventory
from guest_inventory.schema.vm_inventory import VmInventory


class ReportSchema(StrEnum):
    current = "current"
    legacy = "legacy"


@dataclass(frozen=True)
class ReportResponse:
    """
    Collector answer to a report call.

    report_full_inventory
    True when the collector wants the full inventory, usually because the
    checksum did not match what it has stored.
    """

    report_full_inventory: bool = False


@dataclass(frozen=True)
class CycleContext:
    """
    Per cycle context passed through every collaborator call.

    cycle_id
    Identifier used in log lines and by caller implementations for tracing.

    cancel_event
    Set it to cancel the cycle before its next call.
    """

    cycle_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise CycleCancelled(f"reporting cycle {self.cycle_id} cancelled")


class APICaller(Protocol):
    """
    Collector client interface expected by the report coordinator.

    full False sends a checksum only report.
    full True sends the complete inventory.
    """

    def report_current(self, ctx: CycleContext, inventory: Inventory, full: bool) -> ReportResponse:
        """Report the current schema inventory."""

    def report_legacy(self, ctx: CycleContext, inventory: VmInventory, full: bool) -> ReportResponse:
        """Report the legacy schema inventory."""
