"""
Inventory reporter.

Purpose
Run reporting cycles:
- Load the snapshot
- Optionally publish it as instance attributes
- Normalize it into both canonical schemas
- Run the report coordinator

This is the composition layer of the system.
It wires the snapshot provider, the APICaller and the attribute sink.

Normalizers and the fingerprint engine remain pure.
The reporter handles configuration and sequencing.

Cycles are sequential. run_forever never overlaps two cycles; any other
scheduler must serialize calls to run_cycle itself.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from guest_inventory.attributes.base import AttributeSink
from guest_inventory.attributes.publisher import DEFAULT_BASE_PATH, publish_snapshot
from guest_inventory.normalizer.current import normalize_current
from guest_inventory.normalizer.legacy import normalize_legacy
from guest_inventory.normalizer.policy import RpmAliasPolicy
from guest_inventory.report.base import APICaller, CycleContext
from guest_inventory.report.coordinator import ReportCoordinator, ReportCycleResult
from guest_inventory.snapshot.base import SnapshotProvider

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReporterConfig:
    """
    Reporter configuration.

    interval_seconds
    Sleep duration between cycles in run_forever.

    guest_attributes_enabled
    Platform level switch for instance attributes.

    disable_inventory_write
    Opt out of writing inventory attributes even when they are enabled.

    attribute_base_path
    Path prefix of every published attribute.

    rpm_alias_policy
    Decides whether rpm packages are reported as yum or zypper packages.
    """

    interval_seconds: int = 1800
    guest_attributes_enabled: bool = False
    disable_inventory_write: bool = False
    attribute_base_path: str = DEFAULT_BASE_PATH
    rpm_alias_policy: RpmAliasPolicy = RpmAliasPolicy()

    @property
    def write_attributes(self) -> bool:
        return self.guest_attributes_enabled and not self.disable_inventory_write


class InventoryReporter:
    """
    Top level reporting loop.

    This is not the report coordinator.
    This is the runtime loop around it.
    """

    def __init__(
        self,
        provider: SnapshotProvider,
        caller: APICaller,
        sink: AttributeSink | None = None,
        config: ReporterConfig | None = None,
    ) -> None:
        self._config = config or ReporterConfig()
        self._provider = provider
        self._sink = sink
        self._coordinator = ReportCoordinator(caller)

    def run_cycle(self, ctx: CycleContext | None = None) -> ReportCycleResult:
        """
        Execute one reporting cycle.
        """
        ctx = ctx or CycleContext()
        collected = self._provider.load()
        snapshot = collected.snapshot

        if self._config.write_attributes and self._sink is not None:
            LOGGER.info("cycle %s: writing inventory to guest attributes", ctx.cycle_id)
            publish_snapshot(self._sink, snapshot, self._config.attribute_base_path)

        current = normalize_current(snapshot, collected.tooling, self._config.rpm_alias_policy)
        legacy = normalize_legacy(snapshot)

        dropped = len(current.warnings) + len(legacy.warnings)
        if dropped:
            LOGGER.warning("cycle %s: %d inventory fields degraded", ctx.cycle_id, dropped)

        return self._coordinator.run_cycle(ctx, current.inventory, legacy.inventory)

    def run_forever(self) -> None:
        """
        Continuous loop execution.
        """

        while True:
            result = self.run_cycle()
            if not result.ok:
                LOGGER.error("inventory report failed: %s", result.error)
            time.sleep(self._config.interval_seconds)
