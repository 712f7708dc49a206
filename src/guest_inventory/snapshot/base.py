"""
Snapshot provider interfaces.

Goal
Keep the reporting cycle independent of how facts are collected.

A provider returns the snapshot together with the package manager presence
flags that the rpm aliasing policy needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from guest_inventory.core.types import InstanceInventorySnapshot
from guest_inventory.normalizer.policy import HostTooling


@dataclass(frozen=True)
class CollectedInventory:
    snapshot: InstanceInventorySnapshot
    tooling: HostTooling = HostTooling()


class SnapshotProvider(Protocol):
    """
    Snapshot provider interface.

    load returns the facts for one reporting cycle.
    """

    def load(self) -> CollectedInventory:
        """Collect or read the current snapshot."""
