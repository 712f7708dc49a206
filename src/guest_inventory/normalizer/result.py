"""
Normalization results.

Normalizers never raise for collection quality problems. Instead they drop the
offending field and describe what they dropped here, so callers and tests can
see exactly what was degraded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class NormalizationWarning:
    """
    One degraded field.

    field is a dotted path into the snapshot such as
    installed_packages.qfe[0].installed_on.
    """

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class NormalizationResult(Generic[T]):
    inventory: T
    warnings: tuple[NormalizationWarning, ...] = ()

    @property
    def ok(self) -> bool:
        """True when nothing was dropped."""
        return len(self.warnings) == 0
