"""
Error taxonomy.

We separate error types so callers can react correctly.
Example:
PreconditionFailed should make the coordinator fall back to the legacy schema.
Any other ReportError should end the cycle and be left to the retry policy.
PublishError for one attribute must not stop the other attributes.

Collection quality problems are not exceptions at all. The normalizers return
them as warnings next to the normalized inventory.
"""

from __future__ import annotations


class InventoryError(Exception):
    """Base class for all guest inventory exceptions."""


class NormalizationError(InventoryError):
    """Raised when a package variant is not handled by a normalizer or codec."""


class ReportError(InventoryError):
    """
    Classified error returned by an inventory report call.

    code is a stable machine readable code such as UNAVAILABLE.
    message is a human readable message.
    """

    code = "UNKNOWN"

    def __init__(self, message: str = "", code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.message = message

    def __str__(self) -> str:
        if self.message:
            return f"{self.code}: {self.message}"
        return self.code


class PreconditionFailed(ReportError):
    """Raised when the collector does not support the schema for this host."""

    code = "FAILED_PRECONDITION"


class CycleCancelled(InventoryError):
    """Raised when a reporting cycle is cancelled through its context."""


class PublishError(InventoryError):
    """Raised by an attribute sink when a single attribute write fails."""
