"""
Normalizer package.

Re-exports the normalizer API: both schema builders, the RPM alias policy
and the result types.
"""

from guest_inventory.normalizer.current import normalize_current
from guest_inventory.normalizer.legacy import normalize_legacy
from guest_inventory.normalizer.policy import HostTooling, RpmAliasPolicy, RpmFlavor
from guest_inventory.normalizer.result import NormalizationResult, NormalizationWarning

__all__ = [
    "HostTooling",
    "NormalizationResult",
    "NormalizationWarning",
    "RpmAliasPolicy",
    "RpmFlavor",
    "normalize_current",
    "normalize_legacy",
]
