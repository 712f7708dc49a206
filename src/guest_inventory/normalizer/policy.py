"""
RPM aliasing policy.

A flat rpm collection does not say which manager owns it. The current schema
has no rpm variant, so rpm packages are reported as either yum or zypper
packages depending on which tool is installed on the host.

The precedence when both or neither tool is present is a policy, not a fact.
The default matches the historical agent behavior:
yum when yum exists or zypper does not, zypper otherwise.
Confirm against real host tooling detection before changing the default.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class RpmFlavor(StrEnum):
    yum = "yum"
    zypper = "zypper"


@dataclass(frozen=True)
class HostTooling:
    """
    Package manager presence flags detected on the host.

    These travel next to the snapshot because the collectors, not the
    normalizer, know what is installed.
    """

    yum_exists: bool = False
    zypper_exists: bool = False


@dataclass(frozen=True)
class RpmAliasPolicy:
    """
    Decide the variant used for rpm packages.

    when_both
    Variant used when yum and zypper are both present.

    when_neither
    Variant used when neither tool is detected.
    """

    when_both: RpmFlavor = RpmFlavor.yum
    when_neither: RpmFlavor = RpmFlavor.yum

    def resolve(self, tooling: HostTooling) -> RpmFlavor:
        if tooling.yum_exists and tooling.zypper_exists:
            return self.when_both
        if tooling.yum_exists:
            return RpmFlavor.yum
        if tooling.zypper_exists:
            return RpmFlavor.zypper
        return self.when_neither
