"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Supported Open Service Broker API revisions.

Versions are compared by rank, assigned in release order. The label is only
what goes on the wire in the API version header.
"""

from dataclasses import dataclass
from typing import Dict, List

from osbclient.exceptions import InvalidConfigurationError


@dataclass(frozen=True)
class APIVersion:
    """A single API revision: wire label plus release-order rank."""

    label: str
    rank: int

    def at_least(self, other: "APIVersion") -> bool:
        return self.rank >= other.rank

    def is_less_than(self, other: "APIVersion") -> bool:
        return not self.at_least(other)

    def header_value(self) -> str:
        return self.label

    def __lt__(self, other: "APIVersion") -> bool:
        if not isinstance(other, APIVersion):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "APIVersion") -> bool:
        if not isinstance(other, APIVersion):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: "APIVersion") -> bool:
        if not isinstance(other, APIVersion):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: "APIVersion") -> bool:
        if not isinstance(other, APIVersion):
            return NotImplemented
        return self.rank >= other.rank

    def __str__(self) -> str:
        return self.label


VERSION_2_11 = APIVersion("2.11", 0)
VERSION_2_12 = APIVersion("2.12", 1)
VERSION_2_13 = APIVersion("2.13", 2)
VERSION_2_14 = APIVersion("2.14", 3)
VERSION_2_15 = APIVersion("2.15", 4)
VERSION_2_16 = APIVersion("2.16", 5)
VERSION_2_17 = APIVersion("2.17", 6)

_VERSIONS: Dict[str, APIVersion] = {
    v.label: v
    for v in (
        VERSION_2_11,
        VERSION_2_12,
        VERSION_2_13,
        VERSION_2_14,
        VERSION_2_15,
        VERSION_2_16,
        VERSION_2_17,
    )
}

# First revision that carries the originating identity header.
ORIGINATING_IDENTITY_VERSION = VERSION_2_13

# First revision whose brokers may send a Retry-After hint on last_operation.
POLL_DELAY_VERSION = VERSION_2_15


def at_least(version: APIVersion, minimum: APIVersion) -> bool:
    """True iff ``version`` ranks at or above ``minimum``."""
    return version.rank >= minimum.rank


def latest() -> APIVersion:
    """Latest API version supported by this release of the library."""
    return VERSION_2_17


def all_versions() -> List[APIVersion]:
    """All supported API versions in release order."""
    return sorted(_VERSIONS.values())


def parse(label: str) -> APIVersion:
    """
    Look up a supported version by its label.

    Raises:
        InvalidConfigurationError: If the label is not a supported version
    """
    try:
        return _VERSIONS[str(label).strip()]
    except KeyError:
        raise InvalidConfigurationError(
            f"unsupported API version '{label}', "
            f"expected one of {[v.label for v in all_versions()]}"
        ) from None
