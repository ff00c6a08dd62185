"""
Licensing Constants

License types attached to content items and the status values shared by
license requests and delete requests.
"""

from enum import Enum


class LicenseType(str, Enum):
    """Policy tag controlling who may view a content item."""

    FREE = "free"
    PAID = "paid"
    PERMISSION = "permission"
    NONE = "none"


# License types whose access is mediated by an approved license request
GRANT_MEDIATED_LICENSES = frozenset({LicenseType.PERMISSION, LicenseType.PAID})


class RequestStatus(str, Enum):
    """Lifecycle of license requests and delete requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# pending -> approved | rejected; approved and rejected are terminal
ALLOWED_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED}),
    RequestStatus.APPROVED: frozenset(),
    RequestStatus.REJECTED: frozenset(),
}


def parse_license_type(value: str | None) -> LicenseType | None:
    """Return the LicenseType for a stored value, or None if it is not recognized."""
    try:
        return LicenseType(value)
    except ValueError:
        return None


def can_transition(current: str, target: str) -> bool:
    """Check whether a request may move from *current* to *target* status."""
    try:
        return RequestStatus(target) in ALLOWED_TRANSITIONS[RequestStatus(current)]
    except (KeyError, ValueError):
        return False
