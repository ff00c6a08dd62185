"""Constants package for Content Shield."""

from .licensing import (
    ALLOWED_TRANSITIONS,
    GRANT_MEDIATED_LICENSES,
    LicenseType,
    RequestStatus,
    can_transition,
    parse_license_type,
)
from .roles import DEFAULT_ROLE, RoleName, is_admin_role

__all__ = [
    # Role constants
    "RoleName",
    "DEFAULT_ROLE",
    "is_admin_role",
    # Licensing constants
    "LicenseType",
    "RequestStatus",
    "ALLOWED_TRANSITIONS",
    "GRANT_MEDIATED_LICENSES",
    "can_transition",
    "parse_license_type",
]
