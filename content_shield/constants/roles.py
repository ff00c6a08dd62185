"""
Role Constants for Content Shield

This module defines constants for user roles to avoid hardcoded values
throughout the codebase.
"""

from enum import Enum


class RoleName(str, Enum):
    """Enumeration of role names in the system."""

    USER = "user"
    ADMIN = "admin"


# Default role for new user registrations
DEFAULT_ROLE = RoleName.USER


def is_admin_role(role_name: str | None) -> bool:
    """Check whether a stored role name grants admin rights."""
    return role_name == RoleName.ADMIN.value
