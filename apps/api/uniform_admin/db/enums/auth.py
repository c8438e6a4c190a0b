"""Auth-related enums."""

from enum import Enum


class Role(str, Enum):
    """
    User roles of the admin application.

    - SUPER_ADMIN: Platform owner (everything ADMIN can do)
    - ADMIN: Reviews pending requests, sees every salesperson's tasks
    - DESIGNER: Works design tasks, may return them to the salesperson
    - SALESPERSON: Creates orders and submits requests for approval
    - VIEWER: Read-only access
    """

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    DESIGNER = "designer"
    SALESPERSON = "salesperson"
    VIEWER = "viewer"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_
