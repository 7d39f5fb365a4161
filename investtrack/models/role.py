"""User role enum for role-based access control."""

from enum import Enum as PyEnum


class UserRole(str, PyEnum):
    """
    Application roles.

    - ADMIN: may create, change and delete firms, members, coverages,
      interactions, events and attachments
    - MEMBER: read-only access to firms, files and the dashboard
    """

    ADMIN = "admin"
    MEMBER = "member"
