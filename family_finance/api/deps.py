"""
Request-scoped dependencies shared by the routers.

The caller's identity arrives already authenticated upstream as
the X-User-Id header. X-Dashboard-Id optionally narrows every
query to one dashboard.
"""

from fastapi import Header

from family_finance.exceptions import AuthenticationError


def get_current_user_id(
    x_user_id: str | None = Header(default=None, max_length=64),
) -> str:
    if not x_user_id:
        raise AuthenticationError("Missing X-User-Id header")
    return x_user_id


def get_dashboard_id(
    x_dashboard_id: str | None = Header(default=None, max_length=64),
) -> str | None:
    return x_dashboard_id or None
