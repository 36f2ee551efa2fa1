"""
Shared request dependencies.
"""

from fastapi import Header

from app.core.config import settings


async def get_acting_user_id(
    x_user_id: int | None = Header(None, description="Acting user ID"),
) -> int:
    """
    Identity of the caller performing a write.

    There is no authentication yet: the X-User-Id header is trusted and
    the configured placeholder identity is used when it is absent.
    """
    if x_user_id is None:
        return settings.forum_default_user_id
    return x_user_id
