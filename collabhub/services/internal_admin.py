from fastapi import Header

from collabhub.core.config import settings
from collabhub.core.errors import Forbidden


async def require_internal_admin(x_internal_admin_key: str | None = Header(default=None)) -> None:
    if not x_internal_admin_key or x_internal_admin_key != settings.internal_admin_key:
        raise Forbidden("Internal admin key required")
