"""
FastAPI Dependencies

Session resolution and role gates shared by the API routes.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_api.database import get_db
from reservation_api.models import User, UserRole
from reservation_api.services.identity import IdentityService, require_role


def get_identity(request: Request) -> IdentityService:
    return request.app.state.identity


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: IdentityService = Depends(get_identity),
) -> User:
    """Resolve the session cookie to a live user or fail with 401."""
    token = request.cookies.get(identity.settings.session_cookie_name)
    return await identity.resolve_session(db, token)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """401 without a session, 403 for a non-admin session."""
    require_role(user, UserRole.ADMIN)
    return user
