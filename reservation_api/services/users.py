"""
User Administration Service

Admin-only listing, role changes and deletion of user accounts.
"""

import logging
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_api.core.errors import NotFoundError
from reservation_api.models import User, UserRole

logger = logging.getLogger(__name__)


class UserService:
    """User directory operations for administrators."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_users(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> list[User]:
        """
        List users. All filters are case-insensitive substring matches;
        name matches either the first or the last name.
        """
        query = select(User).order_by(User.created_at.desc(), User.id.desc())

        if name:
            query = query.where(
                or_(
                    User.first_name.icontains(name, autoescape=True),
                    User.last_name.icontains(name, autoescape=True),
                )
            )
        if email:
            query = query.where(User.email.icontains(email, autoescape=True))
        if phone:
            query = query.where(User.phone.icontains(phone, autoescape=True))

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User #{user_id} not found")
        return user

    async def set_role(self, user_id: int, role: UserRole) -> User:
        user = await self.get_user(user_id)
        user.role = role
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"User #{user.id} role set to {role.value}")
        return user

    async def delete_user(self, user_id: int) -> None:
        user = await self.get_user(user_id)
        await self.db.delete(user)
        await self.db.commit()
        logger.info(f"User #{user_id} deleted")
