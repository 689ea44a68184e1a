"""Local records of contributors known through the identity provider."""

from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from galant.models.user import User

logger = structlog.get_logger(__name__)


class UserService:
    """Service for contributor records."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def upsert_from_claims(self, claims: dict[str, Any]) -> User:
        """
        Find or create the user a verified token belongs to.

        The name claim only seeds new records; profile edits made here win.
        """
        email = claims["email"]
        user = await self.get_by_email(email)
        if user is not None:
            return user

        user = User(email=email, name=claims.get("name"))
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("Registered contributor", user_id=str(user.id))
        return user

    async def update_name(self, user: User, name: str) -> User:
        user.name = name
        await self.db.commit()
        await self.db.refresh(user)
        return user
