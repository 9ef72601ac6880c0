from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stockwatch.core.security import normalize_email
from stockwatch.domain.auth.schemas import User
from stockwatch.infrastructure.db.mappers import user_to_domain
from stockwatch.infrastructure.db.models.user import UserModel


class SqlAlchemyUserRepository:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session

    async def get_by_email(self, *, email: str) -> User | None:
        user = await self._session.scalar(
            select(UserModel).where(UserModel.email_normalized == normalize_email(email))
        )
        if user is None:
            return None
        return user_to_domain(user)

    async def list_with_email(self) -> list[dict]:
        result = await self._session.execute(
            select(UserModel.id, UserModel.email, UserModel.name, UserModel.country)
            .where(UserModel.email.is_not(None))
            .order_by(UserModel.id)
        )
        return [dict(row) for row in result.mappings().all()]
