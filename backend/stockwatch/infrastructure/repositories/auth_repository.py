from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from stockwatch.domain.auth.constants import ERROR_EMAIL_ALREADY_REGISTERED
from stockwatch.domain.auth.schemas import User, UserCredentials
from stockwatch.infrastructure.db.mappers import user_to_credentials, user_to_domain
from stockwatch.infrastructure.db.models.user import UserModel


class SqlAlchemyAuthRepository:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session

    async def create_user(
        self,
        *,
        email: str,
        email_normalized: str,
        password_hash: str,
        name: str,
        country: str | None = None,
        investment_goals: str | None = None,
        risk_tolerance: str | None = None,
        preferred_industry: str | None = None,
    ) -> User:
        user = UserModel(
            email=email,
            email_normalized=email_normalized,
            password_hash=password_hash,
            name=name,
            country=country,
            investment_goals=investment_goals,
            risk_tolerance=risk_tolerance,
            preferred_industry=preferred_industry,
            is_active=True,
        )
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ValueError(ERROR_EMAIL_ALREADY_REGISTERED) from exc
        await self._session.refresh(user)
        return user_to_domain(user)

    async def get_user_by_email_normalized(self, *, email_normalized: str) -> UserCredentials | None:
        user = await self._session.scalar(select(UserModel).where(UserModel.email_normalized == email_normalized))
        if user is None:
            return None
        return user_to_credentials(user)

    async def get_user_by_id(self, *, user_id: int) -> User | None:
        user = await self._session.get(UserModel, user_id)
        if user is None:
            return None
        return user_to_domain(user)

    async def update_last_login(self, *, user_id: int) -> User | None:
        user = await self._session.get(UserModel, user_id)
        if user is None:
            return None
        user.last_login_at = datetime.now(tz=timezone.utc)
        await self._session.flush()
        await self._session.refresh(user)
        return user_to_domain(user)
