from __future__ import annotations

import logging

from stockwatch.domain.errors import StockwatchError, UpstreamError
from stockwatch.domain.users.normalization import to_user_summaries
from stockwatch.domain.users.schemas import UserSummary
from stockwatch.infrastructure.db.uow import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)


class UserApplicationService:
    def __init__(self, *, uow: SqlAlchemyUnitOfWork) -> None:
        self._uow = uow

    async def fetch_users_for_news_email(self) -> list[UserSummary]:
        """Users eligible for the news email; storage failures raise `UpstreamError`."""
        try:
            async with self._uow as uow:
                if uow.users_repo is None:
                    raise RuntimeError("Users repository not configured")
                records = await uow.users_repo.list_with_email()
        except StockwatchError:
            raise
        except Exception as exc:
            raise UpstreamError("Failed to fetch users", kind="database") from exc
        return to_user_summaries(records)

    async def list_users_for_news_email(self) -> list[UserSummary]:
        try:
            return await self.fetch_users_for_news_email()
        except Exception:
            logger.exception("Error fetching users for news email")
            return []
