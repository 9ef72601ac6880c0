from __future__ import annotations

import asyncio
import logging

from stockwatch.application.watchlist.interfaces import StockDetailsProvider, ViewInvalidator
from stockwatch.domain.auth.schemas import User
from stockwatch.domain.errors import StockwatchError, UpstreamError
from stockwatch.domain.watchlist.normalization import normalize_company, normalize_symbol
from stockwatch.domain.watchlist.schemas import WatchlistActionResult, WatchlistEntry, WatchlistEntryWithData
from stockwatch.infrastructure.db.uow import SqlAlchemyUnitOfWork
from stockwatch.infrastructure.repositories.watchlist_repository import DuplicateWatchlistEntryError

logger = logging.getLogger(__name__)

WATCHLIST_VIEW_PATH = "/watchlist"
ERROR_ALREADY_IN_WATCHLIST = "Stock already in watchlist"


class WatchlistApplicationService:
    def __init__(
        self,
        *,
        uow: SqlAlchemyUnitOfWork,
        market_data_service: StockDetailsProvider | None = None,
        invalidator: ViewInvalidator | None = None,
    ) -> None:
        self._uow = uow
        self._market_data_service = market_data_service
        self._invalidator = invalidator

    async def list_symbols(self, email: str) -> list[str]:
        """Best-effort symbol lookup for personalization; never raises."""
        if not email or not email.strip():
            return []
        try:
            async with self._uow as uow:
                user = await _require_users_repo(uow).get_by_email(email=email)
                if user is None:
                    return []
                return await _require_watchlist_repo(uow).list_symbols(owner_id=user.id)
        except Exception:
            logger.exception("Watchlist symbol lookup failed", extra={"email": email})
            return []

    async def symbols_for_user(self, user_id: int) -> list[str]:
        try:
            async with self._uow as uow:
                return await _require_watchlist_repo(uow).list_symbols(owner_id=user_id)
        except Exception:
            logger.exception("Watchlist symbol lookup failed", extra={"user_id": user_id})
            return []

    async def add(self, *, user: User, symbol: str, company: str) -> WatchlistActionResult:
        normalized = normalize_symbol(symbol)
        company_name = normalize_company(company, fallback=normalized)
        try:
            async with self._uow as uow:
                repo = _require_watchlist_repo(uow)
                if await repo.find_one(owner_id=user.id, symbol=normalized) is not None:
                    return WatchlistActionResult(success=False, error=ERROR_ALREADY_IN_WATCHLIST)
                await repo.insert(owner_id=user.id, symbol=normalized, company=company_name)
                await uow.commit()
        except DuplicateWatchlistEntryError:
            return WatchlistActionResult(success=False, error=ERROR_ALREADY_IN_WATCHLIST)
        except StockwatchError:
            raise
        except Exception as exc:
            raise UpstreamError("Failed to add stock to watchlist", kind="database") from exc

        await self._invalidate(user_id=user.id)
        return WatchlistActionResult(success=True, message="Stock added to watchlist")

    async def remove(self, *, user: User, symbol: str, company: str | None = None) -> WatchlistActionResult:
        _ = company
        normalized = normalize_symbol(symbol)
        try:
            async with self._uow as uow:
                await _require_watchlist_repo(uow).delete(owner_id=user.id, symbol=normalized)
                await uow.commit()
        except StockwatchError:
            raise
        except Exception as exc:
            raise UpstreamError("Failed to remove from the watchlist", kind="database") from exc

        await self._invalidate(user_id=user.id)
        return WatchlistActionResult(success=True, message="Stock removed from watchlist")

    async def list_entries(self, *, user: User) -> list[WatchlistEntry]:
        try:
            async with self._uow as uow:
                return await _require_watchlist_repo(uow).list_entries(owner_id=user.id)
        except StockwatchError:
            raise
        except Exception as exc:
            raise UpstreamError("Failed to fetch watchlist", kind="database") from exc

    async def list_with_market_data(self, *, user: User) -> list[WatchlistEntryWithData]:
        entries = await self.list_entries(user=user)
        if not entries:
            return []
        return list(await asyncio.gather(*(self._with_details(entry) for entry in entries)))

    async def _with_details(self, entry: WatchlistEntry) -> WatchlistEntryWithData:
        enriched = WatchlistEntryWithData(**entry.model_dump())
        if self._market_data_service is None:
            return enriched
        try:
            enriched.details = await self._market_data_service.get_stock_details(entry.symbol)
        except Exception:
            logger.warning("Stock details unavailable for watchlist entry", extra={"symbol": entry.symbol})
        return enriched

    async def _invalidate(self, *, user_id: int) -> None:
        if self._invalidator is None:
            return
        try:
            await self._invalidator.invalidate(WATCHLIST_VIEW_PATH, user_id=user_id)
        except Exception:
            logger.exception("View invalidation failed", extra={"path": WATCHLIST_VIEW_PATH, "user_id": user_id})


def _require_watchlist_repo(uow: SqlAlchemyUnitOfWork):
    if uow.watchlist_repo is None:
        raise RuntimeError("Watchlist repository not configured")
    return uow.watchlist_repo


def _require_users_repo(uow: SqlAlchemyUnitOfWork):
    if uow.users_repo is None:
        raise RuntimeError("Users repository not configured")
    return uow.users_repo
