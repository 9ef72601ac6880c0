from __future__ import annotations

from functools import lru_cache

from stockwatch.application.auth.service import AuthApplicationService
from stockwatch.application.market_data.service import MarketDataApplicationService
from stockwatch.application.users.service import UserApplicationService
from stockwatch.application.watchlist.service import WatchlistApplicationService
from stockwatch.core.celery_app import celery_app
from stockwatch.core.config import settings
from stockwatch.infrastructure.clients.finnhub import FinnhubClient
from stockwatch.infrastructure.db.connection import DatabaseConnectionManager
from stockwatch.infrastructure.db.uow import SqlAlchemyUnitOfWork
from stockwatch.infrastructure.events.celery_dispatcher import CeleryEventDispatcher
from stockwatch.infrastructure.notifications.email import SmtpEmailSender
from stockwatch.infrastructure.redis_store.client import LazyRedisClient
from stockwatch.infrastructure.redis_store.response_cache import RedisResponseCache
from stockwatch.infrastructure.redis_store.session_revocation import RedisSessionRevocationStore
from stockwatch.infrastructure.redis_store.view_invalidation import RedisViewInvalidationPublisher


@lru_cache
def _connection_manager() -> DatabaseConnectionManager:
    return DatabaseConnectionManager(database_url=settings.database_url)


@lru_cache
def _redis_client() -> LazyRedisClient:
    return LazyRedisClient(redis_url=settings.redis_url)


@lru_cache
def _finnhub_client() -> FinnhubClient | None:
    if not settings.finnhub_api_key:
        return None
    return FinnhubClient(
        settings.finnhub_api_key,
        settings.finnhub_base_url,
        timeout_seconds=settings.finnhub_timeout_seconds,
        response_cache=RedisResponseCache(client=_redis_client(), key_prefix=settings.response_cache_prefix),
    )


def build_connection_manager() -> DatabaseConnectionManager:
    return _connection_manager()


def build_uow(connections: DatabaseConnectionManager | None = None) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(connections=connections or _connection_manager())


def build_market_data_service() -> MarketDataApplicationService:
    watchlist_service = WatchlistApplicationService(uow=build_uow())
    return MarketDataApplicationService(
        finnhub_client=_finnhub_client(),
        watchlist_lookup=watchlist_service.symbols_for_user,
    )


def build_watchlist_service() -> WatchlistApplicationService:
    return WatchlistApplicationService(
        uow=build_uow(),
        market_data_service=build_market_data_service(),
        invalidator=RedisViewInvalidationPublisher(
            client=_redis_client(),
            channel=settings.view_invalidation_channel,
        ),
    )


def build_user_service(connections: DatabaseConnectionManager | None = None) -> UserApplicationService:
    return UserApplicationService(uow=build_uow(connections))


def build_task_market_data_service(connections: DatabaseConnectionManager) -> MarketDataApplicationService:
    """Market data wiring for worker tasks, which run each job on a fresh event loop.

    The shared redis response cache is bound to the API loop, so task clients go uncached.
    """
    finnhub_client = None
    if settings.finnhub_api_key:
        finnhub_client = FinnhubClient(
            settings.finnhub_api_key,
            settings.finnhub_base_url,
            timeout_seconds=settings.finnhub_timeout_seconds,
        )
    watchlist_service = WatchlistApplicationService(uow=build_uow(connections))
    return MarketDataApplicationService(
        finnhub_client=finnhub_client,
        watchlist_lookup=watchlist_service.symbols_for_user,
    )


def build_auth_service() -> AuthApplicationService:
    return AuthApplicationService(
        uow=build_uow(),
        events=CeleryEventDispatcher(celery_app=celery_app),
        revocations=RedisSessionRevocationStore(
            client=_redis_client(),
            key_prefix=settings.session_revocation_prefix,
        ),
    )


def build_email_sender() -> SmtpEmailSender:
    return SmtpEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.email_from,
    )


async def shutdown_resources() -> None:
    if _connection_manager.cache_info().currsize > 0:
        await _connection_manager().close()
        _connection_manager.cache_clear()
    if _redis_client.cache_info().currsize > 0:
        await _redis_client().close()
        _redis_client.cache_clear()
    _finnhub_client.cache_clear()
