from __future__ import annotations

from stockwatch.api.v1.dto.auth import AccessTokenOut, UserOut
from stockwatch.api.v1.dto.market_data import NewsArticleOut, StockDetailsOut, StockSearchResultOut
from stockwatch.api.v1.dto.watchlist import WatchlistActionOut, WatchlistEntryOut, WatchlistEntryWithDataOut
from stockwatch.domain.auth.schemas import AccessToken, User
from stockwatch.domain.market_data.schemas import NewsArticle, StockDetails, StockSearchResult
from stockwatch.domain.watchlist.schemas import WatchlistActionResult, WatchlistEntry, WatchlistEntryWithData


def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        country=user.country,
        investment_goals=user.investment_goals,
        risk_tolerance=user.risk_tolerance,
        preferred_industry=user.preferred_industry,
        is_active=user.is_active,
        created_at=user.created_at,
        updated_at=user.updated_at,
        last_login_at=user.last_login_at,
    )


def to_access_token_out(token: AccessToken) -> AccessTokenOut:
    return AccessTokenOut(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
    )


def to_watchlist_entry_out(entry: WatchlistEntry) -> WatchlistEntryOut:
    return WatchlistEntryOut(
        symbol=entry.symbol,
        company=entry.company,
        added_at=entry.added_at,
    )


def to_watchlist_entry_with_data_out(entry: WatchlistEntryWithData) -> WatchlistEntryWithDataOut:
    return WatchlistEntryWithDataOut(
        symbol=entry.symbol,
        company=entry.company,
        added_at=entry.added_at,
        details=to_stock_details_out(entry.details) if entry.details is not None else None,
    )


def to_watchlist_action_out(result: WatchlistActionResult) -> WatchlistActionOut:
    return WatchlistActionOut(success=result.success, message=result.message, error=result.error)


def to_news_article_out(article: NewsArticle) -> NewsArticleOut:
    return NewsArticleOut(**article.model_dump())


def to_stock_search_result_out(result: StockSearchResult) -> StockSearchResultOut:
    return StockSearchResultOut(**result.model_dump())


def to_stock_details_out(details: StockDetails) -> StockDetailsOut:
    return StockDetailsOut(
        symbol=details.symbol,
        company=details.company,
        current_price=details.current_price,
        change_percent=details.change_percent,
        price_formatted=details.price_formatted,
        change_formatted=details.change_formatted,
        market_cap_formatted=details.market_cap_formatted,
        pe_ratio=details.pe_ratio,
    )
