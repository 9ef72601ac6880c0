from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from stockwatch.api.deps import get_market_data_service, get_optional_user
from stockwatch.api.v1.dto.market_data import NewsArticleOut, StockDetailsOut, StockSearchResultOut
from stockwatch.api.v1.dto.mappers import to_news_article_out, to_stock_details_out, to_stock_search_result_out
from stockwatch.application.market_data.service import MarketDataApplicationService
from stockwatch.domain.auth.schemas import User

router = APIRouter()


@router.get("/news", response_model=list[NewsArticleOut])
async def get_news(
    symbols: list[str] | None = Query(default=None),
    service: MarketDataApplicationService = Depends(get_market_data_service),
) -> list[NewsArticleOut]:
    articles = await service.get_news(symbols)
    return [to_news_article_out(article) for article in articles]


@router.get("/search", response_model=list[StockSearchResultOut])
async def search_stocks(
    q: str | None = Query(default=None, max_length=100),
    current_user: User | None = Depends(get_optional_user),
    service: MarketDataApplicationService = Depends(get_market_data_service),
) -> list[StockSearchResultOut]:
    user_id = current_user.id if current_user is not None else None
    results = await service.search_stocks(q, user_id=user_id)
    return [to_stock_search_result_out(result) for result in results]


@router.get("/stocks/{symbol}", response_model=StockDetailsOut)
async def get_stock_details(
    symbol: str,
    service: MarketDataApplicationService = Depends(get_market_data_service),
) -> StockDetailsOut:
    details = await service.get_stock_details(symbol)
    return to_stock_details_out(details)
