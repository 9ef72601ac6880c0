from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from stockwatch.api.deps import get_current_user, get_watchlist_service
from stockwatch.api.v1.dto.mappers import (
    to_watchlist_action_out,
    to_watchlist_entry_out,
    to_watchlist_entry_with_data_out,
)
from stockwatch.api.v1.dto.watchlist import (
    WatchlistActionOut,
    WatchlistEntryCreate,
    WatchlistEntryOut,
    WatchlistEntryWithDataOut,
)
from stockwatch.application.watchlist.service import WatchlistApplicationService
from stockwatch.domain.auth.schemas import User

router = APIRouter()


@router.get("", response_model=list[WatchlistEntryWithDataOut])
async def list_watchlist(
    current_user: User = Depends(get_current_user),
    service: WatchlistApplicationService = Depends(get_watchlist_service),
) -> list[WatchlistEntryWithDataOut]:
    entries = await service.list_with_market_data(user=current_user)
    return [to_watchlist_entry_with_data_out(entry) for entry in entries]


@router.get("/entries", response_model=list[WatchlistEntryOut])
async def list_watchlist_entries(
    current_user: User = Depends(get_current_user),
    service: WatchlistApplicationService = Depends(get_watchlist_service),
) -> list[WatchlistEntryOut]:
    entries = await service.list_entries(user=current_user)
    return [to_watchlist_entry_out(entry) for entry in entries]


@router.post("", response_model=WatchlistActionOut)
async def add_to_watchlist(
    payload: WatchlistEntryCreate,
    current_user: User = Depends(get_current_user),
    service: WatchlistApplicationService = Depends(get_watchlist_service),
):
    result = await service.add(user=current_user, symbol=payload.symbol, company=payload.company)
    out = to_watchlist_action_out(result)
    if not result.success:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=out.model_dump(exclude_none=True))
    return out


@router.delete("/{symbol}", response_model=WatchlistActionOut)
async def remove_from_watchlist(
    symbol: str,
    current_user: User = Depends(get_current_user),
    service: WatchlistApplicationService = Depends(get_watchlist_service),
) -> WatchlistActionOut:
    result = await service.remove(user=current_user, symbol=symbol)
    return to_watchlist_action_out(result)
