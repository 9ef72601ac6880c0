from __future__ import annotations

from stockwatch.domain.auth.schemas import User, UserCredentials
from stockwatch.domain.watchlist.schemas import WatchlistEntry
from stockwatch.infrastructure.db.models.user import UserModel
from stockwatch.infrastructure.db.models.watchlist import WatchlistItemModel


def user_to_domain(model: UserModel) -> User:
    return User(
        id=model.id,
        email=model.email,
        name=model.name,
        country=model.country,
        investment_goals=model.investment_goals,
        risk_tolerance=model.risk_tolerance,
        preferred_industry=model.preferred_industry,
        is_active=model.is_active,
        created_at=model.created_at,
        updated_at=model.updated_at,
        last_login_at=model.last_login_at,
    )


def user_to_credentials(model: UserModel) -> UserCredentials:
    return UserCredentials(
        **user_to_domain(model).model_dump(),
        email_normalized=model.email_normalized,
        password_hash=model.password_hash,
    )


def watchlist_item_to_domain(model: WatchlistItemModel) -> WatchlistEntry:
    return WatchlistEntry(
        owner_id=model.user_id,
        symbol=model.symbol,
        company=model.company,
        added_at=model.added_at,
    )
