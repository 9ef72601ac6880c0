from stockwatch.infrastructure.db.models.user import UserModel
from stockwatch.infrastructure.db.models.watchlist import WatchlistItemModel

__all__ = [
    "UserModel",
    "WatchlistItemModel",
]
