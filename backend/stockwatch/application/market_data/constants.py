POPULAR_STOCK_SYMBOLS: tuple[str, ...] = (
    "AAPL",
    "MSFT",
    "GOOGL",
    "AMZN",
    "TSLA",
    "META",
    "NVDA",
    "NFLX",
    "ORCL",
    "CRM",
    "ADBE",
    "INTC",
    "AMD",
    "PYPL",
    "UBER",
    "SHOP",
    "SPOT",
    "SQ",
    "COIN",
    "PLTR",
)

POPULAR_STOCKS_LOOKUP_COUNT = 10
MAX_SEARCH_RESULTS = 15
NEWS_LOOKBACK_DAYS = 5
