from __future__ import annotations

from stockwatch.domain.errors import ValidationError

MAX_SYMBOL_LENGTH = 16
MAX_COMPANY_LENGTH = 255


def normalize_symbol(symbol: str) -> str:
    normalized = (symbol or "").strip().upper()
    if not normalized:
        raise ValidationError("Symbol is required")
    if len(normalized) > MAX_SYMBOL_LENGTH:
        raise ValidationError("Symbol is too long")
    return normalized


def normalize_company(company: str | None, *, fallback: str) -> str:
    # Stored in a 255-character column.
    normalized = (company or "").strip()[:MAX_COMPANY_LENGTH].rstrip()
    return normalized or fallback
