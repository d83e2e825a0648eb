"""Utility helper functions."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterator, List, TypeVar, Union

T = TypeVar("T")

CENT = Decimal("0.01")
HUNDRED = Decimal(100)

Number = Union[Decimal, int, float, str]


def to_money(value: Number) -> Decimal:
    """Coerce a number or numeric string to a Decimal rounded half-up to cents."""
    if isinstance(value, float):
        # repr() keeps the shortest round-tripping form, 19.99 stays 19.99
        value = repr(value)
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"not a valid amount: {value!r}") from exc


def discounted_price(price: Number, discount_percent: int) -> Decimal:
    """Apply a whole-number percentage discount, rounded half-up to cents."""
    if not 0 <= discount_percent <= 100:
        raise ValueError(f"discount must be within 0-100, got {discount_percent}")
    multiplier = Decimal(1) - Decimal(discount_percent) / HUNDRED
    return (Decimal(price) * multiplier).quantize(CENT, rounding=ROUND_HALF_UP)


def format_price(value: Number) -> str:
    """Render an amount as ``$1,234.50``."""
    return f"${to_money(value):,.2f}"


def chunk_list(lst: List[T], size: int) -> Iterator[List[T]]:
    """Yield successive chunks of a given size from a list."""
    for i in range(0, len(lst), size):
        yield lst[i : i + size]


def truncate(text: str, limit: int = 80) -> str:
    """Shorten text for one-line display."""
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"
