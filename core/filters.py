"""Filter predicates for entity lists.

Every filter is an independent ``item -> bool`` callable; a page builds the
ones it needs from its widgets and passes them all to ``Repository.list``,
which keeps only the items matching every predicate.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")
Predicate = Callable[[Any], bool]

ALL = "all"


def _always(_item: Any) -> bool:
    return True


def text_search(term: Optional[str], *fields: str) -> Predicate:
    """Case-insensitive substring match on any of ``fields``."""
    needle = (term or "").strip().casefold()
    if not needle:
        return _always

    def predicate(item: Any) -> bool:
        for name in fields:
            value = getattr(item, name, None)
            if value is not None and needle in str(value).casefold():
                return True
        return False

    return predicate


def equals(field_name: str, value: Optional[str], case_sensitive: bool = True) -> Predicate:
    """Field equality; ``None``/"all" disables the filter."""
    if value is None or str(value).lower() == ALL:
        return _always
    if case_sensitive:
        return lambda item: getattr(item, field_name, None) == value
    wanted = str(value).casefold()
    return lambda item: str(getattr(item, field_name, "") or "").casefold() == wanted


def low_stock_only(enabled: bool) -> Predicate:
    if not enabled:
        return _always
    return lambda product: product.is_low_stock


def in_period(mode: str, ref_date: date, field_name: str = "date") -> Predicate:
    """Match items whose date falls in the same day, month or year as ``ref_date``."""
    def predicate(item: Any) -> bool:
        value = getattr(item, field_name, None)
        if value is None:
            return False
        if mode == "day":
            return value == ref_date
        if mode == "month":
            return (value.year, value.month) == (ref_date.year, ref_date.month)
        if mode == "year":
            return value.year == ref_date.year
        raise ValueError(f"Unknown period mode: {mode}")

    return predicate


def apply_filters(items: Iterable[T], predicates: Iterable[Predicate]) -> List[T]:
    """Keep items matching all predicates, preserving order."""
    checks = list(predicates)
    return [item for item in items if all(check(item) for check in checks)]
