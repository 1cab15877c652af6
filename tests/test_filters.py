"""Filter predicate tests (pure, no database)."""
from datetime import date
from decimal import Decimal

import pytest

from core.filters import apply_filters, equals, in_period, low_stock_only, text_search
from core.models import Product, Transaction


def product(pid, name, category="FRAME", stock=10, min_stock=5, sku=None):
    return Product(
        id=pid, name=name, sku=sku or f"SKU-{pid}", category=category, brand="",
        sale_price=Decimal("100.00"), cost_price=Decimal("50.00"),
        stock=stock, min_stock=min_stock,
    )


def entry(tid, entry_date, type="INCOME"):
    return Transaction(
        id=tid, description=f"#{tid}", amount=Decimal("1.00"), type=type,
        category="Outros", date=entry_date, payment_method="CASH", status="PAID",
    )


@pytest.fixture
def products():
    return [
        product(1, "Armação Ray-Ban Aviator", stock=1, min_stock=2),
        product(2, "Armação Oakley", stock=10),
        product(3, "Lente Multifocal", category="LENS", stock=0),
        product(4, "Estojo rígido", category="ACCESSORY", stock=5, min_stock=5, sku="EST-01"),
    ]


def test_text_search_case_insensitive(products):
    assert [p.id for p in apply_filters(products, [text_search("ARMAÇÃO", "name")])] == [1, 2]


def test_text_search_any_field(products):
    assert [p.id for p in apply_filters(products, [text_search("est-0", "name", "sku")])] == [4]


def test_blank_search_matches_everything(products):
    assert apply_filters(products, [text_search("   ", "name")]) == products


def test_equals_all_is_noop(products):
    assert apply_filters(products, [equals("category", "all")]) == products
    assert apply_filters(products, [equals("category", None)]) == products


def test_equals_case_insensitive():
    items = [entry(1, date(2024, 1, 1)), entry(2, date(2024, 1, 1))]
    assert len(apply_filters(items, [equals("category", "outros", case_sensitive=False)])) == 2
    assert apply_filters(items, [equals("category", "outros")]) == []


def test_low_stock_includes_equal_to_minimum(products):
    assert [p.id for p in apply_filters(products, [low_stock_only(True)])] == [1, 3, 4]
    assert apply_filters(products, [low_stock_only(False)]) == products


def test_filters_are_a_conjunction(products):
    result = apply_filters(products, [equals("category", "FRAME"), low_stock_only(True)])
    assert [p.id for p in result] == [1]


def test_in_period():
    items = [
        entry(1, date(2024, 3, 15)),
        entry(2, date(2024, 3, 1)),
        entry(3, date(2024, 7, 15)),
        entry(4, date(2023, 3, 15)),
    ]
    ref = date(2024, 3, 15)
    assert [t.id for t in apply_filters(items, [in_period("day", ref)])] == [1]
    assert [t.id for t in apply_filters(items, [in_period("month", ref)])] == [1, 2]
    assert [t.id for t in apply_filters(items, [in_period("year", ref)])] == [1, 2, 3]


def test_in_period_unknown_mode():
    with pytest.raises(ValueError):
        apply_filters([entry(1, date(2024, 1, 1))], [in_period("week", date(2024, 1, 1))])
