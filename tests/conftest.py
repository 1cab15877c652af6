"""Fixtures for the core tests.

Each test gets its own SQLite database in a temp directory, initialized with
the production schema, and the repositories bundle built on top of it.
"""
import os
import shutil
import tempfile
from datetime import date

import pytest

from core.db_init import connect_sqlite
from core.repositories import build_repositories
from core.services import init_db


@pytest.fixture
def conn():
    """Yield a fresh SQLite connection with all tables created."""
    temp_dir = tempfile.mkdtemp(prefix="otica-tests-")
    connection = connect_sqlite(os.path.join(temp_dir, "test.db"))
    init_db(connection)
    try:
        yield connection
    finally:
        connection.close()
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def repos(conn):
    return build_repositories(conn)


@pytest.fixture
def sample_date():
    """Stable date value for deterministic tests."""
    return date(2024, 3, 15)


def make_product(repos, name="Armação Ray-Ban", sku=None, **fields):
    """Helper: create a product with sensible defaults."""
    data = {
        "name": name,
        "sku": sku or "",
        "category": "FRAME",
        "brand": "Ray-Ban",
        "sale_price": "450.00",
        "cost_price": "200.00",
        "stock": 10,
        "min_stock": 2,
    }
    data.update(fields)
    return repos.products.create(**data)


def make_transaction(repos, amount, type="INCOME", entry_date=None, **fields):
    """Helper: create a cash-flow entry."""
    data = {
        "description": fields.pop("description", f"{type} {amount}"),
        "amount": amount,
        "type": type,
        "date": entry_date or date(2024, 3, 15),
    }
    data.update(fields)
    return repos.transactions.create(**data)
