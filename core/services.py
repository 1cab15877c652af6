# ---------- services.py ----------
"""Database access helpers shared by the repositories."""
from __future__ import annotations

import hashlib
import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

import psycopg2
import psycopg2.extensions

from core.config import SHOP_TZ
from core.errors import ConflictError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

# Type alias for database connections
DBConnection = Union[sqlite3.Connection, 'psycopg2.extensions.connection']

CENT = Decimal("0.01")


def is_postgres(conn: DBConnection) -> bool:
    """Check if connection is PostgreSQL."""
    return isinstance(conn, psycopg2.extensions.connection)


def placeholder(conn: DBConnection) -> str:
    return "%s" if is_postgres(conn) else "?"


def hash_password(password: str) -> str:
    """Hash password using SHA-256."""
    return hashlib.sha256(password.encode()).hexdigest()


def today() -> date:
    """Current date in the shop's timezone."""
    return datetime.now(SHOP_TZ).date()


def init_db(conn: DBConnection) -> None:
    """Create tables for a new database (safe to run on existing DB)."""
    is_pg = is_postgres(conn)

    # Use SERIAL for PostgreSQL, INTEGER PRIMARY KEY AUTOINCREMENT for SQLite
    id_type = "SERIAL PRIMARY KEY" if is_pg else "INTEGER PRIMARY KEY AUTOINCREMENT"
    # Exact cents: NUMERIC for PostgreSQL, decimal text for SQLite
    money_type = "NUMERIC(10,2)" if is_pg else "TEXT"

    cur = conn.cursor()

    cur.execute(
        f"""
        CREATE TABLE IF NOT EXISTS clients (
            id {id_type},
            name TEXT NOT NULL,
            phone TEXT NOT NULL,
            address TEXT DEFAULT '',
            last_visit TEXT,
            nps_score INTEGER,
            created_at TEXT
        )
        """
    )
    cur.execute(
        f"""
        CREATE TABLE IF NOT EXISTS products (
            id {id_type},
            name TEXT NOT NULL,
            sku TEXT UNIQUE NOT NULL,
            category TEXT NOT NULL,
            brand TEXT DEFAULT '',
            sale_price {money_type} DEFAULT 0,
            cost_price {money_type} DEFAULT 0,
            stock INTEGER DEFAULT 0,
            min_stock INTEGER DEFAULT 5,
            created_at TEXT
        )
        """
    )
    cur.execute(
        f"""
        CREATE TABLE IF NOT EXISTS service_orders (
            id {id_type},
            client_id INTEGER,
            client_name TEXT NOT NULL,
            items TEXT,
            total_value {money_type} DEFAULT 0,
            status TEXT NOT NULL,
            created_at TEXT,
            delivery_date TEXT,
            prescription TEXT
        )
        """
    )
    # order_id is UNIQUE so a sale can never book its income twice
    cur.execute(
        f"""
        CREATE TABLE IF NOT EXISTS transactions (
            id {id_type},
            description TEXT NOT NULL,
            amount {money_type} NOT NULL,
            type TEXT NOT NULL,
            category TEXT,
            date TEXT NOT NULL,
            payment_method TEXT,
            status TEXT,
            order_id INTEGER UNIQUE,
            created_at TEXT
        )
        """
    )
    cur.execute(
        f"""
        CREATE TABLE IF NOT EXISTS employees (
            id {id_type},
            username TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            name TEXT NOT NULL,
            role TEXT NOT NULL,
            created_at TEXT
        )
        """
    )
    conn.commit()


@contextmanager
def transaction(conn: DBConnection) -> Iterator[Any]:
    """Yield a cursor; commit on success, roll back and translate errors otherwise."""
    cur = conn.cursor()
    try:
        yield cur
        conn.commit()
    except (sqlite3.IntegrityError, psycopg2.IntegrityError) as e:
        conn.rollback()
        logger.warning("Integrity error: %s", e)
        raise ConflictError("Registro duplicado: o valor informado já existe.") from e
    except (sqlite3.Error, psycopg2.Error) as e:
        conn.rollback()
        logger.exception("Database write failed")
        raise PersistenceError(f"Erro ao salvar no banco de dados: {e}") from e
    except Exception:
        conn.rollback()
        raise


def fetch_rows(
    conn: DBConnection, query: str, params: Sequence[Any] = ()
) -> List[Dict[str, Any]]:
    """Run a SELECT and return rows as dicts keyed by column name."""
    cur = conn.cursor()
    try:
        cur.execute(query, tuple(params))
        cols = [d[0] for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]
    except (sqlite3.Error, psycopg2.Error) as e:
        # psycopg2 leaves the connection in an aborted state after a failure
        conn.rollback()
        logger.exception("Failed to read from database")
        raise PersistenceError(f"Erro ao carregar dados: {e}") from e


def insert_row(cur: Any, conn: DBConnection, table: str, data: Dict[str, Any]) -> int:
    """Insert ``data`` into ``table`` using an open cursor and return the new id."""
    ph = placeholder(conn)
    cols = ", ".join(data.keys())
    placeholders = ", ".join([ph] * len(data))
    query = f"INSERT INTO {table} ({cols}) VALUES ({placeholders})"
    if is_postgres(conn):
        cur.execute(query + " RETURNING id", tuple(data.values()))
        return int(cur.fetchone()[0])
    cur.execute(query, tuple(data.values()))
    return int(cur.lastrowid)


def update_row(cur: Any, conn: DBConnection, table: str, row_id: int, data: Dict[str, Any]) -> int:
    """Update columns of one row; returns the number of rows touched."""
    ph = placeholder(conn)
    assignments = ", ".join(f"{col}={ph}" for col in data)
    cur.execute(
        f"UPDATE {table} SET {assignments} WHERE id={ph}",
        tuple(data.values()) + (row_id,),
    )
    return cur.rowcount


def delete_row(cur: Any, conn: DBConnection, table: str, row_id: int) -> int:
    ph = placeholder(conn)
    cur.execute(f"DELETE FROM {table} WHERE id={ph}", (row_id,))
    return cur.rowcount


# ============================================================================
# Value conversion
# ============================================================================

def to_money(value: Any, field_label: str = "Valor") -> Decimal:
    """Parse user or database input into a Decimal rounded to the cent."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal("0.00")
    try:
        # str() first so floats keep their printed value (0.1 -> 0.10)
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip().replace(",", "."))
        # NaN and Infinity parse fine but cannot be compared or stored
        if amount.is_finite():
            return amount.quantize(CENT)
    except InvalidOperation as e:
        raise ValidationError(f"{field_label} inválido: '{value}'") from e
    raise ValidationError(f"{field_label} inválido: '{value}'")


def to_int(value: Any, field_label: str, default: int = 0) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        return int(float(str(value).strip()))
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"{field_label} inválido: '{value}'") from e


def to_date(value: Any) -> Optional[date]:
    """Coerce ISO strings and datetimes to ``date``; blanks become None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value)[:10]).date()
    except ValueError as e:
        raise ValidationError(f"Data inválida: '{value}'") from e


def date_to_db(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def money_to_db(conn: DBConnection, value: Decimal) -> Union[Decimal, str]:
    # sqlite3 has no Decimal adapter; keep the exact text
    return value if is_postgres(conn) else str(value)
