# ---------- db_init.py ----------
"""Create and return a database connection (PostgreSQL or SQLite).
Schema creation is delegated to `services.init_db(conn)` to avoid
duplicated table definitions.
"""
import logging
import os
import sqlite3

import psycopg2
import streamlit as st

from core.config import DB_PATH
from core.services import init_db as init_schema

logger = logging.getLogger(__name__)


def _has_postgres_secrets() -> bool:
    try:
        return 'postgres' in st.secrets
    except FileNotFoundError:
        return False


def init_db():
    """Initialize database connection.
    Uses PostgreSQL when secrets provide credentials, SQLite otherwise.
    Connection reuse is handled by caching in app.py.
    """
    if _has_postgres_secrets():
        try:
            # Use parameter format to handle special characters in password
            conn = psycopg2.connect(
                host=st.secrets["postgres"]["host"],
                port=int(st.secrets["postgres"]["port"]),
                database=st.secrets["postgres"]["database"],
                user=st.secrets["postgres"]["user"],
                password=st.secrets["postgres"]["password"],
                sslmode=st.secrets["postgres"].get("sslmode", "require"),
                connect_timeout=10,
            )
            conn.autocommit = False
        except Exception as e:
            logger.exception('PostgreSQL connection failed')
            st.error(f"⚠️ Falha ao conectar no PostgreSQL: {str(e)}")
            st.warning("\U0001F4DD Verifique as credenciais em .streamlit/secrets.toml")
            # Do not fall back to SQLite when PostgreSQL secrets are provided.
            st.stop()
    else:
        conn = connect_sqlite(DB_PATH)

    init_schema(conn)
    return conn


def connect_sqlite(path: str) -> sqlite3.Connection:
    """Create local SQLite connection (ensures the parent directory exists)."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    return sqlite3.connect(path, check_same_thread=False)
