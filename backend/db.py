import logging
import os
from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2.extensions import connection as PGConnection
from psycopg2.errors import ForeignKeyViolation
from psycopg2.extras import RealDictCursor


def get_db_connection() -> PGConnection:
    """
    Create a psycopg2 connection using environment variables from .env.
    Sets the session time zone to UTC so created_at/updated_at are consistent.
    """
    conn = psycopg2.connect(
        host=os.getenv("DB_HOST", "localhost"),
        port=os.getenv("DB_PORT", "5432"),
        dbname=os.getenv("DB_NAME", "book_catalog"),
        user=os.getenv("DB_USER", "postgres"),
        password=os.getenv("DB_PASSWORD", "postgres"),
    )

    try:
        original_autocommit = conn.autocommit
        conn.autocommit = True
        with conn.cursor() as cur:
            cur.execute("SET TIME ZONE 'UTC'")
    except psycopg2.Error:
        logging.exception("Failed to set session time zone to UTC")
    finally:
        conn.autocommit = original_autocommit

    return conn


@contextmanager
def get_db_cursor(commit: bool = False) -> Iterator[RealDictCursor]:
    """
    Context manager that yields a dict cursor and closes the connection afterwards.

    If commit=True:
      - commit on success
      - rollback on exception

    Foreign-key violations are rolled back without logging; callers report them.
    """
    conn = get_db_connection()
    try:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        yield cur
        if commit:
            conn.commit()
    except ForeignKeyViolation:
        conn.rollback()
        raise
    except Exception:
        conn.rollback()
        logging.exception("Database error")
        raise
    finally:
        conn.close()
