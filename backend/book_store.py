from typing import Any, Dict, List, Mapping, Optional

import psycopg2
from psycopg2.errors import ForeignKeyViolation

from db import get_db_cursor
from errors import ForeignKeyConstraintError, PersistenceFailed

# Columns callers may write; anything else in the input is ignored.
BOOK_FIELDS = ("book_title", "author", "publisher", "image_url")

BOOK_COLUMNS = """
    b.id,
    b.book_title,
    b.author,
    b.publisher,
    b.image_url,
    b.created_at,
    b.updated_at
"""


def _writable(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {col: data[col] for col in BOOK_FIELDS if col in data}


def find_book(book_id: int) -> Optional[Dict[str, Any]]:
    """
    Fetch one book by primary key with its comments, oldest comment first.
    Returns None if the book does not exist.
    """
    book_sql = f"""
        SELECT {BOOK_COLUMNS}
        FROM books b
        WHERE b.id = %s
    """
    comments_sql = """
        SELECT c.id, c.book_id, c.body, c.created_at
        FROM comments c
        WHERE c.book_id = %s
        ORDER BY c.id ASC
    """
    try:
        with get_db_cursor(commit=False) as cur:
            cur.execute(book_sql, (book_id,))
            row = cur.fetchone()
            if row is None:
                return None
            cur.execute(comments_sql, (book_id,))
            comments = cur.fetchall()
    except psycopg2.Error as e:
        raise PersistenceFailed(cause=e)

    book = dict(row)
    book["comments"] = [dict(c) for c in comments]
    return book


def list_books() -> List[Dict[str, Any]]:
    """
    All books ordered by id, each with cnt = number of comments on it.
    """
    sql = f"""
        SELECT
            {BOOK_COLUMNS},
            COUNT(c.id)::int AS cnt
        FROM books b
        LEFT JOIN comments c
            ON c.book_id = b.id
        GROUP BY b.id
        ORDER BY b.id ASC
    """
    try:
        with get_db_cursor(commit=False) as cur:
            cur.execute(sql)
            rows = cur.fetchall()
    except psycopg2.Error as e:
        raise PersistenceFailed(cause=e)

    return [dict(r) for r in rows]


def insert_book(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Insert a book from the writable fields of data and return the stored row.
    """
    fields = _writable(data)
    columns = ", ".join(fields)
    placeholders = ", ".join(["%s"] * len(fields))

    sql = f"""
        INSERT INTO books ({columns}, created_at, updated_at)
        VALUES ({placeholders}, NOW(), NOW())
        RETURNING
            id,
            book_title,
            author,
            publisher,
            image_url,
            created_at,
            updated_at
    """
    try:
        with get_db_cursor(commit=True) as cur:
            cur.execute(sql, tuple(fields.values()))
            row = cur.fetchone()
    except psycopg2.Error as e:
        raise PersistenceFailed(cause=e)

    if row is None:
        raise PersistenceFailed(kind="insert_failed")
    return dict(row)


def update_book(book_id: int, data: Mapping[str, Any]) -> int:
    """
    Overwrite the writable fields present in data. Returns the affected row count.
    """
    fields = _writable(data)
    if not fields:
        return 0

    set_clauses = [f"{col} = %s" for col in fields]
    set_clauses.append("updated_at = NOW()")
    params = list(fields.values())
    params.append(book_id)

    sql = f"""
        UPDATE books
        SET {", ".join(set_clauses)}
        WHERE id = %s
    """
    try:
        with get_db_cursor(commit=True) as cur:
            cur.execute(sql, tuple(params))
            return cur.rowcount
    except psycopg2.Error as e:
        raise PersistenceFailed(cause=e)


def delete_book(book_id: int) -> int:
    """
    Delete a book by id. Returns the deleted row count (0 when not found).

    Raises ForeignKeyConstraintError while comments still reference the book.
    """
    try:
        with get_db_cursor(commit=True) as cur:
            cur.execute("DELETE FROM books WHERE id = %s", (book_id,))
            return cur.rowcount
    except ForeignKeyViolation as e:
        raise ForeignKeyConstraintError(cause=e)
    except psycopg2.Error as e:
        raise PersistenceFailed(cause=e)
