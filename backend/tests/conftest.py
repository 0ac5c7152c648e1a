import itertools

import psycopg2
import pytest

import book_store
from app import create_app
from errors import ForeignKeyConstraintError

# The store imports get_db_cursor itself, so tests monkeypatch book_store.get_db_cursor
# with make_get_db_cursor(...) rather than touching a real database.


class FakeCursor:
    """
    Simple fake DB cursor:
    - execute: records the call; raises raise_on_execute if given
    - fetchone: if initialised with a list, returns the items in order, otherwise always the same value
    - fetchall: returns a fixed list
    - rowcount: fixed affected-row count
    """

    def __init__(self, fetchone=None, fetchall=None, rowcount=0, raise_on_execute=None):
        self._fetchall = fetchall or []
        self.rowcount = rowcount
        self.raise_on_execute = raise_on_execute
        self.executed = []
        if isinstance(fetchone, list):
            self._fetchone_iter = iter(fetchone)
            self._fetchone_single = None
        else:
            self._fetchone_iter = None
            self._fetchone_single = fetchone

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self.raise_on_execute is not None:
            raise self.raise_on_execute

    def fetchone(self):
        if self._fetchone_iter is not None:
            try:
                return next(self._fetchone_iter)
            except StopIteration:
                return None
        return self._fetchone_single

    def fetchall(self):
        return self._fetchall


def make_get_db_cursor(
    fetchone=None, fetchall=None, rowcount=0, raise_on_enter=False, raise_on_execute=None
):
    """
    Return a get_db_cursor-like context manager factory (monkeypatched into book_store).
    The created cursors are collected on the factory's `cursors` attribute.
    """

    cursors = []

    class _CM:
        def __enter__(self):
            if raise_on_enter:
                raise psycopg2.OperationalError("Simulated DB error")
            cur = FakeCursor(
                fetchone=fetchone,
                fetchall=fetchall,
                rowcount=rowcount,
                raise_on_execute=raise_on_execute,
            )
            cursors.append(cur)
            return cur

        def __exit__(self, exc_type, exc, tb):
            return False  # do not swallow exceptions

    def _get_db_cursor(commit: bool = False):
        return _CM()

    _get_db_cursor.cursors = cursors
    return _get_db_cursor


class InMemoryBookStore:
    """
    Stand-in for book_store holding books and comments in dicts.
    Seeded like the sample catalog: book 1 has three comments, book 2 has none.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self.books = {}
        self.comments = []
        first = self.insert_book(
            {"book_title": "入門", "author": "しょっさん", "publisher": "USP研究所", "image_url": "x"}
        )
        self.insert_book(
            {"book_title": "続編", "author": "しょっさん", "publisher": "USP研究所", "image_url": "y"}
        )
        for n, body in enumerate(["良い", "普通", "難しい"], start=1):
            self.comments.append({"id": n, "book_id": first["id"], "body": body})

    def _comments_for(self, book_id):
        return sorted(
            (c for c in self.comments if c["book_id"] == book_id), key=lambda c: c["id"]
        )

    def find_book(self, book_id):
        book = self.books.get(book_id)
        if book is None:
            return None
        return dict(book, comments=[dict(c) for c in self._comments_for(book_id)])

    def list_books(self):
        return [
            dict(self.books[i], cnt=len(self._comments_for(i))) for i in sorted(self.books)
        ]

    def insert_book(self, data):
        book_id = next(self._ids)
        row = {"id": book_id}
        row.update({k: data[k] for k in book_store.BOOK_FIELDS if k in data})
        self.books[book_id] = row
        return dict(row)

    def update_book(self, book_id, data):
        book = self.books.get(book_id)
        fields = {k: data[k] for k in book_store.BOOK_FIELDS if k in data}
        if book is None or not fields:
            return 0
        book.update(fields)
        return 1

    def delete_book(self, book_id):
        if self._comments_for(book_id):
            raise ForeignKeyConstraintError()
        return 1 if self.books.pop(book_id, None) is not None else 0


class RecordingResponder:
    """Responder that records what the handler did and echoes it back."""

    def __init__(self):
        self.rendered = []
        self.redirected = []

    def render(self, view, data):
        self.rendered.append((view, data))
        return ("render", view, data)

    def redirect(self, location):
        self.redirected.append(location)
        return ("redirect", location)


@pytest.fixture
def memory_store(monkeypatch):
    store = InMemoryBookStore()
    for name in ("find_book", "list_books", "insert_book", "update_book", "delete_book"):
        monkeypatch.setattr(book_store, name, getattr(store, name))
    return store


@pytest.fixture
def res():
    return RecordingResponder()


@pytest.fixture
def book_body():
    return {
        "book_title": "title",
        "author": "しょっさん",
        "publisher": "USP研究所",
        "image_uml": "",
    }


@pytest.fixture
def app():
    app = create_app()
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
