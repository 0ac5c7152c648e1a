"""
Book catalog controller.

Data operations (validate, get_book, get_contents, register_book, update_book,
remove_book) talk to the book store; request handlers (find, view, create,
update, destroy) turn their outcome into a render or a redirect on the
responder they are given.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol

import book_store
from config import (
    BOOKS_PATH,
    DEFAULT_IMAGE_URL,
    ERROR_MESSAGE,
    NOT_FOUND_MESSAGE,
    TITLE_REQUIRED_MESSAGE,
)
from errors import PersistenceFailed, ValidationFailed
from parse_utils import ParseError, parse_int

logger = logging.getLogger(__name__)


class Responder(Protocol):
    def render(self, view: str, data: Dict[str, Any]) -> Any: ...

    def redirect(self, location: str) -> Any: ...


@dataclass
class BookRequest:
    """Inbound request record: route params plus submitted body."""

    params: Dict[str, Any] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationResult:
    ok: bool
    errors: List[str] = field(default_factory=list)
    normalized: Dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Data operations
# ---------------------------------------------------------------------------


def validate(data: Mapping[str, Any]) -> ValidationResult:
    """
    Check book input without touching it.

    book_title must be a non-blank string. On success, normalized is a copy of
    data with image_url filled in from DEFAULT_IMAGE_URL when it is empty.
    """
    normalized = dict(data)
    title = normalized.get("book_title")
    if not isinstance(title, str) or not title.strip():
        return ValidationResult(ok=False, errors=[TITLE_REQUIRED_MESSAGE], normalized=normalized)

    if not normalized.get("image_url"):
        normalized["image_url"] = DEFAULT_IMAGE_URL
    return ValidationResult(ok=True, normalized=normalized)


def get_book(book_id: Optional[int]) -> Optional[Dict[str, Any]]:
    """A book with its comments, or None when there is no such book."""
    if book_id is None:
        return None
    return book_store.find_book(book_id)


def get_contents() -> List[Dict[str, Any]]:
    return book_store.list_books()


def register_book(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate and insert a new book, returning the stored row with its id.

    Raises ValidationFailed (nothing is written) or PersistenceFailed.
    """
    result = validate(data)
    if not result.ok:
        raise ValidationFailed(messages=result.errors)
    return book_store.insert_book(result.normalized)


def update_book(book_id: int, data: Mapping[str, Any]) -> List[int]:
    """Overwrite the given fields of a book. Returns [affected_count]."""
    return [book_store.update_book(book_id, data)]


def remove_book(book_id: int) -> int:
    """Delete a book. Raises ForeignKeyConstraintError if it still has comments."""
    return book_store.delete_book(book_id)


# ---------------------------------------------------------------------------
# Request handlers
# ---------------------------------------------------------------------------


def _render_error(res: Responder) -> Any:
    return res.render("error", {"message": ERROR_MESSAGE})


def _route_id(req: BookRequest) -> int:
    return parse_int(req.params.get("id"), field="id")


def find(req: BookRequest, res: Responder) -> Any:
    try:
        raw_id = req.params.get("id")
        book = get_book(None if raw_id is None else _route_id(req))
    except ParseError as e:
        logger.info("Book lookup rejected: %s (%s)", e.error_code, e.message)
        return _render_error(res)
    except PersistenceFailed:
        logger.exception("Failed to load book %r", req.params.get("id"))
        return _render_error(res)

    if book is None:
        return res.render("not_found", {"message": NOT_FOUND_MESSAGE})
    return res.render("description", {"book": book})


def view(req: BookRequest, res: Responder) -> Any:
    try:
        books = get_contents()
    except PersistenceFailed:
        logger.exception("Failed to list books")
        return _render_error(res)
    return res.render("view", {"books": books})


def create(req: BookRequest, res: Responder) -> Any:
    try:
        book = register_book(req.body)
    except ValidationFailed as e:
        logger.info("Book rejected: %s", e)
        return _render_error(res)
    except PersistenceFailed:
        logger.exception("Failed to register book")
        return _render_error(res)
    return res.redirect(f"/books/{book['id']}")


def update(req: BookRequest, res: Responder) -> Any:
    try:
        book_id = _route_id(req)
        if "book_title" in req.body:
            result = validate(req.body)
            if not result.ok:
                raise ValidationFailed(messages=result.errors)
        update_book(book_id, req.body)
    except ParseError as e:
        logger.info("Book update rejected: %s (%s)", e.error_code, e.message)
        return _render_error(res)
    except ValidationFailed as e:
        logger.info("Book update rejected for id %r: %s", req.params.get("id"), e)
        return _render_error(res)
    except PersistenceFailed:
        logger.exception("Failed to update book %r", req.params.get("id"))
        return _render_error(res)
    return res.redirect(f"/books/{book_id}")


def destroy(req: BookRequest, res: Responder) -> Any:
    try:
        remove_book(_route_id(req))
    except ParseError as e:
        logger.info("Book delete rejected: %s (%s)", e.error_code, e.message)
        return _render_error(res)
    except PersistenceFailed as e:
        logger.warning("Failed to delete book %r: %s", req.params.get("id"), e.kind)
        return _render_error(res)
    return res.redirect(BOOKS_PATH)
