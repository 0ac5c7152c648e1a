from typing import Any, Dict, Tuple

from flask import Blueprint, Response, redirect, render_template, request

import book_provider
from book_provider import BookRequest

book_bp = Blueprint("books", __name__)

# Status codes for views that report a failure
VIEW_STATUS = {"error": 500, "not_found": 404}


class FlaskResponder:
    """
    Adapts the controller's render/redirect calls to Flask responses.
    """

    def render(self, view: str, data: Dict[str, Any]) -> Tuple[str, int]:
        return render_template(f"{view}.html", **data), VIEW_STATUS.get(view, 200)

    def redirect(self, location: str) -> Response:
        return redirect(location)


def _book_request(**params: Any) -> BookRequest:
    """
    Build the controller's request record.
    Form fields take precedence; a JSON body is accepted as a fallback.
    """
    body = request.form.to_dict() or request.get_json(silent=True) or {}
    return BookRequest(params=params, body=dict(body))


@book_bp.get("/")
def view_books():
    """
    GET /books/
    List all books with their comment counts.
    """
    return book_provider.view(_book_request(), FlaskResponder())


@book_bp.get("/<int:book_id>")
def find_book(book_id: int):
    """
    GET /books/<book_id>
    Show one book with its comments.
    """
    return book_provider.find(_book_request(id=book_id), FlaskResponder())


@book_bp.post("/create")
def create_book():
    """
    POST /books/create
    Register a book, then redirect to /books/<new id>.
    """
    return book_provider.create(_book_request(), FlaskResponder())


@book_bp.post("/update/<int:book_id>")
def update_book(book_id: int):
    """
    POST /books/update/<book_id>
    Overwrite the submitted fields, then redirect to /books/<book_id>.
    """
    return book_provider.update(_book_request(id=book_id), FlaskResponder())


@book_bp.post("/destroy/<int:book_id>")
def destroy_book(book_id: int):
    """
    POST /books/destroy/<book_id>
    Delete a book without comments, then redirect to /books/.
    """
    return book_provider.destroy(_book_request(id=book_id), FlaskResponder())
