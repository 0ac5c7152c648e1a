import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, current_app, g, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from book_routes import book_bp
from config import ERROR_MESSAGE, NOT_FOUND_MESSAGE
from response_utils import error_response


def _wants_json() -> bool:
    return request.path.startswith("/api/")


def create_app() -> Flask:
    """
    Application factory: initializes Flask, error handlers, and blueprints.
    """
    load_dotenv()

    # Templates ship as the book_templates package next to this module
    app = Flask(__name__, template_folder="book_templates")

    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "dev-secret")

    # Request ID middleware (helps correlate logs with responses)
    @app.before_request
    def _attach_request_id():
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        g.request_id = rid

    @app.after_request
    def _inject_response_headers(resp):
        if getattr(g, "request_id", None):
            resp.headers["X-Request-ID"] = g.request_id
        return resp

    # Health check
    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok"}), 200

    @app.errorhandler(404)
    def not_found(e):
        if _wants_json():
            return error_response("not_found", "Endpoint not found.", status=404)
        return render_template("not_found.html", message=NOT_FOUND_MESSAGE), 404

    # Catch-all exception handler, behavior depends on debug mode
    @app.errorhandler(Exception)
    def handle_exception(e):
        debug_mode = current_app.debug

        if isinstance(e, HTTPException):
            if _wants_json():
                message = e.description if debug_mode else "Unexpected HTTP error."
                return error_response("http_error", message, status=e.code or 500)
            return render_template("error.html", message=ERROR_MESSAGE), e.code or 500

        current_app.logger.exception("Unhandled exception")
        if _wants_json():
            message = str(e) if debug_mode else "Unexpected server error."
            return error_response("server_error", message, status=500)
        return render_template("error.html", message=ERROR_MESSAGE), 500

    app.register_blueprint(book_bp, url_prefix="/books")

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    debug = os.getenv("FLASK_DEBUG", "1") == "1"
    app = create_app()
    app.run(debug=debug)
