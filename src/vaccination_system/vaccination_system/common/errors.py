from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import AuthenticationError, DomainError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Translate domain exceptions into JSON responses."""

    @app.errorhandler(AuthenticationError)
    def handle_authentication(e):
        return jsonify({"message": str(e)}), 401

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        return jsonify({"message": str(e)}), 404

    @app.errorhandler(ValidationError)
    def handle_validation(e):
        return jsonify({"message": str(e)}), 400

    @app.errorhandler(DomainError)
    def handle_domain(e):
        return jsonify({"message": str(e)}), 400

    @app.errorhandler(HTTPException)
    def handle_http(e):
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("Unhandled error")
        return jsonify({"message": "Server error"}), 500
