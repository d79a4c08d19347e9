from __future__ import annotations

import logging
import traceback

from flask import Flask, jsonify, request
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException

from .exceptions import DomainError

logger = logging.getLogger(__name__)


def _failure(message: str, status: int, **extra):
    body = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status


def register(app: Flask) -> None:
    """JSON error bodies for every failure path: `{success: false, message}`."""

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return _failure(str(e), e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return _failure(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if bool(app.config.get("DEBUG", False)):
            return _failure(str(e) or e.__class__.__name__, 500, traceback=traceback.format_exc())
        return _failure("Server error", 500)


def register_jwt(jwt: JWTManager) -> None:
    # Malformed tokens included: every auth failure is a 401.

    @jwt.unauthorized_loader
    def missing_token(reason: str):
        return _failure("Not authorized to access this route", 401)

    @jwt.invalid_token_loader
    def invalid_token(reason: str):
        return _failure(f"Invalid token: {reason}", 401)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return _failure("Token has expired", 401)

    @jwt.user_lookup_error_loader
    def unknown_user(jwt_header, jwt_payload):
        return _failure("User no longer exists", 401)
