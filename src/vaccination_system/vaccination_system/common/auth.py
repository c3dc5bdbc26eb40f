from __future__ import annotations

from functools import wraps

from flask import g, request

from ..coordinators.service import AuthService


def bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip()
    return ""


def token_required(auth_service: AuthService):
    """Build a view decorator that resolves the coordinator behind the bearer token.

    The resolved coordinator is stored on `flask.g.coordinator`; failures raise
    AuthenticationError before the view runs.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.coordinator = auth_service.resolve_token(bearer_token())
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_coordinator_id() -> int:
    return int(g.coordinator.coordinator_id)
