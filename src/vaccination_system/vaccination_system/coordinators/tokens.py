from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from ..core.constants import DEFAULT_TOKEN_EXPIRY_DAYS
from ..core.exceptions import AuthenticationError


class TokenService:
    """Signs and verifies coordinator access tokens (JWT).

    The secret is handed in once at startup; an empty secret is a
    configuration error, not something to paper over with a default.
    """

    def __init__(self, secret: str, *, algorithm: str = "HS256", expiry_days: int = DEFAULT_TOKEN_EXPIRY_DAYS):
        if not secret:
            raise ValueError("JWT secret must be configured")
        self._secret = secret
        self._algorithm = algorithm
        self._expiry = timedelta(days=int(expiry_days))

    def sign(self, coordinator_id: int, *, now: datetime | None = None) -> str:
        issued = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(coordinator_id),
            "iat": issued,
            "exp": issued + self._expiry,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> int:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
            return int(payload["sub"])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except (jwt.InvalidTokenError, KeyError, ValueError):
            raise AuthenticationError("Token is not valid")
