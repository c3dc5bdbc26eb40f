from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_non_empty
from ..core.exceptions import AuthenticationError, ValidationError
from .model import Coordinator
from .repository import CoordinatorRepository
from .tokens import TokenService


@dataclass(frozen=True)
class AuthResult:
    """What the client receives after signup/login."""

    token: str
    coordinator: Coordinator


class AuthService:
    """Use cases: register, log in and resolve the acting coordinator."""

    def __init__(self, coordinators: CoordinatorRepository, tokens: TokenService):
        self._coordinators = coordinators
        self._tokens = tokens

    def signup(self, *, name: str, email: str, password: str, school: str) -> AuthResult:
        if not all(v and str(v).strip() for v in (name, email, password, school)):
            raise ValidationError("All fields are required")

        email = email.strip().lower()
        if self._coordinators.get_by_email(email):
            raise ValidationError("Coordinator with this email already exists")

        coordinator_id = self._coordinators.create(
            name=name.strip(),
            email=email,
            password_hash=generate_password_hash(password),
            school=school.strip(),
        )
        coordinator = self._coordinators.get_by_id(coordinator_id)
        return AuthResult(token=self._tokens.sign(coordinator_id), coordinator=coordinator)

    def login(self, *, email: str, password: str) -> AuthResult:
        if not email or not password:
            raise ValidationError("Email and password are required")

        coordinator = self._coordinators.get_by_email(require_non_empty(email, "Email").lower())
        if not coordinator:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(coordinator.password_hash, password)
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")

        return AuthResult(token=self._tokens.sign(coordinator.coordinator_id), coordinator=coordinator)

    def resolve_token(self, token: str) -> Coordinator:
        if not token:
            raise AuthenticationError("No token, authorization denied")

        coordinator = self._coordinators.get_by_id(self._tokens.verify(token))
        if not coordinator:
            raise AuthenticationError("Token is not valid")
        return coordinator
