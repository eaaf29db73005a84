"""
Bearer-token authentication seam.
Token verification and password hashing are collaborators injected into the
app; this module only defines their shape and the request dependencies.
"""
from __future__ import annotations

import hashlib
import logging
import secrets
from typing import Callable, Optional, Protocol

from fastapi import Request
from pydantic import BaseModel

from setlone.errors import AuthenticationError

logger = logging.getLogger(__name__)

PasswordHasher = Callable[[str], str]


class Principal(BaseModel):
    id: int
    email: str
    username: str


class TokenVerifier(Protocol):
    def verify(self, token: str) -> Principal:
        """Return the caller's identity or raise AuthenticationError."""
        ...


class RejectAllVerifier:
    """Used when no verifier is configured; every token is refused."""

    def verify(self, token: str) -> Principal:
        logger.warning("No token verifier configured; rejecting bearer token")
        raise AuthenticationError("Invalid or expired token")


def pbkdf2_hasher(password: str, iterations: int = 260_000) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), iterations)
    return f"pbkdf2_sha256${iterations}${salt}${digest.hex()}"


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization")
    if not header or not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


def require_principal(request: Request) -> Principal:
    token = _bearer_token(request)
    if token is None:
        raise AuthenticationError("No token provided")

    verifier: TokenVerifier = request.app.state.token_verifier
    try:
        return verifier.verify(token)
    except Exception as exc:
        logger.info(f"Bearer token rejected: {exc}")
        raise AuthenticationError("Invalid or expired token") from exc

