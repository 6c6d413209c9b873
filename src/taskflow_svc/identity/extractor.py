"""Identity extraction - resolve the acting user from HTTP requests."""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Callable

from starlette.requests import Request

from ..requests.types import Role, User


logger = logging.getLogger(__name__)


@dataclass
class IdentityExtractor:
    """
    Extracts the acting user from HTTP requests.

    Supports:
    - JWT tokens (Authorization: Bearer ...), claims decoded without
      verification; signature checks belong to an upstream gateway
    - Plain identity headers set by a trusted front end

    Returns None when no identity is present.
    """
    # Header names
    jwt_header: str = "Authorization"
    user_id_header: str = "X-User-Id"
    user_name_header: str = "X-User-Name"
    role_header: str = "X-User-Role"

    # JWT claim mappings
    jwt_user_claim: str = "sub"
    jwt_name_claim: str = "name"
    jwt_role_claim: str = "role"

    # Custom extractor function (for complex scenarios)
    custom_extractor: Callable[[Request], User | None] | None = None

    def extract(self, request: Request) -> User | None:
        """
        Extract the acting user from request.

        Tries in order:
        1. Custom extractor (if configured)
        2. JWT token
        3. Identity headers
        """
        if self.custom_extractor:
            user = self.custom_extractor(request)
            if user:
                return user

        user = self._extract_jwt(request)
        if user:
            return user

        return self._extract_headers(request)

    def _extract_jwt(self, request: Request) -> User | None:
        """Resolve the user from the claims of a Bearer token."""
        scheme, _, token = request.headers.get(self.jwt_header, "").partition(" ")
        if scheme != "Bearer" or not token:
            return None

        claims = _decode_claims(token)
        if claims is None:
            return None
        return _build_user(
            claims.get(self.jwt_user_claim),
            claims.get(self.jwt_name_claim),
            claims.get(self.jwt_role_claim),
        )

    def _extract_headers(self, request: Request) -> User | None:
        """Extract identity from plain identity headers."""
        return _build_user(
            request.headers.get(self.user_id_header),
            request.headers.get(self.user_name_header),
            request.headers.get(self.role_header),
        )


def _decode_claims(token: str) -> dict | None:
    """Decode the payload segment of a ``header.payload.signature`` token."""
    segments = token.split(".")
    if len(segments) != 3:
        return None
    payload = segments[1] + "=" * (-len(segments[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload))
    except (ValueError, TypeError) as e:
        logger.debug(f"Undecodable bearer token: {e}")
        return None
    return claims if isinstance(claims, dict) else None


def _build_user(user_id, name, role) -> User | None:
    if not user_id or not isinstance(user_id, str):
        return None
    try:
        parsed_role = Role.parse(role) if role else Role.AGENT
    except ValueError:
        logger.debug(f"Unknown role {role!r} for {user_id}")
        return None
    return User(id=user_id, name=name if isinstance(name, str) and name else user_id, role=parsed_role)


# Default extractor instance
_default_extractor = IdentityExtractor()


def extract_identity(request: Request) -> User | None:
    """Extract identity using default extractor."""
    return _default_extractor.extract(request)
