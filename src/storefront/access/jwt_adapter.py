"""HS256 JSON Web Token verifier backed by PyJWT."""

import os
from datetime import timedelta

import jwt
from protean.exceptions import ConfigurationError

from storefront.access.identity import Role
from storefront.access.port import InvalidTokenError, TokenClaims, TokenVerifier
from storefront.shared.clock import utcnow
from storefront.utils.logging import get_environment

DEFAULT_SECRET = "development-secret"
SECRET_REQUIRED_IN = frozenset({"production", "staging"})
ALGORITHM = "HS256"


class JwtTokenVerifier(TokenVerifier):
    def __init__(self, secret: str | None = None) -> None:
        secret = secret or os.environ.get("STOREFRONT_AUTH_SECRET")
        if not secret:
            if get_environment() in SECRET_REQUIRED_IN:
                raise ConfigurationError("STOREFRONT_AUTH_SECRET must be set in production and staging")
            secret = DEFAULT_SECRET
        self.secret = secret

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[ALGORITHM])
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        user_id = payload.get("id") or payload.get("sub")
        if not user_id:
            raise InvalidTokenError("Token carries no user id")
        return TokenClaims(user_id=str(user_id), role=payload.get("role") or Role.CUSTOMER.value)

    def issue(self, user_id: str, role: str = Role.CUSTOMER.value, expires_in: timedelta = timedelta(days=30)) -> str:
        """Sign a token the way the identity provider does (development and tests)."""
        payload = {"id": str(user_id), "role": role, "exp": utcnow() + expires_in}
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)
