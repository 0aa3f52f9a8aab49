"""Token verifier port (abstract interface).

Token issuance belongs to the identity provider; the storefront only needs
to turn a bearer token into verified claims.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class InvalidTokenError(Exception):
    """The token is malformed, expired or signed with the wrong key."""


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of a bearer token."""

    user_id: str
    role: str


class TokenVerifier(ABC):
    """Abstract token verifier."""

    @abstractmethod
    def verify(self, token: str) -> TokenClaims:
        """Return the token's claims or raise ``InvalidTokenError``."""
