"""Token verifier factory.

Provides get_verifier() / set_verifier() to swap implementations; the
default verifies HS256 tokens signed with ``STOREFRONT_AUTH_SECRET``.
"""

from storefront.access.jwt_adapter import JwtTokenVerifier
from storefront.access.port import TokenVerifier

_current_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    """Return the current token verifier. Defaults to JwtTokenVerifier."""
    global _current_verifier
    if _current_verifier is None:
        _current_verifier = JwtTokenVerifier()
    return _current_verifier


def set_verifier(verifier: TokenVerifier) -> None:
    """Override the active token verifier (useful for tests)."""
    global _current_verifier
    _current_verifier = verifier


def reset_verifier() -> None:
    """Reset to default verifier."""
    global _current_verifier
    _current_verifier = None
