"""Request identity resolution.

Cart routes serve guests and users alike: a valid bearer token wins, a bad
one is ignored, and ``X-Session-Id`` identifies the guest. Order and
product-management routes require a valid token.
"""

from fastapi import Depends, Header

from storefront.access import get_verifier
from storefront.access.identity import Identity, Permission
from storefront.access.port import InvalidTokenError
from storefront.shared.errors import AuthenticationError, ForbiddenError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _bearer_token(authorization):
    if authorization and authorization.startswith("Bearer"):
        parts = authorization.split(" ", 1)
        if len(parts) == 2 and parts[1].strip():
            return parts[1].strip()
    return None


async def optional_identity(
    authorization: str | None = Header(default=None),
    x_session_id: str | None = Header(default=None),
) -> Identity:
    token = _bearer_token(authorization)
    if token:
        try:
            claims = get_verifier().verify(token)
            return Identity.user(claims.user_id, role=claims.role, session_id=x_session_id)
        except InvalidTokenError as exc:
            logger.debug("Ignoring invalid bearer token", error=str(exc))
    return Identity(session_id=x_session_id or None)


async def require_user(authorization: str | None = Header(default=None)) -> Identity:
    token = _bearer_token(authorization)
    if not token:
        raise AuthenticationError("Not authorized, no token")
    try:
        claims = get_verifier().verify(token)
    except InvalidTokenError as exc:
        logger.info("Rejected bearer token", error=str(exc))
        raise AuthenticationError("Not authorized, token failed") from exc
    return Identity.user(claims.user_id, role=claims.role)


def require_permission(permission: Permission):
    """Dependency factory: an authenticated caller whose role grants ``permission``."""

    async def check(identity: Identity = Depends(require_user)) -> Identity:
        if not identity.can(permission):
            raise ForbiddenError("Insufficient permissions")
        return identity

    return check
