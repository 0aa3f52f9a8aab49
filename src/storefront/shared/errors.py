"""Application errors with the HTTP status they surface as.

Field-level input problems use Protean's ``ValidationError``; these classes
cover the rule violations that carry a different status or need to be told
apart by callers.
"""


class StorefrontError(Exception):
    """Base class for errors reported to API clients with a message."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(StorefrontError):
    """A product, cart, cart item or order does not exist (or is not visible)."""

    status_code = 404


class InvalidStateError(StorefrontError):
    """The target is in a state that does not allow the operation."""

    status_code = 400


class InsufficientStockError(StorefrontError):
    """Requested quantity exceeds the tracked stock of a product."""

    status_code = 400


class ForbiddenError(StorefrontError):
    """The caller's role or ownership does not permit the operation."""

    status_code = 403


class AuthenticationError(StorefrontError):
    """The caller presented no bearer token, or one that failed verification."""

    status_code = 401
