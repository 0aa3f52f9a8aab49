"""Caller identity passed explicitly into every cart and order operation."""

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    VENDOR = "vendor"
    AUTHOR = "author"
    CUSTOMER = "customer"
    VIEWER = "viewer"
    USER = "user"


class Permission(Enum):
    MANAGE_ORDERS = "manage_orders"
    VIEW_REPORTS = "view_reports"
    MANAGE_PRODUCTS = "manage_products"


ROLE_PERMISSIONS = {
    Role.ADMIN: {Permission.MANAGE_ORDERS, Permission.VIEW_REPORTS, Permission.MANAGE_PRODUCTS},
    Role.MANAGER: {Permission.MANAGE_ORDERS, Permission.VIEW_REPORTS, Permission.MANAGE_PRODUCTS},
}

# Roles that may read and change any customer's orders
PRIVILEGED_ROLES = frozenset({Role.ADMIN.value, Role.MANAGER.value})


@dataclass(frozen=True)
class Identity:
    """Either an authenticated user (``user_id`` + ``role``) or an anonymous session.

    An authenticated identity may also carry the session id it browsed with
    before logging in; the user id always takes precedence when locating data.
    """

    user_id: str | None = None
    role: str | None = None
    session_id: str | None = None

    @classmethod
    def user(cls, user_id, role=Role.CUSTOMER.value, session_id=None):
        return cls(user_id=str(user_id), role=role or Role.CUSTOMER.value, session_id=session_id)

    @classmethod
    def anonymous(cls, session_id):
        return cls(session_id=session_id)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None and self.session_id is not None

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES

    def can(self, permission: Permission) -> bool:
        try:
            role = Role(self.role)
        except ValueError:
            return False
        return permission in ROLE_PERMISSIONS.get(role, set())

    def owns(self, customer_id) -> bool:
        return self.is_authenticated and str(customer_id) == self.user_id
