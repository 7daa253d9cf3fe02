"""
Caller identity and role checks.

Authentication happens upstream; the identity provider forwards the
caller id and role in the ``X-Caller-Id`` / ``X-Caller-Role`` headers.
Requests without a role are treated as customers.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header

from fulfillment.core.exceptions import PermissionDenied


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    WAITER = "waiter"
    RESTAURANT_ADMIN = "restaurant_admin"
    SUPER_ADMIN = "super_admin"


STAFF_ROLES = frozenset({Role.WAITER, Role.RESTAURANT_ADMIN, Role.SUPER_ADMIN})
ADMIN_ROLES = frozenset({Role.RESTAURANT_ADMIN, Role.SUPER_ADMIN})


@dataclass(frozen=True)
class Caller:
    caller_id: Optional[str]
    role: Role

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


async def get_caller(
    x_caller_id: Optional[str] = Header(None, alias="x-caller-id"),
    x_caller_role: Optional[str] = Header(None, alias="x-caller-role"),
) -> Caller:
    if not x_caller_role:
        return Caller(caller_id=x_caller_id, role=Role.CUSTOMER)
    try:
        role = Role(x_caller_role.lower())
    except ValueError:
        raise PermissionDenied(f"Unknown role '{x_caller_role}'")
    return Caller(caller_id=x_caller_id, role=role)


async def require_staff(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_staff:
        raise PermissionDenied("This action is reserved for restaurant staff")
    return caller


async def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_admin:
        raise PermissionDenied("This action is reserved for restaurant administrators")
    return caller
