"""
Permission guard.

Pure predicates over a user's permission labels. A user passes when
they hold at least one of the required labels.
"""

from __future__ import annotations

from typing import Iterable, Protocol

from storefront.core.models import Permission
from storefront.errors import AuthorizationDenied


class HasPermissions(Protocol):
    permissions: list[Permission]


# Labels that may change other users' permissions or list all users
PERMISSION_ADMINS = (Permission.ADMIN, Permission.PERMISSIONUPDATE)

# Labels that may delete items owned by someone else
ITEM_DELETERS = (Permission.ADMIN, Permission.ITEMDELETE)


def has_permission(
    user: HasPermissions | None,
    required: Iterable[Permission | str],
) -> bool:
    """True if `user` holds any of the `required` labels."""
    if user is None:
        return False
    held = {Permission(p) for p in user.permissions}
    return any(Permission(p) in held for p in required)


def authorize(
    user: HasPermissions | None,
    required: Iterable[Permission | str],
) -> None:
    """
    Raise unless `user` holds at least one of `required`.

    Usage:
        authorize(ctx.user, [Permission.ADMIN, Permission.PERMISSIONUPDATE])
    """
    required = [Permission(p) for p in required]
    if not has_permission(user, required):
        names = ", ".join(p.value for p in required)
        held = ", ".join(p.value for p in user.permissions) if user else "none"
        raise AuthorizationDenied(
            f"You do not have sufficient permissions: requires one of {names}, you have {held}"
        )
