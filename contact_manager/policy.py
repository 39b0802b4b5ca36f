"""Access policy for account-scoped records.

Every contact operation resolves an *effective owner scope* here before
touching the query builder or the store. The scope is either a single
account id or :data:`ALL_OWNERS`, which only the explicit admin-global
operations may obtain.
"""

from .errors import Forbidden, InvalidArgument
from .models import User


ALL_OWNERS = "all"


def resolve_owner_scope(caller: User, target_user_id: str | None = None) -> str:
    """
    Return the account id the caller may operate on.

    Args:
        caller (User): Authenticated account.
        target_user_id (str | None): Account to act on behalf of.

    Raises:
        InvalidArgument: If the target is the admin-global sentinel.
        Forbidden: If a non-admin targets another account.

    Returns:
        str: Effective owner id.
    """
    if not target_user_id or target_user_id == caller.id:
        return caller.id
    if target_user_id == ALL_OWNERS:
        raise InvalidArgument("Use the all-accounts listing to span every owner")
    if not caller.is_admin:
        raise Forbidden("Only admins may act on behalf of another account")
    return target_user_id


def resolve_global_scope(caller: User) -> str:
    """
    Return :data:`ALL_OWNERS` for admins.

    Raises:
        Forbidden: If the caller is not an admin.
    """
    require_admin(caller)
    return ALL_OWNERS


def require_admin(caller: User) -> None:
    if not caller.is_admin:
        raise Forbidden("Admin access required")
