"""Role and ownership checks."""

from app.models.user import Role, User


def authorize_role(user: User, required_role: Role) -> bool:
    """True only when the user's role is exactly ``required_role``."""
    return Role(user.role) == required_role


def authorize_owner_or_role(user: User, owner_id: int | None, required_role: Role) -> bool:
    """True when the user owns the resource or holds ``required_role``."""
    if owner_id is not None and user.id == owner_id:
        return True
    return authorize_role(user, required_role)


def is_super_admin(user: User) -> bool:
    return authorize_role(user, Role.SUPER_ADMIN)


def owns_or_is_super_admin(user: User, owner_id: int | None) -> bool:
    return authorize_owner_or_role(user, owner_id, Role.SUPER_ADMIN)
