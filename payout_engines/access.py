"""
payout_engines.access -- Pure role and permission evaluation engine.

Responsibility:
    Answer permission questions for a role, decide whether one role may
    assign another, and evaluate combined role/permission gates for
    mutation-issuing callers.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payout_kernel/domain/ types (plus kernel logging).

Invariants enforced:
    - Unknown or absent roles degrade to "denied" (rank 0, no permissions).
    - Unknown permission NAMES are programming errors and raise ValueError.
    - No role may assign a role that outranks it; only owners assign owner.

Failure modes:
    - ``require_role_assignment`` raises PermissionDeniedError with the
      same reason ``can_assign_role`` would return.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from payout_kernel.domain.dtos import ValidationError, ValidationResult
from payout_kernel.domain.roles import Permission, Role, RoleCatalog
from payout_kernel.exceptions import PermissionDeniedError
from payout_kernel.logging_config import get_logger

logger = get_logger("engines.access")

VALID_ROLE_NAMES: tuple[str, ...] = tuple(r.value for r in Role)

RoleLike = Role | str | None
PermissionLike = Permission | str


@dataclass(frozen=True)
class RoleAssignmentDecision:
    """Outcome of a role-change check. ``reason`` is set only when denied."""

    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a combined role gate and permission gate."""

    allowed: bool
    role_accepted: bool
    has_required_permission: bool = True
    has_required_permissions: bool = True
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


def _coerce_permission(permission: PermissionLike) -> Permission:
    if isinstance(permission, Permission):
        return permission
    try:
        return Permission(permission)
    except ValueError:
        raise ValueError(f"Unknown permission: {permission!r}") from None


def _role_name(role: RoleLike) -> str | None:
    if isinstance(role, Role):
        return role.value
    return role


class AccessEvaluator:
    """Stateless permission and role-assignment checks over the role catalogue."""

    @staticmethod
    def has_permission(role: RoleLike, permission: PermissionLike) -> bool:
        return RoleCatalog.get_info(role).grants(_coerce_permission(permission))

    @staticmethod
    def has_any_permission(role: RoleLike, permissions: Iterable[PermissionLike]) -> bool:
        """True when the role grants at least one; an empty list grants nothing."""
        info = RoleCatalog.get_info(role)
        wanted = [_coerce_permission(p) for p in permissions]
        return any(info.grants(p) for p in wanted)

    @staticmethod
    def has_all_permissions(role: RoleLike, permissions: Iterable[PermissionLike]) -> bool:
        info = RoleCatalog.get_info(role)
        wanted = [_coerce_permission(p) for p in permissions]
        return all(info.grants(p) for p in wanted)

    @staticmethod
    def compare_levels(role_a: RoleLike, role_b: RoleLike) -> int:
        """Rank difference ``rank(a) - rank(b)``; positive means ``a`` outranks ``b``."""
        return RoleCatalog.rank(role_a) - RoleCatalog.rank(role_b)

    @staticmethod
    def validate_role(role: RoleLike) -> ValidationResult:
        if isinstance(role, Role):
            return ValidationResult.success()
        if not isinstance(role, str) or not role:
            return ValidationResult.failure(
                ValidationError(
                    code="MISSING_REQUIRED_FIELD",
                    message="Role is required and must be a string",
                    field="role",
                )
            )
        if RoleCatalog.resolve(role) is None:
            return ValidationResult.failure(
                ValidationError(
                    code="INVALID_ROLE",
                    message=f"Invalid role: {role}. Valid roles are: {', '.join(VALID_ROLE_NAMES)}",
                    field="role",
                    details={"role": role},
                )
            )
        return ValidationResult.success()

    @classmethod
    def can_assign_role(cls, acting_role: RoleLike, target_role: RoleLike) -> RoleAssignmentDecision:
        """Decide whether ``acting_role`` may grant ``target_role`` to a user.

        Checks run in this order and the first failure wins:
            1. the target must be a known role,
            2. the target must not outrank the acting role,
            3. the acting role must hold ``manage_roles``,
            4. only an owner may assign ``owner``.
        """
        target = RoleCatalog.resolve(target_role)
        if target is None:
            decision = RoleAssignmentDecision(
                allowed=False,
                reason=f"Invalid role: {target_role}. Valid roles are: {', '.join(VALID_ROLE_NAMES)}",
            )
        elif cls.compare_levels(target, acting_role) > 0:
            decision = RoleAssignmentDecision(
                allowed=False,
                reason="Insufficient rank: cannot assign a role with higher permissions than your own",
            )
        elif not RoleCatalog.get_info(acting_role).grants(Permission.MANAGE_ROLES):
            decision = RoleAssignmentDecision(
                allowed=False,
                reason="Insufficient permissions to manage user roles",
            )
        elif target is Role.OWNER and RoleCatalog.resolve(acting_role) is not Role.OWNER:
            decision = RoleAssignmentDecision(
                allowed=False,
                reason="Only existing owners can assign owner role",
            )
        else:
            decision = RoleAssignmentDecision(allowed=True)

        if not decision.allowed:
            logger.info(
                "role_assignment_denied",
                extra={
                    "acting_role": _role_name(acting_role),
                    "target_role": _role_name(target_role),
                    "reason": decision.reason,
                },
            )
        return decision

    @classmethod
    def require_role_assignment(cls, acting_role: RoleLike, target_role: RoleLike) -> None:
        """Raise PermissionDeniedError unless ``can_assign_role`` allows the change."""
        decision = cls.can_assign_role(acting_role, target_role)
        if not decision.allowed:
            raise PermissionDeniedError(
                decision.reason or "Permission denied",
                acting_role=_role_name(acting_role),
                target_role=_role_name(target_role),
            )

    @classmethod
    def evaluate_access(
        cls,
        role: RoleLike,
        accepted_roles: Iterable[RoleLike],
        required_permission: PermissionLike | None = None,
        required_permissions: Iterable[PermissionLike] | None = None,
    ) -> AccessDecision:
        """Role gate plus optional permission gates.

        ``required_permission`` must be granted. ``required_permissions`` is
        satisfied when ANY one of them is granted.
        """
        resolved = RoleCatalog.resolve(role)
        accepted = {RoleCatalog.resolve(r) for r in accepted_roles} - {None}
        role_accepted = resolved is not None and resolved in accepted

        has_one = True if required_permission is None else cls.has_permission(role, required_permission)
        wanted = None if required_permissions is None else list(required_permissions)
        has_any = True if wanted is None else cls.has_any_permission(role, wanted)

        allowed = role_accepted and has_one and has_any
        reason = None
        if not role_accepted:
            reason = f"Role {RoleCatalog.label(role)!r} is not permitted to perform this action"
        elif not (has_one and has_any):
            reason = "Access denied due to insufficient permissions"

        if not allowed and (required_permission is not None or wanted is not None):
            logger.warning(
                "access_denied",
                extra={
                    "role": _role_name(role),
                    "accepted_roles": sorted(r.value for r in accepted),
                    "required_permission": required_permission,
                    "required_permissions": wanted,
                },
            )
        return AccessDecision(
            allowed=allowed,
            role_accepted=role_accepted,
            has_required_permission=has_one,
            has_required_permissions=has_any,
            reason=reason,
        )
