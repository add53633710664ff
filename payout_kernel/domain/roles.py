"""
Role catalogue -- closed role and permission enumerations.

Responsibility:
    Maps each user role to its display metadata, permission set and rank.
    Permission names form a closed enumeration so a misspelled permission
    fails loudly at lookup instead of silently evaluating to "denied".

Architecture position:
    Kernel > Domain -- pure lookup table, zero I/O.

Invariants enforced:
    - Rank ordering: owner (100) > financial_controller (80) >
      business (75) > developer (60).
    - Unknown or absent roles resolve to ``UNKNOWN_ROLE``: no permissions,
      rank 0.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class Role(str, Enum):
    OWNER = "owner"
    BUSINESS = "business"
    DEVELOPER = "developer"
    FINANCIAL_CONTROLLER = "financial_controller"


class Permission(str, Enum):
    MANAGE_USERS = "manage_users"
    MANAGE_ROLES = "manage_roles"
    MANAGE_DISBURSEMENTS = "manage_disbursements"
    MANAGE_PAYMENTS = "manage_payments"
    MANAGE_WALLETS = "manage_wallets"
    MANAGE_ASSETS = "manage_assets"
    VIEW_ANALYTICS = "view_analytics"
    MANAGE_SETTINGS = "manage_settings"
    MANAGE_API_KEYS = "manage_api_keys"
    MANAGE_ORGANIZATION = "manage_organization"
    VIEW_RECEIVERS = "view_receivers"
    VIEW_SETTINGS = "view_settings"
    VIEW_DISBURSEMENTS = "view_disbursements"
    VIEW_PAYMENTS = "view_payments"
    MANAGE_INTEGRATIONS = "manage_integrations"
    APPROVE_PAYMENTS = "approve_payments"
    VIEW_FINANCIAL_REPORTS = "view_financial_reports"
    MANAGE_PAYMENT_LIMITS = "manage_payment_limits"


@dataclass(frozen=True)
class RoleInfo:
    """Display metadata, permission set and rank of one role."""

    display_name: str
    label: str
    description: str
    permissions: frozenset[Permission]
    rank: int

    def grants(self, permission: Permission) -> bool:
        return permission in self.permissions


UNKNOWN_ROLE = RoleInfo(
    display_name="Unknown",
    label="Unknown",
    description="Unknown role with no permissions",
    permissions=frozenset(),
    rank=0,
)

_P = Permission

_CATALOG: dict[Role, RoleInfo] = {
    Role.OWNER: RoleInfo(
        display_name="Owner",
        label="Owner",
        description="Full system access with all permissions",
        permissions=frozenset({
            _P.MANAGE_USERS,
            _P.MANAGE_ROLES,
            _P.MANAGE_DISBURSEMENTS,
            _P.MANAGE_PAYMENTS,
            _P.MANAGE_WALLETS,
            _P.MANAGE_ASSETS,
            _P.VIEW_ANALYTICS,
            _P.MANAGE_SETTINGS,
            _P.MANAGE_API_KEYS,
            _P.MANAGE_ORGANIZATION,
        }),
        rank=100,
    ),
    Role.BUSINESS: RoleInfo(
        display_name="Business User",
        label="Business user",
        description="Business operations with limited administrative access",
        permissions=frozenset({
            _P.MANAGE_DISBURSEMENTS,
            _P.MANAGE_PAYMENTS,
            _P.VIEW_RECEIVERS,
            _P.VIEW_ANALYTICS,
            _P.MANAGE_API_KEYS,
            _P.VIEW_SETTINGS,
        }),
        rank=75,
    ),
    Role.DEVELOPER: RoleInfo(
        display_name="Developer",
        label="Developer",
        description="Technical access for development and integration",
        permissions=frozenset({
            _P.MANAGE_API_KEYS,
            _P.VIEW_DISBURSEMENTS,
            _P.VIEW_PAYMENTS,
            _P.VIEW_ANALYTICS,
            _P.MANAGE_INTEGRATIONS,
            _P.VIEW_SETTINGS,
        }),
        rank=60,
    ),
    Role.FINANCIAL_CONTROLLER: RoleInfo(
        display_name="Financial Controller",
        label="Financial controller",
        description="Financial oversight and control permissions",
        permissions=frozenset({
            _P.VIEW_DISBURSEMENTS,
            _P.VIEW_PAYMENTS,
            _P.VIEW_RECEIVERS,
            _P.VIEW_ANALYTICS,
            _P.APPROVE_PAYMENTS,
            _P.VIEW_FINANCIAL_REPORTS,
            _P.MANAGE_PAYMENT_LIMITS,
        }),
        rank=80,
    ),
}

ROLE_CATALOG: Mapping[Role, RoleInfo] = MappingProxyType(_CATALOG)


class RoleCatalog:
    """Static lookups over ``ROLE_CATALOG``. Never raises for unknown roles."""

    @staticmethod
    def resolve(role: Role | str | None) -> Role | None:
        if isinstance(role, Role):
            return role
        if not isinstance(role, str):
            return None
        try:
            return Role(role.strip())
        except ValueError:
            return None

    @classmethod
    def get_info(cls, role: Role | str | None) -> RoleInfo:
        resolved = cls.resolve(role)
        if resolved is None:
            return UNKNOWN_ROLE
        return ROLE_CATALOG[resolved]

    @classmethod
    def rank(cls, role: Role | str | None) -> int:
        return cls.get_info(role).rank

    @classmethod
    def label(cls, role: Role | str | None) -> str:
        """Short UI label; an unrecognised role string is echoed back."""
        resolved = cls.resolve(role)
        if resolved is not None:
            return ROLE_CATALOG[resolved].label
        if isinstance(role, str) and role:
            return role
        return UNKNOWN_ROLE.label

    @staticmethod
    def available_roles() -> tuple[tuple[Role, RoleInfo], ...]:
        """All roles in declaration order."""
        return tuple((role, ROLE_CATALOG[role]) for role in Role)
