"""
Tests for AccessEvaluator.

Covers:
- Single, any-of and all-of permission checks
- Rank comparison
- Role validation messages
- Role assignment rules and their order
- Combined role and permission gates
"""

import pytest

from payout_engines.access import AccessEvaluator
from payout_kernel.domain.roles import Permission, Role
from payout_kernel.exceptions import PermissionDeniedError


class TestPermissions:
    def test_has_permission(self):
        assert AccessEvaluator.has_permission("owner", Permission.MANAGE_ROLES)
        assert AccessEvaluator.has_permission(Role.DEVELOPER, "manage_integrations")
        assert not AccessEvaluator.has_permission("developer", "manage_payments")

    def test_unknown_role_has_nothing(self):
        assert not AccessEvaluator.has_permission("janitor", "view_analytics")
        assert not AccessEvaluator.has_permission(None, "view_analytics")

    def test_unknown_permission_raises(self):
        with pytest.raises(ValueError, match="Unknown permission"):
            AccessEvaluator.has_permission("owner", "manage_evrything")

    def test_any_and_all(self):
        perms = ["approve_payments", "manage_roles"]
        assert AccessEvaluator.has_any_permission("financial_controller", perms)
        assert not AccessEvaluator.has_all_permissions("financial_controller", perms)
        assert AccessEvaluator.has_all_permissions("owner", ["manage_roles", "manage_users"])

    def test_empty_permission_lists(self):
        assert not AccessEvaluator.has_any_permission("owner", [])
        assert AccessEvaluator.has_all_permissions("developer", [])


class TestCompareLevels:
    def test_signs(self):
        assert AccessEvaluator.compare_levels("owner", "business") > 0
        assert AccessEvaluator.compare_levels("developer", "financial_controller") < 0
        assert AccessEvaluator.compare_levels("business", Role.BUSINESS) == 0

    def test_unknown_is_rank_zero(self):
        assert AccessEvaluator.compare_levels("developer", "janitor") == 60


class TestValidateRole:
    def test_valid(self):
        assert AccessEvaluator.validate_role("owner").is_valid
        assert AccessEvaluator.validate_role(Role.DEVELOPER).is_valid

    @pytest.mark.parametrize("role", [None, "", 5])
    def test_missing(self, role):
        result = AccessEvaluator.validate_role(role)
        assert result.messages == ("Role is required and must be a string",)

    def test_invalid(self):
        result = AccessEvaluator.validate_role("admin")
        assert result.errors[0].code == "INVALID_ROLE"
        assert result.messages == (
            "Invalid role: admin. Valid roles are: owner, business, developer, financial_controller",
        )


class TestCanAssignRole:
    def test_business_cannot_assign_owner(self):
        decision = AccessEvaluator.can_assign_role("business", "owner")
        assert not decision
        assert "Insufficient rank" in decision.reason

    @pytest.mark.parametrize("target", ["owner", "business", "developer", "financial_controller"])
    def test_owner_assigns_anything(self, target):
        decision = AccessEvaluator.can_assign_role("owner", target)
        assert decision.allowed
        assert decision.reason is None

    def test_lower_role_without_manage_roles(self):
        decision = AccessEvaluator.can_assign_role("business", "developer")
        assert decision.reason == "Insufficient permissions to manage user roles"

    def test_rank_checked_before_permission(self):
        decision = AccessEvaluator.can_assign_role("developer", "financial_controller")
        assert decision.reason.startswith("Insufficient rank")

    def test_invalid_target(self):
        decision = AccessEvaluator.can_assign_role("owner", "admin")
        assert not decision
        assert decision.reason.startswith("Invalid role: admin")

    def test_unknown_acting_role(self):
        assert not AccessEvaluator.can_assign_role("janitor", "developer")

    def test_denial_logged(self, captured_logs):
        AccessEvaluator.can_assign_role("business", "owner")
        record = next(r for r in captured_logs() if r["message"] == "role_assignment_denied")
        assert record["acting_role"] == "business"
        assert record["target_role"] == "owner"

    def test_require_raises(self):
        with pytest.raises(PermissionDeniedError) as exc_info:
            AccessEvaluator.require_role_assignment("developer", "owner")
        assert exc_info.value.acting_role == "developer"
        assert exc_info.value.target_role == "owner"
        assert "Insufficient rank" in exc_info.value.reason

    def test_require_passes(self):
        AccessEvaluator.require_role_assignment(Role.OWNER, Role.BUSINESS)


class TestEvaluateAccess:
    def test_role_and_permission_granted(self):
        decision = AccessEvaluator.evaluate_access(
            "business",
            ["owner", "business"],
            required_permission="manage_disbursements",
        )
        assert decision
        assert decision.reason is None

    def test_role_not_accepted(self):
        decision = AccessEvaluator.evaluate_access("developer", ["owner", "business"])
        assert not decision.allowed
        assert not decision.role_accepted
        assert decision.reason == "Role 'Developer' is not permitted to perform this action"

    def test_missing_single_permission(self):
        decision = AccessEvaluator.evaluate_access(
            "developer",
            ["developer"],
            required_permission="manage_payments",
        )
        assert decision.role_accepted
        assert not decision.has_required_permission
        assert decision.reason == "Access denied due to insufficient permissions"

    def test_any_of_permissions(self):
        decision = AccessEvaluator.evaluate_access(
            "financial_controller",
            ["financial_controller"],
            required_permissions=["manage_payments", "approve_payments"],
        )
        assert decision.allowed

    def test_none_of_permissions(self):
        decision = AccessEvaluator.evaluate_access(
            "developer",
            ["developer"],
            required_permissions=["manage_payments", "approve_payments"],
        )
        assert not decision.has_required_permissions
        assert not decision

    def test_unknown_role(self):
        decision = AccessEvaluator.evaluate_access("janitor", ["owner", "janitor"])
        assert not decision.role_accepted

    def test_denial_with_permission_is_logged(self, captured_logs):
        AccessEvaluator.evaluate_access("developer", ["owner"], required_permission="manage_roles")
        assert any(r["message"] == "access_denied" for r in captured_logs())
