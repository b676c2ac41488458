"""Tests for the role authorization policy."""

import pytest

from apps.core.domain.permissions import AuthorizationError, ManagementAction, RoleAuthorizationPolicy
from apps.core.domain.roles import Role
from apps.projects.domain.entities import ProjectEntity, ProjectStatus


@pytest.fixture
def policy():
    return RoleAuthorizationPolicy()


@pytest.fixture
def project():
    return ProjectEntity(id=1, name="P", lead_id=7)


class TestStatusChanges:
    """Tests for per-status tiers."""

    @pytest.mark.parametrize("role", [Role.MD, Role.DIRECTOR, Role.ADMIN_MANAGER,
                                      Role.OPERATION_MANAGER, Role.SUPER_LEADER])
    def test_admins_can_complete(self, policy, project, role):
        """Every admin role may complete a project."""
        assert policy.can_manage(role, ManagementAction.CHANGE_STATUS, project, 99, ProjectStatus.COMPLETED)

    def test_lead_cannot_complete_but_can_block(self, policy, project):
        """A Staff lead manages the project except for admin-only closures."""
        assert not policy.can_manage(Role.STAFF, ManagementAction.CHANGE_STATUS, project, 7, ProjectStatus.COMPLETED)
        assert not policy.can_manage(Role.STAFF, ManagementAction.CHANGE_STATUS, project, 7,
                                     ProjectStatus.COMPLETED_NOT_SATISFIED)
        assert policy.can_manage(Role.STAFF, ManagementAction.CHANGE_STATUS, project, 7, ProjectStatus.BLOCKED)
        assert policy.can_manage(Role.STAFF, ManagementAction.CHANGE_STATUS, project, 7,
                                 ProjectStatus.COMPLETED_BLOCKED)

    def test_team_leader_is_not_admin_for_projects(self, policy, project):
        """Leader roles do not grant project management."""
        assert not policy.can_manage(Role.TEAM_LEADER, ManagementAction.CHANGE_STATUS, project, 99,
                                     ProjectStatus.STARTED)

    def test_status_is_required(self, policy, project):
        """Status changes need the target status."""
        with pytest.raises(ValueError):
            policy.can_manage(Role.MD, ManagementAction.CHANGE_STATUS, project, 1)

    def test_allowed_statuses_for_lead(self, policy, project):
        """The dropdown for a lead excludes the admin-only closures."""
        allowed = policy.allowed_statuses(Role.STAFF, project, 7)

        assert ProjectStatus.COMPLETED not in allowed
        assert ProjectStatus.COMPLETED_NOT_SATISFIED not in allowed
        assert len(allowed) == len(ProjectStatus) - 2

    def test_allowed_statuses_for_stranger(self, policy, project):
        """A non-lead Staff member gets an empty dropdown."""
        assert policy.allowed_statuses(Role.STAFF, project, 8) == []


class TestActions:
    """Tests for non-status management actions."""

    def test_timer_for_lead_only(self, policy, project):
        """Staff may run the timer only on projects they lead."""
        assert policy.can_manage(Role.STAFF, ManagementAction.RUN_TIMER, project, 7)
        assert not policy.can_manage(Role.STAFF, ManagementAction.RUN_TIMER, project, 8)
        assert not policy.can_manage(Role.STAFF, ManagementAction.RUN_TIMER, None, 7)

    def test_delete_is_admin_only(self, policy, project):
        """The lead cannot delete the project."""
        assert policy.can_manage(Role.SUPER_LEADER, ManagementAction.DELETE_PROJECT, project, 1)
        assert not policy.can_manage(Role.STAFF, ManagementAction.DELETE_PROJECT, project, 7)

    def test_risk_management_for_leaders(self, policy):
        """Team and sub-team leaders manage risks and issues."""
        assert policy.can_manage(Role.SUB_TEAM_LEADER, ManagementAction.MANAGE_RISK_ISSUE)
        assert policy.can_manage(Role.MD, ManagementAction.MANAGE_RISK_ISSUE)
        assert not policy.can_manage(Role.STAFF, ManagementAction.MANAGE_RISK_ISSUE)

    def test_authenticated_actions(self, policy):
        """Any known role may log usage."""
        assert policy.can_manage(Role.STAFF, ManagementAction.LOG_PROJECT_USAGE)

    def test_unknown_or_missing_role_is_denied(self, policy):
        """Unknown role strings and missing roles get nothing."""
        assert not policy.can_manage("Janitor", ManagementAction.LOG_PROJECT_USAGE)
        assert not policy.can_manage(None, ManagementAction.LOG_PROJECT_USAGE)

    def test_role_strings_are_accepted(self, policy):
        """Roles stored as plain strings are coerced."""
        assert policy.can_manage("Director", ManagementAction.DELETE_PROJECT)

    def test_ensure_raises(self, policy, project):
        """ensure() turns a denial into AuthorizationError."""
        with pytest.raises(AuthorizationError):
            policy.ensure(Role.STAFF, ManagementAction.DELETE_PROJECT, project, 7)

        policy.ensure(Role.MD, ManagementAction.DELETE_PROJECT, project, 1)
