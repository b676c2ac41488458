# apps/core/domain/permissions.py
from enum import Enum
from typing import List, Optional, Union

from loguru import logger

from apps.core.domain.roles import Role, is_admin, is_leader
from apps.projects.domain.entities import ProjectEntity, ProjectStatus


class AuthorizationError(Exception):
    """Użytkownik nie ma prawa wykonać tej akcji."""


class ManagementAction(str, Enum):
    CHANGE_STATUS = 'change_status'
    EDIT_PROJECT = 'edit_project'
    RUN_TIMER = 'run_timer'
    DELETE_PROJECT = 'delete_project'
    DELETE_MEMBER = 'delete_member'
    MANAGE_RISK_ISSUE = 'manage_risk_issue'
    EDIT_OWN_TASK_NOTES = 'edit_own_task_notes'
    ADD_STORE_ITEM = 'add_store_item'
    VIEW_OWN_LEAVE = 'view_own_leave'
    LOG_PROJECT_USAGE = 'log_project_usage'
    CHANGE_TASK_STATUS = 'change_task_status'


class Tier(str, Enum):
    ADMIN = 'admin'
    ADMIN_OR_LEAD = 'admin_or_lead'
    LEADER = 'leader'
    AUTHENTICATED = 'authenticated'


ACTION_TIERS = {
    ManagementAction.EDIT_PROJECT: Tier.ADMIN_OR_LEAD,
    ManagementAction.RUN_TIMER: Tier.ADMIN_OR_LEAD,
    ManagementAction.DELETE_PROJECT: Tier.ADMIN,
    ManagementAction.DELETE_MEMBER: Tier.ADMIN,
    ManagementAction.MANAGE_RISK_ISSUE: Tier.LEADER,
    ManagementAction.EDIT_OWN_TASK_NOTES: Tier.AUTHENTICATED,
    ManagementAction.ADD_STORE_ITEM: Tier.AUTHENTICATED,
    ManagementAction.VIEW_OWN_LEAVE: Tier.AUTHENTICATED,
    ManagementAction.LOG_PROJECT_USAGE: Tier.AUTHENTICATED,
    ManagementAction.CHANGE_TASK_STATUS: Tier.AUTHENTICATED,
}

# Zamknięcie projektu "na zielono" lub "niezadowolony" tylko dla adminów
STATUS_TIERS = {
    ProjectStatus.COMPLETED: Tier.ADMIN,
    ProjectStatus.COMPLETED_NOT_SATISFIED: Tier.ADMIN,
    ProjectStatus.BLOCKED: Tier.ADMIN_OR_LEAD,
    ProjectStatus.COMPLETED_BLOCKED: Tier.ADMIN_OR_LEAD,
    ProjectStatus.NOT_STARTED: Tier.ADMIN_OR_LEAD,
    ProjectStatus.STARTED: Tier.ADMIN_OR_LEAD,
    ProjectStatus.USER_TESTING: Tier.ADMIN_OR_LEAD,
    ProjectStatus.UPDATE: Tier.ADMIN_OR_LEAD,
}


class RoleAuthorizationPolicy:
    """
    Mapuje rolę (i ewentualnie prowadzenie projektu) na dozwolone akcje.
    Czysta funkcja - nic nie zapisuje, nic nie pobiera.
    """

    def tier_for(self, action: ManagementAction, new_status: Optional[ProjectStatus] = None) -> Tier:
        if action == ManagementAction.CHANGE_STATUS:
            if new_status is None:
                raise ValueError("new_status is required for status changes")
            return STATUS_TIERS[ProjectStatus(new_status)]
        return ACTION_TIERS[action]

    def can_manage(
        self,
        role: Union[Role, str, None],
        action: ManagementAction,
        project: Optional[ProjectEntity] = None,
        current_user_id: Optional[int] = None,
        new_status: Optional[ProjectStatus] = None,
    ) -> bool:
        if role is None:
            return False
        try:
            role = Role(role)
        except ValueError:
            logger.warning(f"Nieznana rola: {role!r}")
            return False

        tier = self.tier_for(action, new_status)

        if tier == Tier.ADMIN:
            return is_admin(role)
        if tier == Tier.ADMIN_OR_LEAD:
            # Lider projektu zarządza nim niezależnie od roli
            is_lead = (
                project is not None
                and current_user_id is not None
                and project.lead_id == current_user_id
            )
            return is_admin(role) or is_lead
        if tier == Tier.LEADER:
            return is_leader(role)
        return True

    def ensure(self, role, action, project=None, current_user_id=None, new_status=None):
        if not self.can_manage(role, action, project, current_user_id, new_status):
            raise AuthorizationError(f"Role '{role}' is not allowed to perform '{action.value}'")

    def allowed_statuses(self, role, project: ProjectEntity, current_user_id: Optional[int]) -> List[ProjectStatus]:
        """Statusy, które użytkownik może wybrać z listy rozwijanej."""
        return [
            status for status in ProjectStatus
            if self.can_manage(role, ManagementAction.CHANGE_STATUS, project, current_user_id, status)
        ]
