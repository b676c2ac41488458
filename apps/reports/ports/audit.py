# apps/reports/ports/audit.py
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from apps.core.domain.roles import CurrentUser


class AuditAction(str, Enum):
    CREATED = 'created'
    UPDATED = 'updated'
    STATUS_CHANGE = 'status_change'
    COMPLETED = 'completed'
    DELETED = 'deleted'
    TIMER = 'timer'
    USAGE_LOGGED = 'usage_logged'


class IAuditTrail(ABC):
    @abstractmethod
    def record(
        self,
        actor: Optional[CurrentUser],
        action_type: AuditAction,
        target: str,
        target_id: int,
        description: str = "",
        details: Optional[dict] = None,
    ) -> None:
        """Zapisuje wpis dziennika zmian. `target` to 'project' albo 'task'."""
        pass


class NullAuditTrail(IAuditTrail):
    """Gdy nikt nie słucha (testy, skrypty)."""

    def record(self, actor, action_type, target, target_id, description="", details=None):
        return None
