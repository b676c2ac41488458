# apps/reports/adapters/audit_trail.py
from apps.projects.models import Project
from apps.reports.ports.audit import AuditAction, IAuditTrail
from apps.reports.services import ActivityLogger
from apps.tasks.models import Task

TARGET_MODELS = {
    'project': Project,
    'task': Task,
}


class DjangoAuditTrail(IAuditTrail):
    def record(self, actor, action_type, target, target_id, description="", details=None):
        model_class = TARGET_MODELS.get(target)
        if model_class is None:
            raise ValueError(f"Unknown audit target: {target}")

        ActivityLogger.log(
            actor.id if actor else None,
            model_class,
            target_id,
            AuditAction(action_type).value,
            description,
            details,
        )
