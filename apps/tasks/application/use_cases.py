# apps/tasks/application/use_cases.py
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from loguru import logger

from apps.core.domain.permissions import AuthorizationError, ManagementAction, RoleAuthorizationPolicy
from apps.core.domain.roles import CurrentUser
from apps.projects.domain.transitions import Apply, Effect
from apps.projects.ports.repositories import IProjectRepository, ProjectNotFound
from apps.reports.ports.audit import AuditAction, IAuditTrail, NullAuditTrail
from apps.tasks.domain.entities import Severity, TaskEntity, TaskPriority, TaskStatus, TaskType
from apps.tasks.domain.services import TaskService
from apps.tasks.ports.repositories import ITaskRepository

RISK_ISSUE_FIELDS = frozenset({
    'title', 'description', 'severity', 'priority', 'assignee_id', 'deadline', 'status_reason',
})
NOTE_FIELDS = frozenset({'comments', 'user_requirements'})


@dataclass
class CreateRiskIssueInput:
    title: str
    project_id: int
    type: str = TaskType.RISK.value
    severity: str = Severity.MEDIUM.value
    description: str = ""
    priority: str = TaskPriority.MEDIUM.value
    assignee_id: Optional[int] = None
    deadline: Optional[date] = None


class CreateRiskIssueUseCase:
    def __init__(
        self,
        repository: ITaskRepository,
        project_repository: IProjectRepository,
        policy: Optional[RoleAuthorizationPolicy] = None,
        audit: Optional[IAuditTrail] = None,
    ):
        self.repository = repository
        self.project_repository = project_repository
        self.policy = policy or RoleAuthorizationPolicy()
        self.audit = audit or NullAuditTrail()

    def execute(self, input_dto: CreateRiskIssueInput, actor: CurrentUser) -> TaskEntity:
        self.policy.ensure(actor.role, ManagementAction.MANAGE_RISK_ISSUE)

        if not input_dto.title or not input_dto.title.strip():
            raise ValueError("Title cannot be empty")

        item_type = TaskType(input_dto.type)
        if item_type == TaskType.TASK:
            raise ValueError("Only risks and issues can be created here")

        if self.project_repository.get_by_id(input_dto.project_id) is None:
            raise ProjectNotFound(f"Project {input_dto.project_id} not found")

        task = TaskEntity(
            id=None,
            title=input_dto.title.strip(),
            project_id=input_dto.project_id,
            description=input_dto.description,
            status=TaskStatus.NOT_STARTED,
            type=item_type,
            severity=Severity(input_dto.severity),
            priority=TaskPriority(input_dto.priority),
            assignee_id=input_dto.assignee_id,
            deadline=input_dto.deadline,
        )

        saved = self.repository.save(task)
        logger.info(f"Utworzono {item_type.value} {saved.id} w projekcie {saved.project_id}")
        self.audit.record(
            actor, AuditAction.CREATED, 'task', saved.id,
            f"{item_type.value.capitalize()} created: {saved.title}",
            {'project_id': saved.project_id, 'severity': saved.severity.value},
        )
        return saved


class UpdateRiskIssueUseCase:
    def __init__(self, repository: ITaskRepository, policy=None, audit=None):
        self.repository = repository
        self.policy = policy or RoleAuthorizationPolicy()
        self.audit = audit or NullAuditTrail()

    def execute(self, task_id: int, fields: dict, actor: CurrentUser) -> TaskEntity:
        self.policy.ensure(actor.role, ManagementAction.MANAGE_RISK_ISSUE)

        task = self.repository.get_by_id(task_id)
        if task is None:
            raise ValueError("Task not found")
        if not task.is_risk_or_issue():
            raise ValueError("Only risks and issues can be edited here")

        unknown = sorted(set(fields) - RISK_ISSUE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be edited here: {', '.join(unknown)}")

        fields = dict(fields)
        if 'title' in fields and not (fields['title'] or "").strip():
            raise ValueError("Title cannot be empty")
        if 'severity' in fields:
            fields['severity'] = Severity(fields['severity'])
        if 'priority' in fields:
            fields['priority'] = TaskPriority(fields['priority'])

        updated = self.repository.update(task_id, fields)
        self.audit.record(actor, AuditAction.UPDATED, 'task', task_id, "Risk/issue updated", {'fields': sorted(fields)})
        return updated


class UpdateTaskNotesUseCase:
    """Komentarze i wymagania użytkownika - tylko osoba przypisana do zadania."""

    def __init__(self, repository: ITaskRepository, policy=None, audit=None):
        self.repository = repository
        self.policy = policy or RoleAuthorizationPolicy()
        self.audit = audit or NullAuditTrail()

    def execute(self, task_id: int, fields: dict, actor: CurrentUser) -> TaskEntity:
        self.policy.ensure(actor.role, ManagementAction.EDIT_OWN_TASK_NOTES)

        task = self.repository.get_by_id(task_id)
        if task is None:
            raise ValueError("Task not found")
        if task.assignee_id != actor.id:
            raise AuthorizationError("Only the assignee can edit this task's notes")

        notes = {k: v for k, v in fields.items() if k in NOTE_FIELDS}
        if not notes:
            raise ValueError("No valid fields to update")

        updated = self.repository.update(task_id, notes)
        self.audit.record(actor, AuditAction.UPDATED, 'task', task_id, "Task notes updated", {'fields': sorted(notes)})
        return updated


class ChangeTaskStatusUseCase:
    def __init__(self, repository: ITaskRepository, policy=None, audit=None, service: Optional[TaskService] = None):
        self.repository = repository
        self.policy = policy or RoleAuthorizationPolicy()
        self.audit = audit or NullAuditTrail()
        self.service = service or TaskService(repository)

    def execute(self, task_id: int, new_status: str, actor: CurrentUser) -> Effect:
        self.policy.ensure(actor.role, ManagementAction.CHANGE_TASK_STATUS)

        task = self.repository.get_by_id(task_id)
        effect = self.service.change_status(task_id, TaskStatus(new_status))

        if isinstance(effect, Apply):
            self.audit.record(
                actor, AuditAction.STATUS_CHANGE, 'task', task_id,
                f"Status changed to {effect.status}",
                {'old_status': task.status.value, 'new_status': effect.status},
            )
        return effect


@dataclass
class CompleteTaskInput:
    task_id: int
    time_spent: float
    time_saved: float
    completion_reference: str = ""


class CompleteTaskUseCase:
    def __init__(self, repository: ITaskRepository, policy=None, audit=None, service: Optional[TaskService] = None):
        self.repository = repository
        self.policy = policy or RoleAuthorizationPolicy()
        self.audit = audit or NullAuditTrail()
        self.service = service or TaskService(repository)

    def execute(self, input_dto: CompleteTaskInput, actor: CurrentUser, now: datetime) -> TaskEntity:
        self.policy.ensure(actor.role, ManagementAction.CHANGE_TASK_STATUS)

        before = self.repository.get_by_id(input_dto.task_id)
        if before is not None and before.is_completed():
            return before

        task = self.service.complete_task(
            input_dto.task_id,
            input_dto.time_spent,
            input_dto.time_saved,
            now,
            input_dto.completion_reference,
        )
        self.audit.record(
            actor, AuditAction.COMPLETED, 'task', task.id,
            "Task completed",
            {'time_spent': task.time_spent, 'time_saved': task.time_saved},
        )
        return task
