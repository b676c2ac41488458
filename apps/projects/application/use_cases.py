# apps/projects/application/use_cases.py
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from loguru import logger

from apps.core.domain.permissions import ManagementAction, RoleAuthorizationPolicy
from apps.core.domain.roles import CurrentUser
from apps.projects.domain.entities import ProjectEntity, ProjectFrequency, ProjectStatus, RiskLevel
from apps.projects.domain.progress import weight_sum_violation
from apps.projects.domain.services import derive_parent_status
from apps.projects.domain.time_tracking import TimeAccumulator, clamp_hours
from apps.projects.domain.transitions import (
    PARENT_HAS_INCOMPLETE_CHILDREN,
    Apply,
    Effect,
    NoOp,
    Reject,
    StatusTransitionGuard,
)
from apps.projects.ports.repositories import IProjectRepository, ProjectNotFound
from apps.reports.ports.audit import AuditAction, IAuditTrail, NullAuditTrail
from apps.tasks.ports.repositories import ITaskRepository

TIMER_ON_COMPLETED = "The timer is not available for completed projects."
TIMER_ON_PARENT = "Time is tracked on sub-projects. Start the timer on a sub-project instead."
USAGE_REQUIRES_COMPLETION = (
    "Saved time can only be logged for completed projects. Please complete the project first."
)

# Tych pól nie zmienia się formularzem edycji (statusy idą przez strażnika, czas przez licznik)
PROTECTED_FIELDS = frozenset({
    'id', 'status', 'used_hours', 'timer_start_time', 'completed_at',
    'end_user_feedback', 'latest_comments', 'last_used_by', 'tools_used',
})


def _require_non_negative(value, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number")
    if not math.isfinite(number) or number < 0:
        raise ValueError(f"{name} must be a non-negative number")
    return number


class ProjectUseCase:
    """Wspólne zależności przypadków użycia projektu (ręczne DI, jak w widokach)."""

    def __init__(
        self,
        project_repository: IProjectRepository,
        task_repository: ITaskRepository,
        policy: Optional[RoleAuthorizationPolicy] = None,
        audit: Optional[IAuditTrail] = None,
    ):
        self.projects = project_repository
        self.tasks = task_repository
        self.policy = policy or RoleAuthorizationPolicy()
        self.audit = audit or NullAuditTrail()

    def _get(self, project_id: int) -> ProjectEntity:
        project = self.projects.get_by_id(project_id)
        if project is None:
            raise ProjectNotFound(f"Project {project_id} not found")
        return project

    def _sync_parent_status(self, parent_id: Optional[int], actor: Optional[CurrentUser], now: datetime) -> None:
        """Po każdej zmianie podprojektu status rodzica wynika ze statusów dzieci."""
        if parent_id is None:
            return
        parent = self.projects.get_by_id(parent_id)
        if parent is None:
            return
        children = [p for p in self.projects.list_all() if p.parent_id == parent_id]
        if not children:
            return

        derived = derive_parent_status(children)
        if derived == parent.status:
            return

        fields = {'status': derived}
        if derived == ProjectStatus.COMPLETED and parent.completed_at is None:
            fields['completed_at'] = now
        self.projects.update(parent_id, fields)
        logger.info(f"Projekt {parent_id}: status rodzica {parent.status.value} -> {derived.value} (z podprojektów)")
        self.audit.record(
            actor, AuditAction.STATUS_CHANGE, 'project', parent_id,
            f"Status derived from sub-projects: {derived.value}",
            {'old_status': parent.status.value, 'new_status': derived.value},
        )


@dataclass
class ChangeProjectStatusInput:
    project_id: int
    new_status: str
    actor: CurrentUser
    include_children_risks: bool = False


class ChangeProjectStatusUseCase(ProjectUseCase):
    def execute(self, input_dto: ChangeProjectStatusInput, now: datetime) -> Effect:
        project = self._get(input_dto.project_id)
        new_status = ProjectStatus(input_dto.new_status)
        actor = input_dto.actor

        self.policy.ensure(actor.role, ManagementAction.CHANGE_STATUS, project, actor.id, new_status)

        guard = StatusTransitionGuard(include_children_risks=input_dto.include_children_risks)
        effect = guard.request_transition(project, new_status, self.projects.list_all(), self.tasks.list_all())

        if isinstance(effect, Apply):
            fields = {'status': ProjectStatus(effect.status)}
            if effect.stamp_completed_at:
                fields['completed_at'] = now
            self.projects.update(effect.target_id, fields)
            logger.info(f"Projekt {project.id}: {project.status.value} -> {effect.status}")
            self.audit.record(
                actor, AuditAction.STATUS_CHANGE, 'project', project.id,
                f"Status changed to {effect.status}",
                {'old_status': project.status.value, 'new_status': effect.status},
            )
            self._sync_parent_status(project.parent_id, actor, now)
        elif isinstance(effect, Reject):
            logger.info(f"Projekt {project.id}: odrzucono zmianę na {new_status.value}: {effect.reason}")

        return effect


class TimerAction(str, Enum):
    START = 'start'
    RESUME = 'resume'
    HOLD = 'hold'
    END = 'end'


class ProjectTimerUseCase(ProjectUseCase):
    """
    Start/Resume: status Started i znacznik startu.
    Hold: doliczenie sesji do used_hours, licznik wyczyszczony, status bez zmian.
    End: jak Hold, a potem prośba o Completed przez strażnika
    (godziny są zapisane nawet jeśli strażnik przekieruje lub odrzuci).
    """

    def __init__(self, project_repository, task_repository, policy=None, audit=None, accumulator=None):
        super().__init__(project_repository, task_repository, policy, audit)
        self.accumulator = accumulator or TimeAccumulator()

    def execute(self, project_id: int, action: str, actor: CurrentUser, now: datetime) -> Effect:
        project = self._get(project_id)
        action = TimerAction(action)

        self.policy.ensure(actor.role, ManagementAction.RUN_TIMER, project, actor.id)
        if action == TimerAction.END:
            # End kończy projekt, więc wymaga też prawa do statusu Completed
            self.policy.ensure(actor.role, ManagementAction.CHANGE_STATUS, project, actor.id, ProjectStatus.COMPLETED)

        if project.is_completed():
            return Reject(TIMER_ON_COMPLETED)
        if any(p.parent_id == project.id for p in self.projects.list_all()):
            return Reject(TIMER_ON_PARENT)

        if action in (TimerAction.START, TimerAction.RESUME):
            return self._start(project, actor, now)

        # Hold / End: jeden `now` do obliczenia i do zapisu
        if project.is_timer_running:
            folded = self.accumulator.fold_session(project.used_hours, project.timer_start_time, now)
            self.projects.update(project.id, {'used_hours': folded, 'timer_start_time': None})
            logger.info(f"Projekt {project.id}: licznik zatrzymany, used_hours {clamp_hours(project.used_hours):.4f} -> {folded:.4f}")
            self.audit.record(
                actor, AuditAction.TIMER, 'project', project.id,
                f"Timer {action.value}",
                {'action': action.value, 'used_hours': folded},
            )

        if action == TimerAction.HOLD:
            if project.status != ProjectStatus.STARTED:
                self.projects.update(project.id, {'status': ProjectStatus.STARTED})
                self._sync_parent_status(project.parent_id, actor, now)
            return Apply(project.id, ProjectStatus.STARTED.value)

        status_change = ChangeProjectStatusUseCase(self.projects, self.tasks, self.policy, self.audit)
        return status_change.execute(
            ChangeProjectStatusInput(project.id, ProjectStatus.COMPLETED.value, actor), now
        )

    def _start(self, project: ProjectEntity, actor: CurrentUser, now: datetime) -> Effect:
        if project.is_timer_running:
            logger.debug(f"Projekt {project.id}: licznik już działa - pomijam start")
            return NoOp(project.id)

        self.projects.update(project.id, {
            'status': ProjectStatus.STARTED,
            'timer_start_time': self.accumulator.to_local_naive(now),
        })
        logger.info(f"Projekt {project.id}: licznik uruchomiony")
        self.audit.record(actor, AuditAction.TIMER, 'project', project.id, "Timer started", {'action': 'start'})
        self._sync_parent_status(project.parent_id, actor, now)
        return Apply(project.id, ProjectStatus.STARTED.value)


@dataclass
class CompleteProjectInput:
    project_id: int
    saved_hours: float
    frequency: Optional[str] = None
    frequency_detail: str = ""
    trigger_id: Optional[int] = None  # podprojekt, który uruchomił zamknięcie


class CompleteProjectUseCase(ProjectUseCase):
    """Okno "Complete project": zapis oszczędności i zamknięcie rodzica (oraz podprojektu-wyzwalacza)."""

    def execute(self, input_dto: CompleteProjectInput, actor: CurrentUser, now: datetime) -> Effect:
        project = self._get(input_dto.project_id)
        self.policy.ensure(actor.role, ManagementAction.CHANGE_STATUS, project, actor.id, ProjectStatus.COMPLETED)

        saved_hours = _require_non_negative(input_dto.saved_hours, "Saved hours")
        frequency = ProjectFrequency(input_dto.frequency) if input_dto.frequency else None

        all_projects = self.projects.list_all()
        if project.parent_id is not None:
            # Podprojekt zamykany bezpośrednio: ostatni z rodzeństwa przekierowuje do okna rodzica
            effect = StatusTransitionGuard().request_transition(
                project, ProjectStatus.COMPLETED, all_projects, self.tasks.list_all(),
            )
            if not isinstance(effect, Apply):
                return effect

        children = [p for p in all_projects if p.parent_id == project.id]
        if input_dto.trigger_id is not None and input_dto.trigger_id not in {c.id for c in children}:
            raise ValueError(f"Project {input_dto.trigger_id} is not a sub-project of {project.id}")

        # Stan mógł się zmienić od otwarcia okna
        others = [c for c in children if c.id != input_dto.trigger_id]
        if any(c.status != ProjectStatus.COMPLETED for c in others):
            return Reject(PARENT_HAS_INCOMPLETE_CHILDREN)

        self.projects.update(project.id, {
            'saved_hours': saved_hours,
            'frequency': frequency,
            'frequency_detail': input_dto.frequency_detail,
            'status': ProjectStatus.COMPLETED,
            'completed_at': now,
        })
        if input_dto.trigger_id is not None:
            self.projects.update(input_dto.trigger_id, {
                'status': ProjectStatus.COMPLETED,
                'completed_at': now,
            })

        logger.info(f"Projekt {project.id} ukończony (saved={saved_hours}h, trigger={input_dto.trigger_id})")
        self.audit.record(
            actor, AuditAction.COMPLETED, 'project', project.id,
            "Project completed",
            {
                'saved_hours': saved_hours,
                'frequency': frequency.value if frequency else None,
                'trigger_id': input_dto.trigger_id,
            },
        )
        self._sync_parent_status(project.parent_id, actor, now)
        return Apply(project.id, ProjectStatus.COMPLETED.value, stamp_completed_at=True)


class NotSatisfiedUseCase(ProjectUseCase):
    def execute(self, project_id: int, comments: str, actor: CurrentUser, now: datetime) -> Effect:
        project = self._get(project_id)
        status = ProjectStatus.COMPLETED_NOT_SATISFIED
        self.policy.ensure(actor.role, ManagementAction.CHANGE_STATUS, project, actor.id, status)

        comments = (comments or "").strip()
        if not comments:
            raise ValueError("Feedback comments are required")

        self.projects.update(project.id, {
            'end_user_feedback': {
                'rating': 1,
                'comments': comments,
                'authorId': actor.id,
                'timestamp': now.isoformat(),
            },
            'status': status,
            'completed_at': now,
        })
        logger.info(f"Projekt {project.id}: {status.value}")
        self.audit.record(actor, AuditAction.COMPLETED, 'project', project.id, status.value, {'comments': comments})
        self._sync_parent_status(project.parent_id, actor, now)
        return Apply(project.id, status.value, stamp_completed_at=True)


class CompletedBlockedUseCase(ProjectUseCase):
    def execute(self, project_id: int, comments: str, actor: CurrentUser, now: datetime) -> Effect:
        project = self._get(project_id)
        status = ProjectStatus.COMPLETED_BLOCKED
        self.policy.ensure(actor.role, ManagementAction.CHANGE_STATUS, project, actor.id, status)

        comments = (comments or "").strip()
        if not comments:
            raise ValueError("A comment is required")

        self.projects.update(project.id, {
            'latest_comments': {
                'text': comments,
                'authorId': actor.id,
                'timestamp': now.isoformat(),
            },
            'status': status,
            'completed_at': now,
        })
        logger.info(f"Projekt {project.id}: {status.value}")
        self.audit.record(actor, AuditAction.COMPLETED, 'project', project.id, status.value, {'comments': comments})
        self._sync_parent_status(project.parent_id, actor, now)
        return Apply(project.id, status.value, stamp_completed_at=True)


class SelectToolsUseCase(ProjectUseCase):
    """Ostatni podprojekt wchodzi w testy - najpierw zapisujemy użyte narzędzia."""

    def execute(self, project_id: int, tool_ids: List[int], actor: CurrentUser, now: datetime) -> Effect:
        project = self._get(project_id)
        status = ProjectStatus.USER_TESTING
        self.policy.ensure(actor.role, ManagementAction.CHANGE_STATUS, project, actor.id, status)

        tools = [int(t) for t in tool_ids]
        self.projects.update(project.id, {'tools_used': tools, 'status': status})
        logger.info(f"Projekt {project.id}: narzędzia {tools}, status {status.value}")
        self.audit.record(
            actor, AuditAction.STATUS_CHANGE, 'project', project.id,
            f"Status changed to {status.value}",
            {'old_status': project.status.value, 'new_status': status.value, 'tools_used': tools},
        )
        self._sync_parent_status(project.parent_id, actor, now)
        return Apply(project.id, status.value)


class LogProjectUsageUseCase(ProjectUseCase):
    def execute(self, project_id: int, saved_hours, actor: CurrentUser, now: datetime) -> Effect:
        project = self._get(project_id)
        self.policy.ensure(actor.role, ManagementAction.LOG_PROJECT_USAGE, project, actor.id)

        if not project.is_completed():
            return Reject(USAGE_REQUIRES_COMPLETION)

        hours = _require_non_negative(saved_hours, "Saved hours")
        if hours == 0:
            raise ValueError("Saved hours must be greater than zero")

        entry = {'userId': actor.id, 'date': now.date().isoformat(), 'savedHours': hours}
        self.projects.update(project.id, {
            'last_used_by': list(project.last_used_by) + [entry],
            'saved_hours': clamp_hours(project.saved_hours) + hours,
        })
        logger.info(f"Projekt {project.id}: zalogowano {hours}h oszczędności (user {actor.id})")
        self.audit.record(actor, AuditAction.USAGE_LOGGED, 'project', project.id, f"Logged {hours:g}h saved", entry)
        return Apply(project.id, project.status.value)


@dataclass
class CreateProjectInput:
    name: str
    code: str = ""
    parent_id: Optional[int] = None
    weight: Optional[float] = None
    allocated_hours: float = 0.0
    milestone_date: Optional[date] = None
    risk_level: str = RiskLevel.LOW.value
    lead_id: Optional[int] = None
    phase: str = ""
    additional_hours: float = 0.0
    overage_reason: str = ""
    extra: dict = field(default_factory=dict)


class CreateProjectUseCase(ProjectUseCase):
    def __init__(self, project_repository, task_repository, policy=None, audit=None, enforce_weights: bool = False):
        super().__init__(project_repository, task_repository, policy, audit)
        self.enforce_weights = enforce_weights

    def execute(self, input_dto: CreateProjectInput, actor: CurrentUser) -> Effect:
        if not input_dto.name or not input_dto.name.strip():
            raise ValueError("Project name cannot be empty")

        parent = None
        if input_dto.parent_id is not None:
            parent = self._get(input_dto.parent_id)
            if parent.parent_id is not None:
                raise ValueError("Sub-projects cannot have their own sub-projects")

        # Podprojekt może dodać lider rodzica; projekt główny tylko admin
        self.policy.ensure(actor.role, ManagementAction.EDIT_PROJECT, parent, actor.id)

        project = ProjectEntity(
            id=None,
            name=input_dto.name.strip(),
            code=input_dto.code,
            parent_id=input_dto.parent_id,
            weight=input_dto.weight,
            allocated_hours=_require_non_negative(input_dto.allocated_hours, "Allocated hours"),
            additional_hours=_require_non_negative(input_dto.additional_hours, "Additional hours"),
            milestone_date=input_dto.milestone_date,
            risk_level=RiskLevel(input_dto.risk_level),
            overage_reason=input_dto.overage_reason,
            lead_id=input_dto.lead_id,
            phase=input_dto.phase,
        )

        if parent is not None:
            siblings = [p for p in self.projects.list_all() if p.parent_id == parent.id]
            rejection = check_weights(siblings + [project], self.enforce_weights)
            if rejection:
                return rejection

        created = self.projects.create(project)
        logger.info(f"Utworzono projekt {created.id}: {created.name}")
        self.audit.record(actor, AuditAction.CREATED, 'project', created.id, f"Project created: {created.name}")
        return Apply(created.id, created.status.value)


def check_weights(siblings: List[ProjectEntity], enforce: bool) -> Optional[Reject]:
    violation = weight_sum_violation(siblings)
    if violation is None:
        return None
    if enforce:
        return Reject(violation)
    logger.warning(f"{violation} (zapisuję mimo to)")
    return None


class UpdateProjectFieldsUseCase(ProjectUseCase):
    def __init__(self, project_repository, task_repository, policy=None, audit=None, enforce_weights: bool = False):
        super().__init__(project_repository, task_repository, policy, audit)
        self.enforce_weights = enforce_weights

    def execute(self, project_id: int, fields: dict, actor: CurrentUser, now: Optional[datetime] = None) -> Effect:
        project = self._get(project_id)
        self.policy.ensure(actor.role, ManagementAction.EDIT_PROJECT, project, actor.id)

        protected = sorted(PROTECTED_FIELDS & set(fields))
        if protected:
            raise ValueError(f"Fields cannot be edited directly: {', '.join(protected)}")

        fields = dict(fields)
        if 'risk_level' in fields:
            fields['risk_level'] = RiskLevel(fields['risk_level'])
        for name in ('allocated_hours', 'additional_hours', 'saved_hours'):
            if name in fields:
                fields[name] = _require_non_negative(fields[name], name)

        all_projects = self.projects.list_all()
        new_parent_id = fields.get('parent_id', project.parent_id)
        reparented = new_parent_id != project.parent_id
        if new_parent_id == project.id:
            raise ValueError("A project cannot be its own parent")
        if reparented and new_parent_id is not None:
            # Dwa poziomy: rodzic musi być projektem głównym, a przenoszony nie może mieć dzieci
            new_parent = self._get(new_parent_id)
            if new_parent.parent_id is not None:
                raise ValueError("Sub-projects cannot have their own sub-projects")
            if any(p.parent_id == project.id for p in all_projects):
                raise ValueError("A project with sub-projects cannot become a sub-project")
        if ('weight' in fields or 'parent_id' in fields) and new_parent_id is not None:
            siblings = [p for p in all_projects if p.parent_id == new_parent_id and p.id != project.id]
            candidate = ProjectEntity(id=project.id, name=project.name, weight=fields.get('weight', project.weight))
            rejection = check_weights(siblings + [candidate], self.enforce_weights)
            if rejection:
                return rejection

        updated = self.projects.update(project.id, fields)
        logger.info(f"Projekt {project.id}: zaktualizowano pola {sorted(fields)}")
        self.audit.record(
            actor, AuditAction.UPDATED, 'project', project.id,
            "Project details updated", {'fields': sorted(fields)},
        )
        if reparented:
            now = now or datetime.now()
            self._sync_parent_status(project.parent_id, actor, now)
            self._sync_parent_status(new_parent_id, actor, now)
        return Apply(updated.id, updated.status.value)


class DeleteProjectUseCase(ProjectUseCase):
    def execute(self, project_id: int, actor: CurrentUser) -> List[int]:
        project = self._get(project_id)
        self.policy.ensure(actor.role, ManagementAction.DELETE_PROJECT, project, actor.id)

        deleted_ids = self.projects.delete(project.id)
        logger.info(f"Usunięto projekt {project.id} wraz z podprojektami: {deleted_ids}")
        self.audit.record(
            actor, AuditAction.DELETED, 'project', project.id,
            f"Project deleted: {project.name}", {'deleted_ids': deleted_ids},
        )
        return deleted_ids
