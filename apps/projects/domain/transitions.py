# apps/projects/domain/transitions.py
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Union

from loguru import logger

from apps.projects.domain.entities import ProjectEntity, ProjectStatus
from apps.tasks.domain.entities import TaskEntity

BLOCK_REQUIRES_RISK = (
    "A project can only be blocked if there is an active BLOCKED item (a risk) "
    "associated with it. Please create one first."
)
BLOCK_REQUIRES_RISK_IN_TREE = (
    "A project can only be blocked if there is an active BLOCKED item (a risk) "
    "associated with it or its sub-projects. Please create one first."
)
PARENT_HAS_INCOMPLETE_CHILDREN = (
    "Cannot complete this project because one or more sub-projects are not yet completed."
)


class ConfirmationFlow(str, Enum):
    """Okna, które muszą zebrać dane zanim status zostanie zapisany."""
    COMPLETE_PROJECT = 'complete_project'
    NOT_SATISFIED = 'not_satisfied'
    COMPLETED_BLOCKED = 'completed_blocked'
    SELECT_TOOLS = 'select_tools'
    COMPLETE_TASK = 'complete_task'


# --- Efekty ---

@dataclass(frozen=True)
class NoOp:
    target_id: int

    kind = 'noop'


@dataclass(frozen=True)
class Apply:
    target_id: int
    status: str
    stamp_completed_at: bool = False

    kind = 'apply'


@dataclass(frozen=True)
class Reroute:
    target_id: int          # na kim ma działać okno (np. rodzic)
    flow: ConfirmationFlow
    status: str             # status oczekujący na potwierdzenie
    trigger_id: Optional[int] = None  # podprojekt, który wywołał kaskadę

    kind = 'reroute'


@dataclass(frozen=True)
class Reject:
    reason: str

    kind = 'reject'


Effect = Union[NoOp, Apply, Reroute, Reject]


def effect_to_dict(effect: Effect) -> dict:
    data = {'effect': effect.kind}
    data.update({k: (v.value if isinstance(v, Enum) else v) for k, v in effect.__dict__.items()})
    return data


class StatusTransitionGuard:
    """
    Waliduje i kieruje zmianę statusu projektu.

    include_children_risks=True to wariant portfela: blokadę uzasadnia też
    aktywne ryzyko na podprojekcie.
    """

    def __init__(self, include_children_risks: bool = False):
        self.include_children_risks = include_children_risks

    def request_transition(
        self,
        project: ProjectEntity,
        new_status: ProjectStatus,
        all_projects: Sequence[ProjectEntity],
        all_tasks: Sequence[TaskEntity],
    ) -> Effect:
        new_status = ProjectStatus(new_status)

        if new_status == project.status:
            return NoOp(project.id)

        children = self._children(project, all_projects)
        parent = self._parent(project, all_projects)

        if new_status == ProjectStatus.USER_TESTING:
            if parent is not None and self._other_siblings_completed(project, all_projects):
                logger.debug(f"Projekt {project.id}: ostatni podprojekt w testach - wybór narzędzi")
                return Reroute(project.id, ConfirmationFlow.SELECT_TOOLS, new_status.value)
            return Apply(project.id, new_status.value)

        if new_status == ProjectStatus.COMPLETED:
            if children and any(c.status != ProjectStatus.COMPLETED for c in children):
                return Reject(PARENT_HAS_INCOMPLETE_CHILDREN)
            if parent is not None and self._other_siblings_completed(project, all_projects):
                # Ostatni niedokończony podprojekt - zamykamy cały projekt nadrzędny
                return Reroute(parent.id, ConfirmationFlow.COMPLETE_PROJECT, new_status.value, trigger_id=project.id)
            return Apply(project.id, new_status.value, stamp_completed_at=True)

        if new_status == ProjectStatus.BLOCKED:
            scope = [project.id]
            if self.include_children_risks:
                scope += [c.id for c in children]
            if not any(t.project_id in scope and t.is_active_risk() for t in all_tasks):
                return Reject(BLOCK_REQUIRES_RISK_IN_TREE if self.include_children_risks else BLOCK_REQUIRES_RISK)
            return Apply(project.id, new_status.value)

        if new_status == ProjectStatus.COMPLETED_NOT_SATISFIED:
            return Reroute(project.id, ConfirmationFlow.NOT_SATISFIED, new_status.value)

        if new_status == ProjectStatus.COMPLETED_BLOCKED:
            return Reroute(project.id, ConfirmationFlow.COMPLETED_BLOCKED, new_status.value)

        if new_status in (ProjectStatus.NOT_STARTED, ProjectStatus.STARTED, ProjectStatus.UPDATE):
            return Apply(project.id, new_status.value)

        # Nowy status bez reguły - trzeba go tu obsłużyć
        raise ValueError(f"Unhandled project status: {new_status}")

    def _children(self, project: ProjectEntity, all_projects: Sequence[ProjectEntity]) -> List[ProjectEntity]:
        return [p for p in all_projects if p.parent_id == project.id]

    def _parent(self, project: ProjectEntity, all_projects: Sequence[ProjectEntity]) -> Optional[ProjectEntity]:
        if project.parent_id is None:
            return None
        # Sierota (rodzic usunięty) traktowana jak projekt samodzielny
        return next((p for p in all_projects if p.id == project.parent_id), None)

    def _other_siblings_completed(self, project: ProjectEntity, all_projects: Sequence[ProjectEntity]) -> bool:
        siblings = [p for p in all_projects if p.parent_id == project.parent_id and p.id != project.id]
        return all(s.status == ProjectStatus.COMPLETED for s in siblings)
