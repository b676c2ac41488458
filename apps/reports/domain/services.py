# apps/reports/domain/services.py
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Dict, List, Optional, Sequence

import pytz

from apps.projects.domain.entities import ProjectEntity
from apps.projects.domain.health import HealthStatus, SummaryHealthPolicy, is_behind_on_tasks, is_task_overdue
from apps.projects.domain.progress import ProgressCalculator
from apps.projects.domain.services import days_until
from apps.projects.domain.time_tracking import align_to_now, clamp_hours
from apps.tasks.domain.entities import TaskEntity

DUE_SOON_WINDOW = timedelta(hours=24)


@dataclass
class AttentionItem:
    project_id: int
    name: str
    health: HealthStatus
    progress: int
    days_to_milestone: Optional[int]
    lead_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            'project_id': self.project_id,
            'name': self.name,
            'health': self.health.value,
            'progress': self.progress,
            'days_to_milestone': self.days_to_milestone,
            'lead_id': self.lead_id,
        }


@dataclass
class ExecutiveSummary:
    total_projects: int
    parent_projects: int
    child_projects: int
    allocated_hours: float
    open_issues: int
    open_blockers: int
    team_members: int
    rag: Dict[str, int]
    attention: List[AttentionItem] = field(default_factory=list)
    overdue_task_ids: List[int] = field(default_factory=list)
    due_soon_task_ids: List[int] = field(default_factory=list)
    unassigned_task_ids: List[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'total_projects': self.total_projects,
            'parent_projects': self.parent_projects,
            'child_projects': self.child_projects,
            'allocated_hours': self.allocated_hours,
            'open_issues': self.open_issues,
            'open_blockers': self.open_blockers,
            'team_members': self.team_members,
            'rag': self.rag,
            'attention': [item.to_dict() for item in self.attention],
            'overdue_task_ids': self.overdue_task_ids,
            'due_soon_task_ids': self.due_soon_task_ids,
            'unassigned_task_ids': self.unassigned_task_ids,
        }


def _deadline_moment(task: TaskEntity, now: datetime, local_tz) -> Optional[datetime]:
    if task.deadline is None:
        return None
    moment = task.deadline if isinstance(task.deadline, datetime) else datetime.combine(task.deadline, time.min)
    return align_to_now(moment, now, local_tz)


class ExecutiveSummaryService:
    """
    Dashboard portfela. Zdrowie liczone polityką "summary"
    (tylko zadania własne projektu, bez godzin) - inaczej niż w szczegółach projektu.
    """

    def __init__(
        self,
        calculator: Optional[ProgressCalculator] = None,
        health_policy=None,
        local_timezone: str = 'UTC',
    ):
        self.calculator = calculator or ProgressCalculator()
        self.health_policy = health_policy or SummaryHealthPolicy()
        # Strefa terminów i kamieni milowych zapisanych bez offsetu
        self.local_tz = pytz.timezone(local_timezone)

    def build(
        self,
        projects: Sequence[ProjectEntity],
        tasks: Sequence[TaskEntity],
        team_member_count: int,
        now: datetime,
    ) -> ExecutiveSummary:
        tasks_by_project: Dict[int, List[TaskEntity]] = {}
        for t in tasks:
            tasks_by_project.setdefault(t.project_id, []).append(t)

        open_issue_projects = {t.project_id for t in tasks if t.is_open_issue()}
        # Godziny tylko projektów bez otwartych problemów
        allocated = sum(
            clamp_hours(p.allocated_hours) for p in projects if p.id not in open_issue_projects
        )

        cache: Dict[int, int] = {}
        rag = {status.value: 0 for status in HealthStatus}
        attention: List[AttentionItem] = []
        for project in projects:
            own_tasks = tasks_by_project.get(project.id, [])
            progress = self.calculator.calculate(project, projects, tasks, cache)
            behind = is_behind_on_tasks(own_tasks, now, self.local_tz)
            health = self.health_policy.evaluate(project, progress, None, behind)
            rag[health.value] += 1
            if health in (HealthStatus.RED, HealthStatus.YELLOW):
                attention.append(AttentionItem(
                    project_id=project.id,
                    name=project.name,
                    health=health,
                    progress=progress,
                    days_to_milestone=days_until(project.milestone_date, now, clamp=False, local_tz=self.local_tz),
                    lead_id=project.lead_id,
                ))

        # Projekty bez kamienia milowego na końcu listy
        attention.sort(key=lambda item: (item.days_to_milestone is None, item.days_to_milestone or 0))

        return ExecutiveSummary(
            total_projects=len(projects),
            parent_projects=len([p for p in projects if p.is_root()]),
            child_projects=len([p for p in projects if not p.is_root()]),
            allocated_hours=allocated,
            open_issues=len([t for t in tasks if t.is_open_issue()]),
            open_blockers=len([t for t in tasks if t.is_active_risk()]),
            team_members=team_member_count,
            rag=rag,
            attention=attention,
            overdue_task_ids=[t.id for t in tasks if is_task_overdue(t, now, self.local_tz)],
            due_soon_task_ids=[t.id for t in tasks if self._is_due_soon(t, now)],
            unassigned_task_ids=[t.id for t in tasks if t.assignee_id is None and not t.is_completed()],
        )

    def _is_due_soon(self, task: TaskEntity, now: datetime) -> bool:
        if task.is_completed():
            return False
        deadline = _deadline_moment(task, now, self.local_tz)
        if deadline is None:
            return False
        return now <= deadline <= now + DUE_SOON_WINDOW
