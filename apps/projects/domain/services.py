# apps/projects/domain/services.py
import math
from dataclasses import asdict, dataclass
from datetime import date, datetime, time
from typing import Dict, List, Optional, Sequence

import pytz
from loguru import logger

from apps.projects.domain.entities import ProjectEntity, ProjectStatus, RiskLevel
from apps.projects.domain.health import (
    DetailHealthPolicy,
    HealthPolicy,
    HealthStatus,
    hours_usage_percent,
    is_behind_on_tasks,
)
from apps.projects.domain.progress import ProgressCalculator
from apps.projects.domain.time_tracking import MS_PER_HOUR, TimeAccumulator, align_to_now, format_duration
from apps.tasks.domain.entities import TaskEntity

MISSING_REFERENCE = "N/A"

SCHEDULE_ON_TIME = 'On Time'
SCHEDULE_BEHIND = 'Behind'
SCHEDULE_AT_RISK = 'At Risk'


@dataclass
class ProjectStats:
    project_id: int
    name: str
    code: str
    status: str
    parent_id: Optional[int]
    is_parent: bool
    progress: int
    used_hours: float
    allocated_hours: float
    hours_over: float
    remaining_hours: float
    hours_usage_percent: float
    health: HealthStatus
    schedule: str
    days_to_milestone: int
    open_issues: int
    open_risks: int
    lead_name: str
    used_time_display: str
    timer_running: bool

    def to_dict(self) -> dict:
        data = asdict(self)
        data['health'] = self.health.value
        data['health_label'] = self.health.label
        return data


def days_until(milestone: Optional[date], now: datetime, clamp: bool = True, local_tz=pytz.UTC) -> Optional[int]:
    """Dni (w górę) do kamienia milowego. Brak daty -> 0 (lub None bez clamp)."""
    if milestone is None:
        return 0 if clamp else None
    if isinstance(milestone, datetime):
        moment = milestone
    else:
        moment = datetime.combine(milestone, time.min)
    moment = align_to_now(moment, now, local_tz)
    days = math.ceil((moment - now).total_seconds() / 86400)
    return max(0, days) if clamp else days


def schedule_label(project: ProjectEntity, behind: bool) -> str:
    if project.status == ProjectStatus.COMPLETED:
        return SCHEDULE_ON_TIME
    if behind:
        return SCHEDULE_BEHIND
    if project.risk_level == RiskLevel.HIGH:
        return SCHEDULE_AT_RISK
    return SCHEDULE_ON_TIME


def derive_parent_status(children: Sequence[ProjectEntity]) -> ProjectStatus:
    """Status rodzica wynikający ze statusów podprojektów."""
    if all(c.status == ProjectStatus.COMPLETED for c in children):
        return ProjectStatus.COMPLETED
    if any(c.status != ProjectStatus.NOT_STARTED for c in children):
        return ProjectStatus.STARTED
    return ProjectStatus.NOT_STARTED


def resolve_member_name(member_id: Optional[int], members: Dict[int, str]) -> str:
    if member_id is None:
        return MISSING_REFERENCE
    name = members.get(member_id)
    if name is None:
        logger.warning(f"Brak członka zespołu o ID {member_id} (usunięty?) - używam {MISSING_REFERENCE}")
        return MISSING_REFERENCE
    return name


class ProjectStatsService:
    """
    Jedno miejsce, w którym liczymy dane pochodne projektu
    (lista projektów, szczegóły, dashboard korzystają z tego samego kodu).
    """

    def __init__(
        self,
        accumulator: Optional[TimeAccumulator] = None,
        calculator: Optional[ProgressCalculator] = None,
        health_policy: Optional[HealthPolicy] = None,
    ):
        self.accumulator = accumulator or TimeAccumulator()
        self.calculator = calculator or ProgressCalculator()
        self.health_policy = health_policy or DetailHealthPolicy()

    def build(
        self,
        project: ProjectEntity,
        all_projects: Sequence[ProjectEntity],
        all_tasks: Sequence[TaskEntity],
        now: datetime,
        cache: Optional[Dict[int, int]] = None,
        members: Optional[Dict[int, str]] = None,
    ) -> ProjectStats:
        children = [p for p in all_projects if p.parent_id == project.id]
        scope_ids = {project.id} | {c.id for c in children}
        relevant_tasks = [t for t in all_tasks if t.project_id in scope_ids]

        progress = self.calculator.calculate(project, all_projects, all_tasks, cache)

        used = self.accumulator.project_used_hours(project, children, now)
        allocated = self.accumulator.project_allocated_hours(project, children)
        usage = hours_usage_percent(used, allocated)
        behind = is_behind_on_tasks(relevant_tasks, now, self.accumulator.local_tz)

        return ProjectStats(
            project_id=project.id,
            name=project.name,
            code=project.code,
            status=project.status.value,
            parent_id=project.parent_id,
            is_parent=bool(children),
            progress=progress,
            used_hours=used,
            allocated_hours=allocated,
            hours_over=max(0.0, used - allocated),
            remaining_hours=max(0.0, allocated - used),
            hours_usage_percent=usage,
            health=self.health_policy.evaluate(project, progress, usage, behind),
            schedule=schedule_label(project, behind),
            days_to_milestone=days_until(project.milestone_date, now, local_tz=self.accumulator.local_tz),
            open_issues=len([t for t in relevant_tasks if t.is_open_issue()]),
            open_risks=len([t for t in relevant_tasks if t.is_active_risk()]),
            lead_name=resolve_member_name(project.lead_id, members or {}),
            used_time_display=format_duration(used * MS_PER_HOUR),
            timer_running=self.accumulator.has_running_timer(project, children),
        )

    def build_all(
        self,
        all_projects: Sequence[ProjectEntity],
        all_tasks: Sequence[TaskEntity],
        now: datetime,
        members: Optional[Dict[int, str]] = None,
    ) -> List[ProjectStats]:
        cache: Dict[int, int] = {}
        return [self.build(p, all_projects, all_tasks, now, cache, members) for p in all_projects]
