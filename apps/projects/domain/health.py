# apps/projects/domain/health.py
import math
from abc import ABC, abstractmethod
from datetime import datetime, time
from enum import Enum
from typing import Iterable, Optional

import pytz

from apps.projects.domain.entities import ProjectEntity, ProjectStatus
from apps.projects.domain.time_tracking import align_to_now
from apps.tasks.domain.entities import TaskEntity


class HealthStatus(str, Enum):
    RED = 'Red'
    YELLOW = 'Yellow'
    GREEN = 'Green'

    @property
    def label(self) -> str:
        return {'Red': 'Behind', 'Yellow': 'At Risk', 'Green': 'On Track'}[self.value]


# Progi odchylenia (punkty procentowe: zużycie godzin - postęp)
CRITICAL_DEVIATION = 25
WARNING_DEVIATION = 10


def is_task_overdue(task: TaskEntity, now: datetime, local_tz=pytz.UTC) -> bool:
    if task.is_completed() or task.deadline is None:
        return False
    deadline = task.deadline
    if not isinstance(deadline, datetime):
        # Termin bez godziny = lokalna północ tego dnia
        deadline = datetime.combine(deadline, time.min)
    return align_to_now(deadline, now, local_tz) < now


def is_behind_on_tasks(tasks: Iterable[TaskEntity], now: datetime, local_tz=pytz.UTC) -> bool:
    return any(is_task_overdue(t, now, local_tz) for t in tasks)


class HealthPolicy(ABC):
    """Wspólny interfejs dla wariantów RAG."""

    name = ""

    @abstractmethod
    def evaluate(
        self,
        project: ProjectEntity,
        progress: int,
        hours_usage_percent: Optional[float],
        is_behind_on_tasks: bool,
    ) -> HealthStatus:
        pass


class DetailHealthPolicy(HealthPolicy):
    """
    Widok szczegółów projektu i lista projektów.
    Porównuje zużycie godzin z postępem; pierwsza pasująca reguła wygrywa.
    """

    name = "detail"

    def evaluate(self, project, progress, hours_usage_percent, is_behind_on_tasks):
        # 1. Statusy nadrzędne
        if project.status == ProjectStatus.COMPLETED:
            return HealthStatus.GREEN
        if project.status == ProjectStatus.BLOCKED:
            return HealthStatus.RED
        if project.status == ProjectStatus.NOT_STARTED:
            return HealthStatus.GREEN

        # 2. Przekroczenie budżetu godzin zawsze jest krytyczne
        if hours_usage_percent is not None and not math.isnan(hours_usage_percent) and hours_usage_percent > 100:
            return HealthStatus.RED

        # 3. Brak przydziału godzin albo brak zalogowanego czasu
        if hours_usage_percent is None or math.isnan(hours_usage_percent) or hours_usage_percent == 0:
            return HealthStatus.RED if is_behind_on_tasks else HealthStatus.GREEN

        # 4. Odchylenie zużycia od postępu
        deviation = hours_usage_percent - progress
        if deviation > CRITICAL_DEVIATION:
            return HealthStatus.RED
        if deviation > WARNING_DEVIATION:
            return HealthStatus.YELLOW
        if is_behind_on_tasks:
            return HealthStatus.YELLOW
        return HealthStatus.GREEN


class SummaryHealthPolicy(HealthPolicy):
    """
    Dashboard portfela (rozkład RAG, "wymaga uwagi").
    Ignoruje godziny i postęp - patrzy tylko na przeterminowane zadania i status.
    """

    name = "summary"

    def evaluate(self, project, progress, hours_usage_percent, is_behind_on_tasks):
        if is_behind_on_tasks:
            return HealthStatus.RED
        if project.status in (ProjectStatus.USER_TESTING, ProjectStatus.UPDATE):
            return HealthStatus.YELLOW
        return HealthStatus.GREEN


def hours_usage_percent(used_hours: float, allocated_hours: float) -> float:
    return (used_hours / allocated_hours) * 100 if allocated_hours > 0 else 0.0
