# apps/projects/domain/progress.py
import math
from typing import Dict, List, Optional, Sequence

from loguru import logger

from apps.projects.domain.entities import ProjectEntity, ProjectStatus
from apps.tasks.domain.entities import TaskEntity, TaskStatus


def round_half_up(value: float) -> int:
    # Wbudowany round() zaokrągla do parzystej (12.5 -> 12), tu potrzebujemy 13
    return int(math.floor(value + 0.5))


class ProgressCalculator:
    """
    Postęp projektu 0-100.

    - Completed -> 100, Not started -> 0 (niezależnie od dzieci i zadań).
    - Rodzic: suma wag UKOŃCZONYCH podprojektów (bez częściowego zaliczenia).
    - Liść: procent ukończonych zadań, brak zadań -> 0.
    Wynik obcinany do 100 (wagi nie są walidowane i mogą się przesumować).

    `cache` to słownik {project_id: progress} współdzielony w ramach jednego przebiegu.
    """

    def calculate(
        self,
        project: ProjectEntity,
        all_projects: Sequence[ProjectEntity],
        all_tasks: Sequence[TaskEntity],
        cache: Optional[Dict[int, int]] = None,
    ) -> int:
        if cache is None:
            cache = {}
        if project.id in cache:
            return cache[project.id]

        if project.status == ProjectStatus.COMPLETED:
            progress = 100
        elif project.status == ProjectStatus.NOT_STARTED:
            progress = 0
        else:
            children = [p for p in all_projects if p.parent_id == project.id]
            if children:
                progress = self._weighted_children(children)
            else:
                tasks = [t for t in all_tasks if t.project_id == project.id]
                progress = self._task_ratio(tasks)

        progress = max(0, min(progress, 100))
        cache[project.id] = progress
        return progress

    def calculate_all(self, all_projects: Sequence[ProjectEntity], all_tasks: Sequence[TaskEntity]) -> Dict[int, int]:
        """Jeden przebieg dla całego portfela (wspólny cache)."""
        cache: Dict[int, int] = {}
        for project in all_projects:
            self.calculate(project, all_projects, all_tasks, cache)
        return cache

    def _weighted_children(self, children: List[ProjectEntity]) -> int:
        total = sum(
            (child.weight or 0)
            for child in children
            if child.status == ProjectStatus.COMPLETED
        )
        if total > 100:
            logger.debug(f"Suma wag ukończonych podprojektów przekracza 100 ({total}) - obcinam")
        return round_half_up(total)

    def _task_ratio(self, tasks: List[TaskEntity]) -> int:
        if not tasks:
            return 0
        completed = len([t for t in tasks if t.status == TaskStatus.COMPLETED])
        return round_half_up(completed / len(tasks) * 100)


def weight_sum_violation(siblings: Sequence[ProjectEntity]) -> Optional[str]:
    """Komunikat, jeśli wagi rodzeństwa przekraczają 100 (None = OK)."""
    total = sum((s.weight or 0) for s in siblings)
    if total > 100:
        return f"Sub-project weights add up to {total:g}%, which exceeds 100%."
    return None

