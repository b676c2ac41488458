# apps/tasks/domain/services.py
from datetime import datetime
from typing import Optional

from loguru import logger

from apps.projects.domain.transitions import Apply, ConfirmationFlow, Effect, NoOp, Reject, Reroute
from apps.tasks.domain.entities import TaskEntity, TaskStatus
from apps.tasks.ports.repositories import ITaskRepository

ASSIGNEE_REQUIRED = "Please assign this task to a team member before changing its status from 'Not started'."
COMPLETED_IS_FINAL = "This task is already completed and its status can no longer be changed."


class TaskStatusGuard:
    """Prostszy strażnik dla zadań: przypisanie + ukończenie przez okno."""

    def request_transition(self, task: TaskEntity, new_status: TaskStatus) -> Effect:
        new_status = TaskStatus(new_status)

        if new_status == task.status:
            return NoOp(task.id)

        # Ukończenie jest jednokierunkowe
        if task.status == TaskStatus.COMPLETED:
            return Reject(COMPLETED_IS_FINAL)

        # Wyjątek: bez przypisania wolno tylko zablokować
        if task.assignee_id is None and task.status == TaskStatus.NOT_STARTED and new_status != TaskStatus.BLOCKED:
            return Reject(ASSIGNEE_REQUIRED)

        if new_status == TaskStatus.COMPLETED:
            return Reroute(task.id, ConfirmationFlow.COMPLETE_TASK, new_status.value)

        return Apply(task.id, new_status.value)


class TaskService:
    def __init__(self, repository: ITaskRepository, guard: Optional[TaskStatusGuard] = None):
        self.repository = repository
        self.guard = guard or TaskStatusGuard()

    def _get(self, task_id: int) -> TaskEntity:
        task = self.repository.get_by_id(task_id)
        if not task:
            raise ValueError("Task not found")
        return task

    def change_status(self, task_id: int, new_status: TaskStatus) -> Effect:
        """Zapisuje tylko efekt Apply; Reroute/Reject wracają do wywołującego."""
        task = self._get(task_id)
        effect = self.guard.request_transition(task, new_status)

        if isinstance(effect, Apply):
            self.repository.update(task_id, {'status': TaskStatus(effect.status)})
            logger.info(f"Zadanie {task_id}: {task.status.value} -> {effect.status}")
        return effect

    def complete_task(
        self,
        task_id: int,
        time_spent: float,
        time_saved: float,
        now: datetime,
        completion_reference: str = "",
    ) -> TaskEntity:
        """Koniec okna "Complete task": zapisuje czas i dopiero wtedy status."""
        task = self._get(task_id)

        effect = self.guard.request_transition(task, TaskStatus.COMPLETED)
        if isinstance(effect, Reject):
            raise ValueError(effect.reason)
        if isinstance(effect, NoOp):
            return task

        if time_spent is None or time_spent < 0 or time_saved is None or time_saved < 0:
            raise ValueError("Time spent and time saved must be non-negative numbers")

        updated = self.repository.update(task_id, {
            'status': TaskStatus.COMPLETED,
            'time_spent': time_spent,
            'time_saved': time_saved,
            'completed_at': now,
            'completion_reference': completion_reference,
            'status_reason': '',  # powód statusu nieaktualny po ukończeniu
        })
        logger.info(f"Zadanie {task_id} ukończone (spent={time_spent}h, saved={time_saved}h)")
        return updated
