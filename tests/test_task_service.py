"""Tests for task status rules."""

from datetime import datetime

import pytest

from apps.projects.domain.transitions import Apply, ConfirmationFlow, NoOp, Reject, Reroute
from apps.tasks.domain.entities import TaskEntity, TaskStatus, TaskType
from apps.tasks.domain.services import ASSIGNEE_REQUIRED, COMPLETED_IS_FINAL, TaskService, TaskStatusGuard


class TestTaskStatusGuard:
    """Tests for TaskStatusGuard."""

    def test_unassigned_task_cannot_start(self):
        """An unassigned Not started task cannot move to In progress."""
        task = TaskEntity(id=1, title="T")

        assert TaskStatusGuard().request_transition(task, TaskStatus.IN_PROGRESS) == Reject(ASSIGNEE_REQUIRED)

    def test_unassigned_task_can_be_blocked(self):
        """Blocking is allowed without an assignee."""
        task = TaskEntity(id=1, title="T")

        assert TaskStatusGuard().request_transition(task, TaskStatus.BLOCKED) == Apply(1, TaskStatus.BLOCKED.value)

    def test_completion_goes_through_dialog(self):
        """Completing opens the completion dialog."""
        task = TaskEntity(id=1, title="T", assignee_id=4, status=TaskStatus.IN_PROGRESS)

        effect = TaskStatusGuard().request_transition(task, TaskStatus.COMPLETED)

        assert effect == Reroute(1, ConfirmationFlow.COMPLETE_TASK, TaskStatus.COMPLETED.value)

    def test_completed_is_final(self):
        """A completed task cannot be reopened."""
        task = TaskEntity(id=1, title="T", assignee_id=4, status=TaskStatus.COMPLETED)

        assert TaskStatusGuard().request_transition(task, TaskStatus.UPDATE) == Reject(COMPLETED_IS_FINAL)

    def test_same_status_is_noop(self):
        """Re-selecting the current status does nothing."""
        task = TaskEntity(id=1, title="T", status=TaskStatus.NOT_STARTED)

        assert TaskStatusGuard().request_transition(task, TaskStatus.NOT_STARTED) == NoOp(1)


class TestTaskService:
    """Tests for TaskService against an in-memory repository."""

    def test_change_status_persists_apply_only(self, task_repo):
        """Only Apply effects are written."""
        task_repo.save(TaskEntity(id=1, title="T", assignee_id=4))
        service = TaskService(task_repo)

        effect = service.change_status(1, TaskStatus.IN_PROGRESS)
        rerouted = service.change_status(1, TaskStatus.COMPLETED)

        assert isinstance(effect, Apply)
        assert isinstance(rerouted, Reroute)
        assert task_repo.get_by_id(1).status == TaskStatus.IN_PROGRESS

    def test_unassigned_status_change_leaves_task_untouched(self, task_repo):
        """A rejected change does not touch the repository."""
        task_repo.save(TaskEntity(id=1, title="T"))

        effect = TaskService(task_repo).change_status(1, TaskStatus.IN_PROGRESS)

        assert isinstance(effect, Reject)
        assert task_repo.get_by_id(1).status == TaskStatus.NOT_STARTED

    def test_complete_task_records_times(self, task_repo):
        """Completing stores hours, timestamp and reference and clears the reason."""
        task_repo.save(TaskEntity(id=1, title="T", assignee_id=4, status=TaskStatus.BLOCKED,
                                  status_reason="waiting", type=TaskType.RISK))
        when = datetime(2024, 6, 10, 15, 0)

        task = TaskService(task_repo).complete_task(1, 3.5, 1.0, when, "PR-42")

        assert task.status == TaskStatus.COMPLETED
        assert task.time_spent == 3.5
        assert task.time_saved == 1.0
        assert task.completed_at == when
        assert task.completion_reference == "PR-42"
        assert task.status_reason == ""

    def test_complete_task_rejects_negative_hours(self, task_repo):
        """Negative hours are input errors."""
        task_repo.save(TaskEntity(id=1, title="T", assignee_id=4))

        with pytest.raises(ValueError):
            TaskService(task_repo).complete_task(1, -1, 0, datetime(2024, 6, 10))

    def test_complete_unassigned_task_raises(self, task_repo):
        """The assignee rule also applies to completion."""
        task_repo.save(TaskEntity(id=1, title="T"))

        with pytest.raises(ValueError, match="assign"):
            TaskService(task_repo).complete_task(1, 1, 1, datetime(2024, 6, 10))

    def test_missing_task(self, task_repo):
        """Unknown ids raise ValueError."""
        with pytest.raises(ValueError):
            TaskService(task_repo).change_status(42, TaskStatus.BLOCKED)
