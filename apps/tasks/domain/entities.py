# apps/tasks/domain/entities.py
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from enum import Enum


class TaskStatus(str, Enum):
    NOT_STARTED = '01.Task not started'
    IN_PROGRESS = '02.Task is started'
    ON_HOLD = '02a.On Hold'
    BLOCKED = '02b.Blocked'
    USER_TESTING = '03.User - Testing'
    UPDATE = '04.Update'
    COMPLETED = '05.Completed'


class TaskType(str, Enum):
    TASK = 'task'
    RISK = 'risk'    # w UI: pozycja "BLOCKED"
    ISSUE = 'issue'


class Severity(str, Enum):
    CRITICAL = 'Critical'
    HIGH = 'High'
    MEDIUM = 'Medium'
    LOW = 'Low'


class TaskPriority(str, Enum):
    LOW = 'Low'
    MEDIUM = 'Medium'
    HIGH = 'High'
    URGENT = 'Urgent'


@dataclass
class TaskEntity:
    id: Optional[int]  # ID może być None przed zapisem
    title: str
    project_id: Optional[int] = None
    description: str = ""
    status: TaskStatus = TaskStatus.NOT_STARTED
    type: TaskType = TaskType.TASK
    severity: Optional[Severity] = None  # tylko risk/issue
    priority: TaskPriority = TaskPriority.MEDIUM

    assignee_id: Optional[int] = None
    deadline: Optional[date] = None

    # Wypełniane dopiero przy ukończeniu
    completed_at: Optional[datetime] = None
    time_spent: Optional[float] = None
    time_saved: Optional[float] = None
    completion_reference: str = ""

    status_reason: str = ""
    comments: str = ""
    user_requirements: str = ""

    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def is_risk_or_issue(self) -> bool:
        return self.type in (TaskType.RISK, TaskType.ISSUE)

    def is_active_risk(self) -> bool:
        """Aktywny "BLOCKED" - ryzyko, które nie jest zamknięte."""
        return self.type == TaskType.RISK and not self.is_completed()

    def is_open_issue(self) -> bool:
        return self.type == TaskType.ISSUE and not self.is_completed()
