# apps/projects/domain/entities.py
from dataclasses import dataclass, field
from typing import Optional, List, Union
from datetime import date, datetime
from enum import Enum


class ProjectStatus(str, Enum):
    NOT_STARTED = 'Not started'
    STARTED = 'Started'
    USER_TESTING = 'User - Testing'
    UPDATE = 'Update'
    BLOCKED = 'Blocked'
    COMPLETED = 'Completed'
    COMPLETED_BLOCKED = 'Completed Blocked'
    COMPLETED_NOT_SATISFIED = 'Completed, Not Satisfied'


# Wszystkie stany końcowe (timer niedostępny, można logować zaoszczędzony czas)
COMPLETED_STATUSES = frozenset({
    ProjectStatus.COMPLETED,
    ProjectStatus.COMPLETED_BLOCKED,
    ProjectStatus.COMPLETED_NOT_SATISFIED,
})


class RiskLevel(str, Enum):
    LOW = 'Low'
    MEDIUM = 'Medium'
    HIGH = 'High'


class ProjectFrequency(str, Enum):
    DAILY = 'Daily'
    WEEKLY = 'Weekly'
    TWICE_A_MONTH = 'Twice a month'
    THREE_WEEKS_ONCE = '3 weeks once'
    MONTHLY = 'Monthly'
    SPECIFIC_DATES = 'Specific Dates'


@dataclass
class ProjectEntity:
    id: Optional[int]
    name: str
    code: str = ""
    status: ProjectStatus = ProjectStatus.NOT_STARTED

    # Hierarchia (dwa poziomy: rodzic -> podprojekty)
    parent_id: Optional[int] = None
    weight: Optional[float] = None  # % udziału w postępie rodzica

    # Czas (godziny)
    allocated_hours: float = 0.0
    used_hours: float = 0.0
    additional_hours: float = 0.0
    saved_hours: float = 0.0
    # Może przyjść jako datetime z ORM lub string "YYYY-MM-DD HH:MM:SS" z bazy
    timer_start_time: Union[datetime, str, None] = None

    # Terminy
    milestone_date: Optional[date] = None
    completed_at: Optional[datetime] = None

    risk_level: RiskLevel = RiskLevel.LOW
    overage_reason: str = ""
    lead_id: Optional[int] = None
    phase: str = ""

    # Dane z okien potwierdzeń
    frequency: Optional[ProjectFrequency] = None
    frequency_detail: str = ""
    tools_used: List[int] = field(default_factory=list)
    end_user_feedback: Optional[dict] = None
    latest_comments: Optional[dict] = None
    last_used_by: List[dict] = field(default_factory=list)

    def is_root(self) -> bool:
        return self.parent_id is None

    def is_completed(self) -> bool:
        return self.status in COMPLETED_STATUSES

    @property
    def is_timer_running(self) -> bool:
        return bool(self.timer_start_time)
