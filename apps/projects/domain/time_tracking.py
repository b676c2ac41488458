# apps/projects/domain/time_tracking.py
import math
from datetime import date, datetime, time
from typing import Iterable, Optional, Union

import pytz
from dateutil import parser as date_parser
from loguru import logger

from apps.projects.domain.entities import ProjectEntity

MS_PER_HOUR = 3_600_000

Timestamp = Union[datetime, str, None]


def clamp_hours(value) -> float:
    """Godziny z bazy: brak, tekst, NaN albo wartość ujemna -> 0."""
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(hours) or hours < 0:
        return 0.0
    return hours


def align_to_now(moment: datetime, now: datetime, local_tz=pytz.UTC) -> datetime:
    """
    Ujednolica naive/aware względem `now`. Daty bez strefy z bazy
    (liczniki, terminy, kamienie milowe) to czas lokalny `local_tz`.
    """
    if moment.tzinfo is None and now.tzinfo is not None:
        return local_tz.localize(moment)
    if moment.tzinfo is not None and now.tzinfo is None:
        return moment.astimezone(local_tz).replace(tzinfo=None)
    return moment


def format_duration(ms: float) -> str:
    """Milisekundy -> HH:MM:SS (jak licznik na karcie projektu)."""
    total_seconds = int(max(0, ms) // 1000)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


class TimeAccumulator:
    """
    Zamienia zapisany stan licznika (used_hours + timer_start_time)
    na aktualny czas wykorzystany. Nic nie zapisuje - to tylko projekcja
    przy odczycie. `now` zawsze przychodzi z zewnątrz.
    """

    def __init__(self, local_timezone: str = 'UTC'):
        # Strefa, w której interpretujemy "gołe" daty z bazy (DATETIME bez offsetu)
        self.local_tz = pytz.timezone(local_timezone)

    def parse_timestamp(self, value: Timestamp) -> Optional[datetime]:
        if value is None or value == '':
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, time.min)

        raw = str(value).strip()
        # MySQL zapisuje "YYYY-MM-DD HH:MM:SS" - zamieniamy separator na 'T'
        iso = raw if 'T' in raw else raw.replace(' ', 'T', 1)
        try:
            return date_parser.isoparse(iso)
        except (ValueError, OverflowError):
            logger.warning(f"Nieprawidłowy znacznik czasu licznika: {raw!r} - przyjmuję 0")
            return None

    def align(self, moment: datetime, now: datetime) -> datetime:
        return align_to_now(moment, now, self.local_tz)

    def to_local_naive(self, moment: datetime) -> datetime:
        """Format zapisu: lokalny czas bez strefy."""
        if moment.tzinfo is None:
            return moment
        return moment.astimezone(self.local_tz).replace(tzinfo=None)

    def elapsed_session_ms(self, timer_start_time: Timestamp, now: datetime) -> float:
        start = self.parse_timestamp(timer_start_time)
        if start is None:
            return 0.0
        start = self.align(start, now)
        return max(0.0, (now - start).total_seconds() * 1000)

    def total_used(self, baseline_hours, timer_start_time: Timestamp, now: datetime) -> float:
        return clamp_hours(baseline_hours) + self.elapsed_session_ms(timer_start_time, now) / MS_PER_HOUR

    def fold_session(self, baseline_hours, timer_start_time: Timestamp, now: datetime) -> float:
        """
        Nowa wartość bazowa przy Hold/End. Ten sam `now` musi trafić
        do obliczeń i do zapisu, inaczej wyświetlany czas rozjedzie się z zapisanym.
        """
        return self.total_used(baseline_hours, timer_start_time, now)

    def project_used_hours(self, project: ProjectEntity, children: Iterable[ProjectEntity], now: datetime) -> float:
        # Dla rodzica liczą się wyłącznie podprojekty, własne pola są ignorowane
        children = list(children)
        if children:
            return sum(self.total_used(c.used_hours, c.timer_start_time, now) for c in children)
        return self.total_used(project.used_hours, project.timer_start_time, now)

    def project_allocated_hours(self, project: ProjectEntity, children: Iterable[ProjectEntity]) -> float:
        children = list(children)
        if children:
            return sum(clamp_hours(c.allocated_hours) for c in children)
        return clamp_hours(project.allocated_hours)

    def has_running_timer(self, project: ProjectEntity, children: Iterable[ProjectEntity]) -> bool:
        """Czy widok musi odświeżać licznik co sekundę."""
        return project.is_timer_running or any(c.is_timer_running for c in children)
