# apps/timeline/domain/services.py
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, time, tzinfo
from typing import Dict, Iterable, List, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta, MO
from django.conf import settings
from django.utils import timezone

from apps.tasks.domain.entities import TodoEntity
from apps.tasks.ports.repositories import ITodoRepository

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y-%m-%d'

Anchor = Union[date, datetime]


def default_page_size() -> int:
    return getattr(settings, 'GOAL_TRACKER', {}).get('TIMELINE_PAGE_SIZE', 10)


def _local_day(anchor: Anchor, tz: Optional[tzinfo] = None) -> date:
    if isinstance(anchor, datetime):
        if timezone.is_aware(anchor):
            anchor = timezone.localtime(anchor, tz)
        return anchor.date()
    return anchor


def week_bounds(anchor: Anchor, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    """Tydzień od poniedziałku 00:00 do niedzieli 23:59:59.999999 (czas lokalny), zawierający anchor."""
    tz = tz or timezone.get_current_timezone()
    monday = _local_day(anchor, tz) + relativedelta(weekday=MO(-1))
    sunday = monday + relativedelta(days=6)
    start = timezone.make_aware(datetime.combine(monday, time.min), tz)
    end = timezone.make_aware(datetime.combine(sunday, time.max), tz)
    return start, end


def shift_week(anchor: Anchor, weeks: int) -> Anchor:
    """Poprzedni (-1) / następny (+1) tydzień."""
    return anchor + relativedelta(weeks=weeks)


def completion_day(todo: TodoEntity, tz: Optional[tzinfo] = None) -> str:
    completed = todo.completed_time
    if timezone.is_aware(completed):
        completed = timezone.localtime(completed, tz)
    return completed.strftime(DATE_FORMAT)


def group_by_date(todos: Iterable[TodoEntity], tz: Optional[tzinfo] = None) -> Dict[str, List[TodoEntity]]:
    """
    Grupuje ukończone zadania po dacie ukończenia (YYYY-MM-DD, czas lokalny).
    Grupy i zadania w grupach od najnowszych.
    """
    done = [t for t in todos if t.completed_time is not None]
    done.sort(key=lambda t: t.completed_time, reverse=True)

    groups: Dict[str, List[TodoEntity]] = OrderedDict()
    for todo in done:
        groups.setdefault(completion_day(todo, tz), []).append(todo)
    return groups


@dataclass
class TimelinePage:
    items: List[TodoEntity] = field(default_factory=list)
    # Heurystyka: pełna strona => zakładamy, że jest więcej
    has_more: bool = False
    next_cursor: Optional[datetime] = None

    @property
    def groups(self) -> Dict[str, List[TodoEntity]]:
        return group_by_date(self.items)


class TimelineService:
    def __init__(self, todo_repository: ITodoRepository, user_id: Optional[int] = None):
        self.todo_repository = todo_repository
        self.user_id = user_id

    def fetch_completed_page(self, cursor: Optional[datetime] = None,
                             page_size: Optional[int] = None) -> TimelinePage:
        """Strona ukończonych zadań, ściśle starszych niż cursor (bez kursora: od początku)."""
        if page_size is None:
            page_size = default_page_size()
        if page_size < 1:
            raise ValueError("page_size must be positive")

        items = self.todo_repository.list_completed(user_id=self.user_id, before=cursor, limit=page_size)
        next_cursor = items[-1].completed_time if items else cursor
        logger.debug("Timeline page: %s items (cursor=%s)", len(items), cursor)
        return TimelinePage(items=items, has_more=len(items) == page_size, next_cursor=next_cursor)

    def fetch_weekly_completed(self, anchor: Anchor) -> TimelinePage:
        start, end = week_bounds(anchor)
        items = self.todo_repository.list_completed(user_id=self.user_id, since=start, until=end)
        return TimelinePage(items=items, has_more=False, next_cursor=None)
