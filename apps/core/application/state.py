# apps/core/application/state.py
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

from apps.goals.domain.entities import CategoryEntity, GoalEntity
from apps.tasks.domain.entities import TodoEntity


@dataclass
class Notification:
    id: int
    title: str
    message: str
    level: str = 'error'


@dataclass
class TimelineState:
    mode: str = 'all'  # 'all' albo 'weekly'
    items: List[TodoEntity] = field(default_factory=list)
    has_more: bool = False
    cursor: Optional[datetime] = None
    week_anchor: Optional[Union[date, datetime]] = None


@dataclass
class AppState:
    """
    Stan widoku należący do sesji. Jedynym sposobem synchronizacji
    z magazynem jest ponowne pobranie danych (refresh).
    """
    goals: List[GoalEntity] = field(default_factory=list)
    categories: List[CategoryEntity] = field(default_factory=list)
    selected_goal_id: Optional[int] = None
    timeline: TimelineState = field(default_factory=TimelineState)
    notifications: List[Notification] = field(default_factory=list)
    loading: bool = True
    _next_notification_id: int = field(default=1, repr=False)

    def find_goal(self, goal_id: int) -> Optional[GoalEntity]:
        return next((g for g in self.goals if g.id == goal_id), None)

    def find_todo(self, todo_id: int) -> Tuple[Optional[GoalEntity], Optional[TodoEntity]]:
        for goal in self.goals:
            todo = goal.find_todo(todo_id)
            if todo is not None:
                return goal, todo
        return None, None

    def replace_goal(self, goal: GoalEntity):
        self.goals = [goal if g.id == goal.id else g for g in self.goals]

    @property
    def selected_goal(self) -> Optional[GoalEntity]:
        if self.selected_goal_id is None:
            return None
        return self.find_goal(self.selected_goal_id)

    def notify(self, title: str, message: str, level: str = 'error') -> Notification:
        notification = Notification(id=self._next_notification_id, title=title, message=message, level=level)
        self._next_notification_id += 1
        self.notifications.append(notification)
        return notification

    def dismiss(self, notification_id: int):
        self.notifications = [n for n in self.notifications if n.id != notification_id]
