# apps/goals/domain/services.py
import logging
from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from apps.goals.domain.entities import GoalEntity
from apps.goals.ports.repositories import IGoalRepository
from apps.tasks.domain.entities import Priority, TodoEntity
from apps.tasks.ports.repositories import ITodoRepository

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"

PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2, None: 3}


def compute_progress(todos: Iterable[TodoEntity]) -> int:
    """Procent ukończonych zadań (0-100), zaokrąglany połówkami w górę."""
    todos = list(todos)
    if not todos:
        return 0
    done = sum(1 for t in todos if t.completed)
    percent = Decimal(100 * done) / Decimal(len(todos))
    return int(percent.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class GoalProgressService:
    def __init__(self, goal_repository: IGoalRepository, todo_repository: ITodoRepository):
        self.goal_repository = goal_repository
        self.todo_repository = todo_repository

    def recalculate(self, goal_id: int) -> int:
        """Przelicza postęp celu z aktualnego zbioru zadań i zapisuje go."""
        todos = self.todo_repository.list_for_goal(goal_id)
        progress = compute_progress(todos)
        self.goal_repository.set_progress(goal_id, progress)
        logger.debug("Goal %s progress -> %s%% (%s todos)", goal_id, progress, len(todos))
        return progress


def group_goals_by_category(goals: Iterable[GoalEntity], show_completed: bool = False) -> Dict[str, List[GoalEntity]]:
    """Grupuje cele po nazwie kategorii (kolejność pierwszego wystąpienia)."""
    groups: Dict[str, List[GoalEntity]] = OrderedDict()
    for goal in goals:
        if goal.is_completed and not show_completed:
            continue
        groups.setdefault(goal.category_name or UNCATEGORIZED, []).append(goal)
    return groups


def first_active_goal(goals: Iterable[GoalEntity]) -> Optional[GoalEntity]:
    return next((g for g in goals if not g.is_completed), None)


def sort_todos(todos: Iterable[TodoEntity], by: str = "none") -> List[TodoEntity]:
    """
    Sortowanie listy zadań:
    - "priority": high, medium, low, potem bez priorytetu
    - "due_date": rosnąco, zadania bez terminu na końcu
    - "none": bez zmian
    """
    todos = list(todos)
    if by == "priority":
        return sorted(todos, key=lambda t: PRIORITY_ORDER[t.priority])
    if by == "due_date":
        return sorted(todos, key=lambda t: (t.due_date is None, t.due_date or 0))
    if by == "none":
        return todos
    raise ValueError(f"Unknown sort option: {by}")
