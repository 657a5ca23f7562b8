# apps/core/application/commands.py
import copy
import logging
from abc import ABC, abstractmethod
from typing import Optional

from apps.core.application.state import AppState
from apps.core.errors import StoreError
from apps.goals.application.workflow import GoalWorkflow
from apps.goals.domain.entities import GoalEntity
from apps.goals.domain.services import compute_progress

logger = logging.getLogger(__name__)


class OptimisticCommand(ABC):
    """
    Zmiana optymistyczna: apply() od razu zmienia stan lokalny,
    persist() zapisuje w magazynie, rollback() przywraca migawkę celu.
    """
    error_title = "Error updating task"

    def __init__(self, state: AppState, workflow: GoalWorkflow):
        self.state = state
        self.workflow = workflow
        self._snapshot: Optional[GoalEntity] = None

    def _take_snapshot(self, goal: GoalEntity):
        self._snapshot = copy.deepcopy(goal)

    @abstractmethod
    def apply(self) -> None:
        pass

    @abstractmethod
    def persist(self) -> None:
        pass

    def rollback(self) -> None:
        if self._snapshot is not None:
            self.state.replace_goal(copy.deepcopy(self._snapshot))

    def _reconcile_progress(self, goal_id: int, progress: int):
        # Stan mógł zostać podmieniony przez refresh w trakcie zapisu
        goal = self.state.find_goal(goal_id)
        if goal is not None:
            goal.progress = progress


class ToggleTodoCommand(OptimisticCommand):
    def __init__(self, state: AppState, workflow: GoalWorkflow, todo_id: int):
        super().__init__(state, workflow)
        self.todo_id = todo_id

    def apply(self) -> None:
        goal, todo = self.state.find_todo(self.todo_id)
        if todo is None:
            # Brak lokalnie - sam zapis zdecyduje
            return
        self._take_snapshot(goal)
        todo.toggle(self.workflow.clock())
        goal.progress = compute_progress(goal.todos)

    def persist(self) -> None:
        result = self.workflow.toggle_todo_completion(self.todo_id)
        _, todo = self.state.find_todo(self.todo_id)
        if todo is not None:
            todo.completed = result.todo.completed
            todo.completed_time = result.todo.completed_time
        self._reconcile_progress(result.todo.goal_id, result.goal_progress)


class DeleteTodoCommand(OptimisticCommand):
    error_title = "Error deleting task"

    def __init__(self, state: AppState, workflow: GoalWorkflow, todo_id: int):
        super().__init__(state, workflow)
        self.todo_id = todo_id

    def apply(self) -> None:
        goal, todo = self.state.find_todo(self.todo_id)
        if todo is None:
            return
        self._take_snapshot(goal)
        goal.todos = [t for t in goal.todos if t.id != self.todo_id]
        goal.progress = compute_progress(goal.todos)

    def persist(self) -> None:
        result = self.workflow.delete_todo(self.todo_id)
        self._reconcile_progress(result.todo.goal_id, result.goal_progress)


class CommandRunner:
    def __init__(self, state: AppState):
        self.state = state

    def run(self, command: OptimisticCommand) -> bool:
        """Wykonuje komendę; przy błędzie magazynu cofa zmianę i dodaje powiadomienie."""
        command.apply()
        try:
            command.persist()
        except StoreError as exc:
            logger.warning("%s failed, rolling back: %s", type(command).__name__, exc)
            command.rollback()
            self.state.notify(command.error_title, str(exc))
            return False
        return True
