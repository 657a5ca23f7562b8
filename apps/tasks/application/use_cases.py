# apps/tasks/application/use_cases.py
import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, ContextManager, List, Optional

from django.utils import timezone

from apps.core.errors import NotFoundError, ValidationError
from apps.core.ports.store import GOALS, TODOS
from apps.goals.application.use_cases import as_datetime, require_text
from apps.goals.domain.services import GoalProgressService
from apps.goals.ports.repositories import IGoalRepository
from apps.tasks.domain.entities import Priority, TodoEntity
from apps.tasks.ports.repositories import ITodoRepository

logger = logging.getLogger(__name__)

UnitOfWork = Callable[[], ContextManager]

# Znacznik "pole nie zmienia się" (None oznacza wyczyszczenie wartości)
UNSET = object()


def parse_priority(value) -> Optional[Priority]:
    if value is None or value == "":
        return None
    try:
        return Priority(value)
    except ValueError:
        raise ValidationError("Priority must be one of: low, medium, high", field='priority')


def parse_estimated_time(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Estimated time must be a whole number of minutes", field='estimated_time')
    if minutes < 0:
        raise ValidationError("Estimated time cannot be negative", field='estimated_time')
    return minutes


def parse_due_date(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    return as_datetime(value, 'due_date')


@dataclass
class TodoResult:
    todo: TodoEntity
    goal_progress: int


@dataclass
class CreateTodoInput:
    goal_id: int
    name: str
    description: str = ""
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    estimated_time: Optional[int] = None


@dataclass
class UpdateTodoInput:
    todo_id: int
    name: object = UNSET
    description: object = UNSET
    priority: object = UNSET
    due_date: object = UNSET
    estimated_time: object = UNSET


class CreateTodoUseCase:
    def __init__(self, todo_repository: ITodoRepository, goal_repository: IGoalRepository,
                 progress_service: GoalProgressService, unit_of_work: UnitOfWork = contextlib.nullcontext):
        self.todo_repository = todo_repository
        self.goal_repository = goal_repository
        self.progress_service = progress_service
        self.unit_of_work = unit_of_work

    def execute(self, input_dto: CreateTodoInput) -> TodoResult:
        name = require_text(input_dto.name, 'name')
        priority = parse_priority(input_dto.priority)
        estimated_time = parse_estimated_time(input_dto.estimated_time)
        due_date = parse_due_date(input_dto.due_date)

        todo = TodoEntity(
            id=None,
            goal_id=input_dto.goal_id,
            name=name,
            description=(input_dto.description or "").strip(),
            priority=priority,
            due_date=due_date,
            estimated_time=estimated_time,
            completed=False,
            completed_time=None,
        )

        with self.unit_of_work():
            if self.goal_repository.get_by_id(input_dto.goal_id) is None:
                raise NotFoundError(GOALS, input_dto.goal_id)
            todo = self.todo_repository.save(todo)
            progress = self.progress_service.recalculate(todo.goal_id)

        logger.info("Todo %s added to goal %s", todo.id, todo.goal_id)
        return TodoResult(todo=todo, goal_progress=progress)


class UpdateTodoUseCase:
    """Szybka edycja pól zadania. Nie zmienia stanu ukończenia, więc nie przelicza postępu."""

    def __init__(self, todo_repository: ITodoRepository):
        self.todo_repository = todo_repository

    def execute(self, input_dto: UpdateTodoInput) -> TodoEntity:
        todo = self.todo_repository.get_by_id(input_dto.todo_id)
        if todo is None:
            raise NotFoundError(TODOS, input_dto.todo_id)

        if input_dto.name is not UNSET:
            todo.name = require_text(input_dto.name, 'name')
        if input_dto.description is not UNSET:
            todo.description = (input_dto.description or "").strip()
        if input_dto.priority is not UNSET:
            todo.priority = parse_priority(input_dto.priority)
        if input_dto.due_date is not UNSET:
            todo.due_date = parse_due_date(input_dto.due_date)
        if input_dto.estimated_time is not UNSET:
            todo.estimated_time = parse_estimated_time(input_dto.estimated_time)

        return self.todo_repository.save(todo)


class ToggleTodoCompletionUseCase:
    """
    Incomplete -> Complete ustawia completed_time, Complete -> Incomplete je czyści.
    Zmiana zadania i przeliczenie postępu celu idą w jednej jednostce pracy.
    """

    def __init__(self, todo_repository: ITodoRepository, progress_service: GoalProgressService,
                 unit_of_work: UnitOfWork = contextlib.nullcontext, clock: Callable[[], datetime] = timezone.now):
        self.todo_repository = todo_repository
        self.progress_service = progress_service
        self.unit_of_work = unit_of_work
        self.clock = clock

    def execute(self, todo_id: int) -> TodoResult:
        with self.unit_of_work():
            todo = self.todo_repository.get_by_id(todo_id)
            if todo is None:
                raise NotFoundError(TODOS, todo_id)

            todo.toggle(self.clock())
            todo = self.todo_repository.set_completion(todo.id, todo.completed, todo.completed_time)
            progress = self.progress_service.recalculate(todo.goal_id)

        logger.info("Todo %s completed=%s, goal %s progress=%s", todo.id, todo.completed, todo.goal_id, progress)
        return TodoResult(todo=todo, goal_progress=progress)


class DeleteTodoUseCase:
    def __init__(self, todo_repository: ITodoRepository, progress_service: GoalProgressService,
                 unit_of_work: UnitOfWork = contextlib.nullcontext):
        self.todo_repository = todo_repository
        self.progress_service = progress_service
        self.unit_of_work = unit_of_work

    def execute(self, todo_id: int) -> TodoResult:
        with self.unit_of_work():
            todo = self.todo_repository.get_by_id(todo_id)
            if todo is None:
                raise NotFoundError(TODOS, todo_id)

            self.todo_repository.delete(todo_id)
            # Postęp z zestawu PO usunięciu (0, gdy nic nie zostało)
            progress = self.progress_service.recalculate(todo.goal_id)

        logger.info("Todo %s deleted, goal %s progress=%s", todo_id, todo.goal_id, progress)
        return TodoResult(todo=todo, goal_progress=progress)


class ListTodosUseCase:
    def __init__(self, todo_repository: ITodoRepository):
        self.todo_repository = todo_repository

    def execute(self, goal_id: int) -> List[TodoEntity]:
        return self.todo_repository.list_for_goal(goal_id)
