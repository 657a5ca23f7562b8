# apps/goals/application/use_cases.py
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, List, Optional

from django.utils import timezone

from apps.core.errors import AuthError, NotFoundError, ValidationError
from apps.core.ports.identity import IIdentityProvider, UserRef
from apps.core.ports.store import CATEGORIES, GOALS
from apps.goals.domain.entities import CategoryEntity, GoalEntity
from apps.goals.ports.repositories import ICategoryRepository, IGoalRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def require_text(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field.capitalize()} is required", field=field)
    return value


def as_datetime(value, field: str) -> datetime:
    """Data z formularza -> świadomy strefy datetime (data bez godziny = początek dnia)."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    else:
        raise ValidationError(f"{field.capitalize()} must be a date", field=field)
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return dt


def require_user(identity: IIdentityProvider) -> UserRef:
    user = identity.get_current_user()
    if user is None:
        raise AuthError("You must be logged in")
    return user


@dataclass
class CreateGoalInput:
    name: str
    description: str
    due_date: datetime
    category_id: Optional[int] = None


@dataclass
class UpdateGoalInput:
    goal_id: int
    name: str
    description: str
    due_date: datetime
    category_id: Optional[int] = None


class CreateGoalUseCase:
    def __init__(self, repository: IGoalRepository, identity: IIdentityProvider, clock: Clock = timezone.now):
        self.repository = repository
        self.identity = identity
        self.clock = clock

    def execute(self, input_dto: CreateGoalInput) -> GoalEntity:
        name = require_text(input_dto.name, 'name')
        description = require_text(input_dto.description, 'description')
        if input_dto.due_date is None:
            raise ValidationError("Due date is required", field='due_date')
        due_date = as_datetime(input_dto.due_date, 'due_date')
        if due_date <= self.clock():
            raise ValidationError("Due date must be in the future", field='due_date')

        user = require_user(self.identity)

        goal = GoalEntity(
            id=None,
            user_id=user.id,
            name=name,
            description=description,
            due_date=due_date,
            category_id=input_dto.category_id,
            progress=0,
            is_completed=False,
        )
        goal = self.repository.save(goal)
        logger.info("Goal %s created for user %s", goal.id, user.id)
        return goal


class UpdateGoalUseCase:
    """Edycja celu. Termin może być dowolny (także przeszły)."""

    def __init__(self, repository: IGoalRepository):
        self.repository = repository

    def execute(self, input_dto: UpdateGoalInput) -> GoalEntity:
        name = require_text(input_dto.name, 'name')
        description = require_text(input_dto.description, 'description')
        if input_dto.due_date is None:
            raise ValidationError("Due date is required", field='due_date')
        due_date = as_datetime(input_dto.due_date, 'due_date')

        goal = self.repository.get_by_id(input_dto.goal_id)
        if goal is None:
            raise NotFoundError(GOALS, input_dto.goal_id)

        goal.name = name
        goal.description = description
        goal.due_date = due_date
        goal.category_id = input_dto.category_id
        return self.repository.save(goal)


class ToggleGoalCompletionUseCase:
    """Active <-> Completed. Ręczne nadpisanie: nie zmienia postępu ani zadań."""

    def __init__(self, repository: IGoalRepository):
        self.repository = repository

    def execute(self, goal_id: int) -> GoalEntity:
        goal = self.repository.get_by_id(goal_id)
        if goal is None:
            raise NotFoundError(GOALS, goal_id)
        return self.repository.set_completed(goal_id, not goal.is_completed)


class DeleteGoalUseCase:
    def __init__(self, repository: IGoalRepository):
        self.repository = repository

    def execute(self, goal_id: int) -> None:
        self.repository.delete(goal_id)
        logger.info("Goal %s deleted", goal_id)


class ListGoalsUseCase:
    def __init__(self, repository: IGoalRepository, identity: IIdentityProvider):
        self.repository = repository
        self.identity = identity

    def execute(self) -> List[GoalEntity]:
        user = require_user(self.identity)
        return self.repository.list_for_user(user.id)


class CreateCategoryUseCase:
    """
    Tworzy kategorię i zwraca ją (np. do zaznaczenia w edytowanym celu).
    Nazwa jest unikalna per użytkownik: dla istniejącej nazwy zwracamy
    istniejącą kategorię zamiast tworzyć duplikat.
    """

    def __init__(self, repository: ICategoryRepository, identity: IIdentityProvider):
        self.repository = repository
        self.identity = identity

    def execute(self, name: str) -> CategoryEntity:
        name = require_text(name, 'name')
        user = require_user(self.identity)

        existing = self.repository.find_by_name(user.id, name)
        if existing is not None:
            return existing

        category = self.repository.create(user.id, name)
        logger.info("Category %s '%s' created for user %s", category.id, name, user.id)
        return category


class DeleteCategoryUseCase:
    """Usuwa tylko kategorię; cele zostają (magazyn zeruje category_id)."""

    def __init__(self, repository: ICategoryRepository):
        self.repository = repository

    def execute(self, category_id: int) -> None:
        if self.repository.get_by_id(category_id) is None:
            raise NotFoundError(CATEGORIES, category_id)
        self.repository.delete(category_id)


class ListCategoriesUseCase:
    def __init__(self, repository: ICategoryRepository, identity: IIdentityProvider):
        self.repository = repository
        self.identity = identity

    def execute(self) -> List[CategoryEntity]:
        user = require_user(self.identity)
        return self.repository.list_for_user(user.id)
