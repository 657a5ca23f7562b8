# apps/goals/application/workflow.py
from datetime import datetime
from typing import Callable, List, Optional

from django.utils import timezone

from apps.core.ports.identity import IIdentityProvider
from apps.core.ports.store import IRecordStore
from apps.goals.adapters.store_repositories import StoreCategoryRepository, StoreGoalRepository
from apps.goals.application.use_cases import (
    CreateCategoryUseCase, CreateGoalInput, CreateGoalUseCase, DeleteCategoryUseCase,
    DeleteGoalUseCase, ListCategoriesUseCase, ListGoalsUseCase, ToggleGoalCompletionUseCase,
    UpdateGoalInput, UpdateGoalUseCase,
)
from apps.goals.domain.entities import CategoryEntity, GoalEntity
from apps.goals.domain.services import GoalProgressService
from apps.tasks.adapters.store_repositories import StoreTodoRepository
from apps.tasks.application.use_cases import (
    CreateTodoInput, CreateTodoUseCase, DeleteTodoUseCase, ListTodosUseCase,
    ToggleTodoCompletionUseCase, TodoResult, UpdateTodoInput, UpdateTodoUseCase,
)
from apps.tasks.domain.entities import TodoEntity


class GoalWorkflow:
    """
    Złożenie przypadków użycia nad jednym magazynem (ręczne wstrzykiwanie zależności).
    Widoki i sesja korzystają tylko z tej klasy.
    """

    def __init__(self, store: IRecordStore, identity: IIdentityProvider,
                 clock: Callable[[], datetime] = timezone.now):
        self.store = store
        self.identity = identity
        self.clock = clock

        self.goals = StoreGoalRepository(store)
        self.todos = StoreTodoRepository(store)
        self.categories = StoreCategoryRepository(store)
        self.progress = GoalProgressService(self.goals, self.todos)

    # --- cele ---

    def create_goal(self, name: str, description: str, due_date: datetime,
                    category_id: Optional[int] = None) -> GoalEntity:
        use_case = CreateGoalUseCase(self.goals, self.identity, clock=self.clock)
        return use_case.execute(CreateGoalInput(name, description, due_date, category_id))

    def update_goal(self, goal_id: int, name: str, description: str, due_date: datetime,
                    category_id: Optional[int] = None) -> GoalEntity:
        use_case = UpdateGoalUseCase(self.goals)
        return use_case.execute(UpdateGoalInput(goal_id, name, description, due_date, category_id))

    def toggle_goal_completion(self, goal_id: int) -> GoalEntity:
        return ToggleGoalCompletionUseCase(self.goals).execute(goal_id)

    def delete_goal(self, goal_id: int) -> None:
        DeleteGoalUseCase(self.goals).execute(goal_id)

    def list_goals(self) -> List[GoalEntity]:
        return ListGoalsUseCase(self.goals, self.identity).execute()

    def get_goal(self, goal_id: int) -> Optional[GoalEntity]:
        return self.goals.get_by_id(goal_id, with_todos=True)

    # --- zadania ---

    def create_todo(self, goal_id: int, name: str, priority=None, due_date=None,
                    estimated_time=None, description: str = "") -> TodoResult:
        use_case = CreateTodoUseCase(self.todos, self.goals, self.progress, unit_of_work=self.store.atomic)
        return use_case.execute(CreateTodoInput(
            goal_id=goal_id,
            name=name,
            description=description,
            priority=priority,
            due_date=due_date,
            estimated_time=estimated_time,
        ))

    def update_todo(self, todo_id: int, **changes) -> TodoEntity:
        return UpdateTodoUseCase(self.todos).execute(UpdateTodoInput(todo_id=todo_id, **changes))

    def toggle_todo_completion(self, todo_id: int) -> TodoResult:
        use_case = ToggleTodoCompletionUseCase(
            self.todos, self.progress, unit_of_work=self.store.atomic, clock=self.clock
        )
        return use_case.execute(todo_id)

    def delete_todo(self, todo_id: int) -> TodoResult:
        use_case = DeleteTodoUseCase(self.todos, self.progress, unit_of_work=self.store.atomic)
        return use_case.execute(todo_id)

    def list_todos(self, goal_id: int) -> List[TodoEntity]:
        return ListTodosUseCase(self.todos).execute(goal_id)

    # --- kategorie ---

    def create_category(self, name: str) -> CategoryEntity:
        return CreateCategoryUseCase(self.categories, self.identity).execute(name)

    def delete_category(self, category_id: int) -> None:
        DeleteCategoryUseCase(self.categories).execute(category_id)

    def list_categories(self) -> List[CategoryEntity]:
        return ListCategoriesUseCase(self.categories, self.identity).execute()
