# apps/goals/domain/entities.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from apps.tasks.domain.entities import TodoEntity


@dataclass
class CategoryEntity:
    id: Optional[int]
    user_id: int
    name: str
    created_at: Optional[datetime] = None


@dataclass
class GoalEntity:
    id: Optional[int]
    user_id: int
    name: str
    description: str = ""
    due_date: Optional[datetime] = None
    category_id: Optional[int] = None  # słaba referencja do Category

    progress: int = 0  # 0-100, pochodna zadań (cache)
    is_completed: bool = False  # ręczne oznaczenie, niezależne od zadań

    created_at: Optional[datetime] = None

    # Relacje rozwinięte przy odczycie
    todos: List[TodoEntity] = field(default_factory=list)
    category: Optional[CategoryEntity] = None

    @property
    def category_name(self) -> Optional[str]:
        return self.category.name if self.category else None

    def find_todo(self, todo_id: int) -> Optional[TodoEntity]:
        return next((t for t in self.todos if t.id == todo_id), None)
