# apps/tasks/ports/repositories.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from apps.tasks.domain.entities import TodoEntity


class ITodoRepository(ABC):
    @abstractmethod
    def get_by_id(self, todo_id: int) -> Optional[TodoEntity]:
        pass

    @abstractmethod
    def list_for_goal(self, goal_id: int) -> List[TodoEntity]:
        """Zadania celu w kolejności utworzenia."""
        pass

    @abstractmethod
    def save(self, todo: TodoEntity) -> TodoEntity:
        """Zapisuje (tworzy lub aktualizuje) zadanie i zwraca encję z ID."""
        pass

    @abstractmethod
    def set_completion(self, todo_id: int, completed: bool, completed_time: Optional[datetime]) -> TodoEntity:
        pass

    @abstractmethod
    def delete(self, todo_id: int) -> None:
        pass

    @abstractmethod
    def list_completed(self, user_id: Optional[int] = None, before: Optional[datetime] = None,
                       since: Optional[datetime] = None, until: Optional[datetime] = None,
                       limit: Optional[int] = None) -> List[TodoEntity]:
        """
        Ukończone zadania (completed_time ustawione), od najnowszych.
        before - ściśle starsze niż kursor; since/until - okno włącznie.
        """
        pass
