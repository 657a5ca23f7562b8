# apps/goals/ports/repositories.py
from abc import ABC, abstractmethod
from typing import List, Optional

from apps.goals.domain.entities import CategoryEntity, GoalEntity


class ICategoryRepository(ABC):
    @abstractmethod
    def get_by_id(self, category_id: int) -> Optional[CategoryEntity]:
        pass

    @abstractmethod
    def list_for_user(self, user_id: int) -> List[CategoryEntity]:
        """Kategorie użytkownika posortowane po nazwie."""
        pass

    @abstractmethod
    def find_by_name(self, user_id: int, name: str) -> Optional[CategoryEntity]:
        """Szuka kategorii o tej nazwie (bez rozróżniania wielkości liter)."""
        pass

    @abstractmethod
    def create(self, user_id: int, name: str) -> CategoryEntity:
        pass

    @abstractmethod
    def delete(self, category_id: int) -> None:
        pass


class IGoalRepository(ABC):
    @abstractmethod
    def get_by_id(self, goal_id: int, with_todos: bool = False) -> Optional[GoalEntity]:
        pass

    @abstractmethod
    def list_for_user(self, user_id: int) -> List[GoalEntity]:
        """Cele użytkownika (najnowsze najpierw) razem z zadaniami i kategorią."""
        pass

    @abstractmethod
    def list_ids(self) -> List[int]:
        pass

    @abstractmethod
    def save(self, goal: GoalEntity) -> GoalEntity:
        """Zapisuje (tworzy lub aktualizuje) cel i zwraca encję z ID."""
        pass

    @abstractmethod
    def set_progress(self, goal_id: int, progress: int) -> GoalEntity:
        pass

    @abstractmethod
    def set_completed(self, goal_id: int, is_completed: bool) -> GoalEntity:
        pass

    @abstractmethod
    def delete(self, goal_id: int) -> None:
        """Usuwa cel; zadania celu usuwa magazyn (kaskada)."""
        pass
