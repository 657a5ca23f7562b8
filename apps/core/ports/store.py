# apps/core/ports/store.py
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

CATEGORIES = 'categories'
GOALS = 'goals'
TODOS = 'todos'

COLLECTIONS = (CATEGORIES, GOALS, TODOS)

Record = Dict[str, Any]


class ChangeAction:
    INSERT = 'insert'
    UPDATE = 'update'
    DELETE = 'delete'


@dataclass(frozen=True)
class ChangeEvent:
    collection: str
    action: str
    record_id: Any


ChangeCallback = Callable[[ChangeEvent], None]
Unsubscribe = Callable[[], None]


class IRecordStore(ABC):
    """
    Magazyn rekordów dla trzech kolekcji: categories, goals, todos.

    Filtry mają postać lookupów Django, np. {'completed': True,
    'completed_time__lt': cursor, 'goal__user_id': 1}.
    Sortowanie to lista nazw pól, '-' na początku oznacza malejąco.
    Rekordy to zwykłe słowniki; relacje rozwinięte przez `expand`
    trafiają pod nazwę relacji ('todos', 'category', 'goal').
    """

    @abstractmethod
    def select(self, collection: str, filters: Optional[Mapping[str, Any]] = None,
               ordering: Optional[Sequence[str]] = None, limit: Optional[int] = None,
               expand: Iterable[str] = ()) -> List[Record]:
        pass

    @abstractmethod
    def get(self, collection: str, record_id, expand: Iterable[str] = ()) -> Optional[Record]:
        pass

    @abstractmethod
    def insert(self, collection: str, values: Mapping[str, Any]) -> Record:
        """Tworzy rekord i zwraca go razem z wygenerowanym id i created_at."""
        pass

    @abstractmethod
    def update(self, collection: str, record_id, values: Mapping[str, Any]) -> Record:
        """Aktualizuje pola rekordu. Brak rekordu -> NotFoundError."""
        pass

    @abstractmethod
    def delete(self, collection: str, record_id) -> None:
        """
        Usuwa rekord. Polityka dla zależnych rekordów należy do magazynu:
        todos są usuwane kaskadowo z celem, goals.category_id jest zerowane.
        """
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Jednostka pracy: wszystkie zmiany w bloku albo żadna."""
        pass

    @abstractmethod
    def subscribe(self, collection: str, callback: ChangeCallback) -> Unsubscribe:
        """Rejestruje callback na insert/update/delete w kolekcji."""
        pass


def check_collection(collection: str) -> str:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}")
    return collection
