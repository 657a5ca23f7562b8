# apps/core/adapters/memory_store.py
import copy
import itertools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from django.utils import timezone

from apps.core.errors import NotFoundError, StoreError
from apps.core.ports.store import (
    CATEGORIES, COLLECTIONS, GOALS, TODOS,
    ChangeAction, ChangeCallback, ChangeEvent, IRecordStore, Record, Unsubscribe,
    check_collection,
)

logger = logging.getLogger(__name__)

DEFAULTS = {
    CATEGORIES: {'user_id': None, 'name': ''},
    GOALS: {
        'user_id': None,
        'category_id': None,
        'name': '',
        'description': '',
        'due_date': None,
        'progress': 0,
        'is_completed': False,
    },
    TODOS: {
        'goal_id': None,
        'name': '',
        'description': '',
        'priority': None,
        'due_date': None,
        'estimated_time': None,
        'completed': False,
        'completed_time': None,
    },
}

# Klucze obce: kolekcja -> {relacja: (kolekcja docelowa, pole FK, wymagane?)}
FOREIGN_KEYS = {
    CATEGORIES: {},
    GOALS: {'category': (CATEGORIES, 'category_id', False)},
    TODOS: {'goal': (GOALS, 'goal_id', True)},
}

LOOKUPS = ('exact', 'iexact', 'lt', 'lte', 'gt', 'gte', 'isnull', 'in')


def _compare(op: str, value, expected) -> bool:
    if op == 'isnull':
        return (value is None) == bool(expected)
    if op == 'exact':
        return value == expected
    if op == 'iexact':
        return value is not None and str(value).lower() == str(expected).lower()
    if op == 'in':
        return value in expected
    # Porównania z NULL są zawsze fałszywe (jak w SQL)
    if value is None or expected is None:
        return False
    if op == 'lt':
        return value < expected
    if op == 'lte':
        return value <= expected
    if op == 'gt':
        return value > expected
    return value >= expected


class InMemoryRecordStore(IRecordStore):
    """
    Magazyn w pamięci z tą samą polityką referencyjną co modele Django:
    usunięcie celu kasuje jego zadania, usunięcie kategorii zeruje category_id.
    """

    def __init__(self, clock: Optional[Callable[[], Any]] = None):
        self.clock = clock or timezone.now
        self.tables: Dict[str, Dict[int, Record]] = {name: {} for name in COLLECTIONS}
        self._ids = {name: itertools.count(1) for name in COLLECTIONS}
        self._listeners: Dict[str, List[ChangeCallback]] = {name: [] for name in COLLECTIONS}
        # Zdarzenia z otwartego atomic() czekają na zatwierdzenie
        self._atomic_depth = 0
        self._pending: List[ChangeEvent] = []

    def count(self, collection: str) -> int:
        return len(self.tables[check_collection(collection)])

    # --- odczyt ---

    def _resolve(self, collection: str, record: Record, path: List[str]):
        """Przechodzi po relacjach, np. ['goal', 'user_id'] dla todos."""
        head = path[0]
        if len(path) == 1:
            if head in FOREIGN_KEYS[collection] and head not in record:
                head = FOREIGN_KEYS[collection][head][1]
            if head not in record:
                raise StoreError(f"Cannot resolve field '{head}' on {collection}")
            return record[head]
        if head not in FOREIGN_KEYS[collection]:
            raise StoreError(f"Cannot resolve relation '{head}' on {collection}")
        target, fk, _ = FOREIGN_KEYS[collection][head]
        related = self.tables[target].get(record[fk])
        if related is None:
            return None
        return self._resolve(target, related, path[1:])

    def _matches(self, collection: str, record: Record, filters: Mapping[str, Any]) -> bool:
        for key, expected in filters.items():
            parts = key.split('__')
            op = 'exact'
            if len(parts) > 1 and parts[-1] in LOOKUPS:
                op = parts.pop()
            if op == 'exact' and expected is None:
                op, expected = 'isnull', True
            if not _compare(op, self._resolve(collection, record, parts), expected):
                return False
        return True

    def _sorted(self, records: List[Record], ordering: Sequence[str]) -> List[Record]:
        # Sortowanie stabilne: od ostatniego klucza do pierwszego
        for key in reversed(ordering):
            reverse = key.startswith('-')
            field = key.lstrip('-')
            records.sort(key=lambda r: (r.get(field) is not None, r.get(field)), reverse=reverse)
        return records

    def _expand(self, collection: str, record: Record, expand: Sequence[str]) -> Record:
        result = dict(record)
        for name in expand:
            if collection == GOALS and name == 'todos':
                todos = [dict(t) for t in self.tables[TODOS].values() if t['goal_id'] == record['id']]
                result['todos'] = self._sorted(todos, ['created_at', 'id'])
            elif name in FOREIGN_KEYS[collection]:
                target, fk, _ = FOREIGN_KEYS[collection][name]
                related = self.tables[target].get(record[fk])
                result[name] = dict(related) if related is not None else None
            else:
                raise ValueError(f"Cannot expand '{name}' on {collection}")
        return result

    def select(self, collection: str, filters: Optional[Mapping[str, Any]] = None,
               ordering: Optional[Sequence[str]] = None, limit: Optional[int] = None,
               expand: Iterable[str] = ()) -> List[Record]:
        expand = tuple(expand)
        table = self.tables[check_collection(collection)]
        rows = [r for r in table.values() if self._matches(collection, r, filters or {})]
        rows = self._sorted(rows, ordering or ['id'])
        if limit is not None:
            rows = rows[:limit]
        return [self._expand(collection, r, expand) for r in rows]

    def get(self, collection: str, record_id, expand: Iterable[str] = ()) -> Optional[Record]:
        record = self.tables[check_collection(collection)].get(record_id)
        if record is None:
            return None
        return self._expand(collection, record, tuple(expand))

    # --- zapis ---

    def _check_foreign_keys(self, collection: str, record: Record):
        for target, fk, required in FOREIGN_KEYS[collection].values():
            value = record.get(fk)
            if value is None:
                if required:
                    raise StoreError(f"{collection}.{fk} may not be null")
                continue
            if value not in self.tables[target]:
                raise StoreError(f"{collection}.{fk}={value} violates foreign key constraint")

    def _notify(self, collection: str, action: str, record_id):
        event = ChangeEvent(collection, action, record_id)
        if self._atomic_depth:
            self._pending.append(event)
            return
        self._deliver(event)

    def _deliver(self, event: ChangeEvent):
        collection = event.collection
        for callback in list(self._listeners[collection]):
            try:
                callback(event)
            except Exception:
                logger.exception("Change subscriber for %s failed", collection)

    def insert(self, collection: str, values: Mapping[str, Any]) -> Record:
        check_collection(collection)
        unknown = set(values) - set(DEFAULTS[collection]) - {'created_at'}
        if unknown:
            raise StoreError(f"Unknown fields for {collection}: {sorted(unknown)}")
        record = dict(DEFAULTS[collection])
        record.update(values)
        self._check_foreign_keys(collection, record)
        record['id'] = next(self._ids[collection])
        record.setdefault('created_at', self.clock())
        self.tables[collection][record['id']] = record
        self._notify(collection, ChangeAction.INSERT, record['id'])
        return dict(record)

    def update(self, collection: str, record_id, values: Mapping[str, Any]) -> Record:
        table = self.tables[check_collection(collection)]
        if record_id not in table:
            raise NotFoundError(collection, record_id)
        unknown = set(values) - set(DEFAULTS[collection])
        if unknown:
            raise StoreError(f"Unknown fields for {collection}: {sorted(unknown)}")
        record = dict(table[record_id])
        record.update(values)
        self._check_foreign_keys(collection, record)
        table[record_id] = record
        self._notify(collection, ChangeAction.UPDATE, record_id)
        return dict(record)

    def delete(self, collection: str, record_id) -> None:
        table = self.tables[check_collection(collection)]
        if record_id not in table:
            raise NotFoundError(collection, record_id)
        del table[record_id]

        if collection == GOALS:
            # CASCADE
            orphans = [tid for tid, t in self.tables[TODOS].items() if t['goal_id'] == record_id]
            for todo_id in orphans:
                del self.tables[TODOS][todo_id]
                self._notify(TODOS, ChangeAction.DELETE, todo_id)
        elif collection == CATEGORIES:
            # SET_NULL
            for goal in self.tables[GOALS].values():
                if goal['category_id'] == record_id:
                    goal['category_id'] = None

        self._notify(collection, ChangeAction.DELETE, record_id)

    @contextmanager
    def atomic(self):
        """Wszystkie zmiany albo żadna; powiadomienia dopiero po zatwierdzeniu zewnętrznego bloku."""
        snapshot = copy.deepcopy(self.tables)
        pending = len(self._pending)
        self._atomic_depth += 1
        try:
            yield
        except Exception:
            self.tables = snapshot
            del self._pending[pending:]
            raise
        finally:
            self._atomic_depth -= 1

        if not self._atomic_depth:
            events, self._pending = self._pending, []
            for event in events:
                self._deliver(event)

    def subscribe(self, collection: str, callback: ChangeCallback) -> Unsubscribe:
        listeners = self._listeners[check_collection(collection)]
        listeners.append(callback)

        def unsubscribe():
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe
