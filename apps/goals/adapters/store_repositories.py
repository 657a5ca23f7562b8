# apps/goals/adapters/store_repositories.py
from typing import List, Optional

from apps.core.ports.store import CATEGORIES, GOALS, IRecordStore, Record
from apps.goals.domain.entities import CategoryEntity, GoalEntity
from apps.goals.ports.repositories import ICategoryRepository, IGoalRepository
from apps.tasks.adapters.store_repositories import StoreTodoRepository


class StoreCategoryRepository(ICategoryRepository):
    def __init__(self, store: IRecordStore):
        self.store = store

    def to_entity(self, record: Record) -> CategoryEntity:
        return CategoryEntity(
            id=record['id'],
            user_id=record['user_id'],
            name=record['name'],
            created_at=record.get('created_at'),
        )

    def get_by_id(self, category_id: int) -> Optional[CategoryEntity]:
        record = self.store.get(CATEGORIES, category_id)
        return self.to_entity(record) if record else None

    def list_for_user(self, user_id: int) -> List[CategoryEntity]:
        records = self.store.select(CATEGORIES, filters={'user_id': user_id}, ordering=['name', 'id'])
        return [self.to_entity(r) for r in records]

    def find_by_name(self, user_id: int, name: str) -> Optional[CategoryEntity]:
        records = self.store.select(
            CATEGORIES,
            filters={'user_id': user_id, 'name__iexact': name},
            ordering=['id'],
            limit=1,
        )
        return self.to_entity(records[0]) if records else None

    def create(self, user_id: int, name: str) -> CategoryEntity:
        record = self.store.insert(CATEGORIES, {'user_id': user_id, 'name': name})
        return self.to_entity(record)

    def delete(self, category_id: int) -> None:
        self.store.delete(CATEGORIES, category_id)


class StoreGoalRepository(IGoalRepository):
    def __init__(self, store: IRecordStore):
        self.store = store
        self._todos = StoreTodoRepository(store)
        self._categories = StoreCategoryRepository(store)

    def to_entity(self, record: Record) -> GoalEntity:
        """Rekord -> encja; rozwinięte relacje (todos, category) jeśli są w rekordzie."""
        category = record.get('category')
        return GoalEntity(
            id=record['id'],
            user_id=record['user_id'],
            name=record['name'],
            description=record.get('description') or "",
            due_date=record.get('due_date'),
            category_id=record.get('category_id'),
            progress=record.get('progress') or 0,
            is_completed=record.get('is_completed', False),
            created_at=record.get('created_at'),
            todos=[self._todos.to_entity(t) for t in record.get('todos') or []],
            category=self._categories.to_entity(category) if category else None,
        )

    def get_by_id(self, goal_id: int, with_todos: bool = False) -> Optional[GoalEntity]:
        expand = ('todos', 'category') if with_todos else ()
        record = self.store.get(GOALS, goal_id, expand=expand)
        return self.to_entity(record) if record else None

    def list_for_user(self, user_id: int) -> List[GoalEntity]:
        records = self.store.select(
            GOALS,
            filters={'user_id': user_id},
            ordering=['-created_at', '-id'],
            expand=('todos', 'category'),
        )
        return [self.to_entity(r) for r in records]

    def list_ids(self) -> List[int]:
        return [r['id'] for r in self.store.select(GOALS, ordering=['id'])]

    def save(self, goal: GoalEntity) -> GoalEntity:
        data = {
            'name': goal.name,
            'description': goal.description,
            'due_date': goal.due_date,
            'category_id': goal.category_id,
        }

        if goal.id:
            record = self.store.update(GOALS, goal.id, data)
        else:
            record = self.store.insert(GOALS, dict(
                data,
                user_id=goal.user_id,
                progress=goal.progress,
                is_completed=goal.is_completed,
            ))
        return self.to_entity(record)

    def set_progress(self, goal_id: int, progress: int) -> GoalEntity:
        return self.to_entity(self.store.update(GOALS, goal_id, {'progress': progress}))

    def set_completed(self, goal_id: int, is_completed: bool) -> GoalEntity:
        return self.to_entity(self.store.update(GOALS, goal_id, {'is_completed': is_completed}))

    def delete(self, goal_id: int) -> None:
        self.store.delete(GOALS, goal_id)
