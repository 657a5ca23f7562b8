# apps/tasks/adapters/store_repositories.py
from datetime import datetime
from typing import List, Optional

from apps.core.ports.store import TODOS, IRecordStore, Record
from apps.tasks.domain.entities import Priority, TodoEntity
from apps.tasks.ports.repositories import ITodoRepository


class StoreTodoRepository(ITodoRepository):
    def __init__(self, store: IRecordStore):
        self.store = store

    @staticmethod
    def to_entity(record: Record) -> TodoEntity:
        """Rekord magazynu -> czysta encja."""
        goal = record.get('goal')
        return TodoEntity(
            id=record['id'],
            goal_id=record['goal_id'],
            name=record['name'],
            description=record.get('description') or "",
            priority=Priority(record['priority']) if record.get('priority') else None,
            due_date=record.get('due_date'),
            estimated_time=record.get('estimated_time'),
            completed=record['completed'],
            completed_time=record.get('completed_time'),
            created_at=record.get('created_at'),
            goal_name=goal['name'] if goal else None,
        )

    def get_by_id(self, todo_id: int) -> Optional[TodoEntity]:
        record = self.store.get(TODOS, todo_id)
        return self.to_entity(record) if record else None

    def list_for_goal(self, goal_id: int) -> List[TodoEntity]:
        records = self.store.select(TODOS, filters={'goal_id': goal_id}, ordering=['created_at', 'id'])
        return [self.to_entity(r) for r in records]

    def save(self, todo: TodoEntity) -> TodoEntity:
        data = {
            'name': todo.name,
            'description': todo.description,
            'priority': todo.priority.value if todo.priority else None,
            'due_date': todo.due_date,
            'estimated_time': todo.estimated_time,
            'completed': todo.completed,
            'completed_time': todo.completed_time,
        }

        if todo.id:
            record = self.store.update(TODOS, todo.id, data)
        else:
            record = self.store.insert(TODOS, dict(data, goal_id=todo.goal_id))
        return self.to_entity(record)

    def set_completion(self, todo_id: int, completed: bool, completed_time: Optional[datetime]) -> TodoEntity:
        record = self.store.update(TODOS, todo_id, {
            'completed': completed,
            'completed_time': completed_time,
        })
        return self.to_entity(record)

    def delete(self, todo_id: int) -> None:
        self.store.delete(TODOS, todo_id)

    def list_completed(self, user_id: Optional[int] = None, before: Optional[datetime] = None,
                       since: Optional[datetime] = None, until: Optional[datetime] = None,
                       limit: Optional[int] = None) -> List[TodoEntity]:
        filters = {'completed': True, 'completed_time__isnull': False}
        if user_id is not None:
            filters['goal__user_id'] = user_id
        if before is not None:
            filters['completed_time__lt'] = before
        if since is not None:
            filters['completed_time__gte'] = since
        if until is not None:
            filters['completed_time__lte'] = until

        records = self.store.select(
            TODOS,
            filters=filters,
            ordering=['-completed_time', '-id'],
            limit=limit,
            expand=('goal',),
        )
        return [self.to_entity(r) for r in records]
