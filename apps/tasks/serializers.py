# apps/tasks/serializers.py
from apps.tasks.domain.entities import TodoEntity


def iso_or_none(value):
    return value.isoformat() if value else None


def todo_to_dict(todo: TodoEntity) -> dict:
    return {
        'id': todo.id,
        'goal_id': todo.goal_id,
        'goal_name': todo.goal_name,
        'name': todo.name,
        'description': todo.description,
        'priority': todo.priority.value if todo.priority else None,
        'due_date': iso_or_none(todo.due_date),
        'estimated_time': todo.estimated_time,
        'completed': todo.completed,
        'completed_time': iso_or_none(todo.completed_time),
        'created_at': iso_or_none(todo.created_at),
    }
