# apps/goals/serializers.py
from apps.goals.domain.entities import CategoryEntity, GoalEntity
from apps.tasks.serializers import iso_or_none, todo_to_dict


def category_to_dict(category: CategoryEntity) -> dict:
    return {
        'id': category.id,
        'name': category.name,
        'created_at': iso_or_none(category.created_at),
    }


def goal_to_dict(goal: GoalEntity, with_todos: bool = True) -> dict:
    data = {
        'id': goal.id,
        'name': goal.name,
        'description': goal.description,
        'due_date': iso_or_none(goal.due_date),
        'category_id': goal.category_id,
        'category': category_to_dict(goal.category) if goal.category else None,
        'progress': goal.progress,
        'is_completed': goal.is_completed,
        'created_at': iso_or_none(goal.created_at),
    }
    if with_todos:
        data['todos'] = [todo_to_dict(t) for t in goal.todos]
    return data
