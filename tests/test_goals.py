"""Tests for goal and category workflow operations."""

from datetime import date, timedelta

import pytest

from apps.core.errors import AuthError, NotFoundError, ValidationError
from apps.core.ports.store import CATEGORIES, GOALS, TODOS
from apps.goals.domain.entities import CategoryEntity, GoalEntity
from apps.goals.domain.services import UNCATEGORIZED, first_active_goal, group_goals_by_category, sort_todos
from apps.tasks.domain.entities import Priority, TodoEntity
from tests.conftest import NOW


class TestCreateGoal:
    def test_creates_active_goal_with_zero_progress(self, workflow, store):
        goal = workflow.create_goal("  Run a marathon ", "Sub 4h", NOW + timedelta(days=90))

        assert goal.id is not None
        assert goal.name == "Run a marathon"
        assert goal.progress == 0
        assert goal.is_completed is False
        assert store.get(GOALS, goal.id)['user_id'] == 1

    def test_past_due_date_fails_without_store_mutation(self, workflow, store):
        with pytest.raises(ValidationError) as exc_info:
            workflow.create_goal("Run", "Sub 4h", NOW - timedelta(days=1))

        assert exc_info.value.field == 'due_date'
        assert store.count(GOALS) == 0

    def test_due_date_equal_to_now_is_not_in_future(self, workflow):
        with pytest.raises(ValidationError):
            workflow.create_goal("Run", "Sub 4h", NOW)

    @pytest.mark.parametrize("name,description,field", [("", "desc", 'name'), ("Run", "   ", 'description')])
    def test_empty_fields(self, workflow, name, description, field):
        with pytest.raises(ValidationError) as exc_info:
            workflow.create_goal(name, description, NOW + timedelta(days=1))
        assert exc_info.value.field == field

    def test_missing_due_date(self, workflow):
        with pytest.raises(ValidationError):
            workflow.create_goal("Run", "Sub 4h", None)

    def test_plain_date_is_accepted(self, workflow):
        goal = workflow.create_goal("Run", "Sub 4h", date(2024, 2, 1))
        assert goal.due_date.date() == date(2024, 2, 1)

    def test_requires_user(self, anonymous_workflow, store):
        with pytest.raises(AuthError):
            anonymous_workflow.create_goal("Run", "Sub 4h", NOW + timedelta(days=1))
        assert store.count(GOALS) == 0

    def test_validation_comes_before_auth(self, anonymous_workflow):
        with pytest.raises(ValidationError):
            anonymous_workflow.create_goal("", "Sub 4h", NOW + timedelta(days=1))


class TestUpdateGoal:
    def test_updates_fields_and_allows_past_due_date(self, workflow, goal):
        updated = workflow.update_goal(goal.id, "Learn Italian", "A2", NOW - timedelta(days=2))

        assert updated.name == "Learn Italian"
        assert updated.due_date == NOW - timedelta(days=2)

    def test_missing_goal(self, workflow):
        with pytest.raises(NotFoundError):
            workflow.update_goal(99, "x", "y", NOW)


class TestToggleGoal:
    def test_toggle_does_not_touch_progress_or_todos(self, workflow, goal_with_todos):
        goal, first, second = goal_with_todos

        completed = workflow.toggle_goal_completion(goal.id)
        assert completed.is_completed is True
        assert completed.progress == 50
        assert [t.completed for t in workflow.list_todos(goal.id)] == [True, False]

        assert workflow.toggle_goal_completion(goal.id).is_completed is False

    def test_missing_goal(self, workflow):
        with pytest.raises(NotFoundError):
            workflow.toggle_goal_completion(5)


class TestDeleteGoal:
    def test_deletes_todos_but_not_categories(self, workflow, store):
        category = workflow.create_category("Languages")
        goal = workflow.create_goal("Learn Spanish", "B2", NOW + timedelta(days=1), category.id)
        workflow.create_todo(goal.id, "Textbook")

        workflow.delete_goal(goal.id)

        assert store.count(GOALS) == 0
        assert store.count(TODOS) == 0
        assert store.count(CATEGORIES) == 1


class TestListGoals:
    def test_lists_only_own_goals_newest_first(self, workflow, store, clock):
        first = workflow.create_goal("First", "d", NOW + timedelta(days=1))
        clock.advance(minutes=5)
        second = workflow.create_goal("Second", "d", NOW + timedelta(days=1))
        store.insert(GOALS, {'user_id': 2, 'name': 'Foreign'})

        goals = workflow.list_goals()

        assert [g.id for g in goals] == [second.id, first.id]

    def test_goals_come_with_todos_and_category(self, workflow):
        category = workflow.create_category("Sport")
        goal = workflow.create_goal("Run", "d", NOW + timedelta(days=1), category.id)
        workflow.create_todo(goal.id, "Buy shoes")

        [listed] = workflow.list_goals()

        assert listed.category_name == "Sport"
        assert [t.name for t in listed.todos] == ["Buy shoes"]

    def test_requires_user(self, anonymous_workflow):
        with pytest.raises(AuthError):
            anonymous_workflow.list_goals()


class TestCategories:
    def test_create_returns_category(self, workflow):
        category = workflow.create_category(" Work ")
        assert category.id is not None
        assert category.name == "Work"

    def test_create_with_existing_name_returns_existing(self, workflow, store):
        first = workflow.create_category("Work")
        second = workflow.create_category("work")

        assert second.id == first.id
        assert store.count(CATEGORIES) == 1

    def test_empty_name(self, workflow):
        with pytest.raises(ValidationError):
            workflow.create_category("   ")

    def test_requires_user(self, anonymous_workflow):
        with pytest.raises(AuthError):
            anonymous_workflow.create_category("Work")

    def test_delete_keeps_goals_and_todos(self, workflow, store):
        category = workflow.create_category("Work")
        goal = workflow.create_goal("Ship it", "v1", NOW + timedelta(days=3), category.id)
        workflow.create_todo(goal.id, "Write tests")

        workflow.delete_category(category.id)

        assert store.count(CATEGORIES) == 0
        assert store.count(GOALS) == 1
        assert store.count(TODOS) == 1
        assert workflow.get_goal(goal.id).category_id is None

    def test_delete_missing(self, workflow):
        with pytest.raises(NotFoundError):
            workflow.delete_category(3)

    def test_list_sorted_by_name(self, workflow):
        workflow.create_category("Work")
        workflow.create_category("Home")
        assert [c.name for c in workflow.list_categories()] == ["Home", "Work"]


def make_goal(goal_id, category=None, is_completed=False):
    return GoalEntity(
        id=goal_id,
        user_id=1,
        name=f"goal {goal_id}",
        is_completed=is_completed,
        category=CategoryEntity(id=1, user_id=1, name=category) if category else None,
    )


class TestGrouping:
    def test_groups_by_category_name(self):
        goals = [make_goal(1, "Work"), make_goal(2), make_goal(3, "Work")]

        groups = group_goals_by_category(goals)

        assert list(groups) == ["Work", UNCATEGORIZED]
        assert [g.id for g in groups["Work"]] == [1, 3]

    def test_hides_completed_by_default(self):
        goals = [make_goal(1, "Work", is_completed=True), make_goal(2)]

        assert list(group_goals_by_category(goals)) == [UNCATEGORIZED]
        assert list(group_goals_by_category(goals, show_completed=True)) == ["Work", UNCATEGORIZED]

    def test_first_active_goal(self):
        goals = [make_goal(1, is_completed=True), make_goal(2), make_goal(3)]
        assert first_active_goal(goals).id == 2
        assert first_active_goal([make_goal(1, is_completed=True)]) is None


class TestSortTodos:
    @pytest.fixture
    def todos(self):
        return [
            TodoEntity(id=1, goal_id=1, name="a", priority=Priority.LOW, due_date=NOW + timedelta(days=3)),
            TodoEntity(id=2, goal_id=1, name="b", priority=None, due_date=None),
            TodoEntity(id=3, goal_id=1, name="c", priority=Priority.HIGH, due_date=NOW + timedelta(days=1)),
            TodoEntity(id=4, goal_id=1, name="d", priority=Priority.MEDIUM, due_date=NOW + timedelta(days=2)),
        ]

    def test_by_priority(self, todos):
        assert [t.id for t in sort_todos(todos, "priority")] == [3, 4, 1, 2]

    def test_by_due_date_puts_missing_last(self, todos):
        assert [t.id for t in sort_todos(todos, "due_date")] == [3, 4, 1, 2]

    def test_none_keeps_order(self, todos):
        assert [t.id for t in sort_todos(todos)] == [1, 2, 3, 4]

    def test_unknown_option(self, todos):
        with pytest.raises(ValueError):
            sort_todos(todos, "colour")
