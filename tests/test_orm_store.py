"""Tests for the Django ORM record store and the workflow running on top of it."""

from datetime import timedelta

import pytest

from apps.core.adapters.identity import StaticIdentityProvider
from apps.core.adapters.orm_store import DjangoRecordStore
from apps.core.errors import NotFoundError, StoreError
from apps.core.ports.store import CATEGORIES, GOALS, TODOS, ChangeAction
from apps.goals.application.workflow import GoalWorkflow
from apps.goals.models import Category, Goal
from apps.tasks.models import Todo
from apps.timeline.domain.services import TimelineService
from tests.conftest import NOW

pytestmark = pytest.mark.django_db


@pytest.fixture
def orm_store():
    return DjangoRecordStore()


@pytest.fixture
def orm_workflow(orm_store, user, clock):
    return GoalWorkflow(orm_store, StaticIdentityProvider(user.id), clock=clock)


@pytest.fixture
def orm_goal(orm_workflow):
    return orm_workflow.create_goal("Learn Spanish", "Reach B2", NOW + timedelta(days=30))


@pytest.fixture
def goal_events(orm_store):
    """Change events for goals, unsubscribed after the test."""
    received = []
    unsubscribe = orm_store.subscribe(GOALS, received.append)
    yield received
    unsubscribe()


class TestDjangoRecordStore:
    def test_insert_returns_record_with_id_and_timestamp(self, orm_store, user):
        record = orm_store.insert(CATEGORIES, {'user_id': user.id, 'name': 'Work'})

        assert record['id'] == Category.objects.get().pk
        assert record['user_id'] == user.id
        assert record['created_at'] is not None

    def test_select_with_relation_filter_and_expand(self, orm_store, orm_workflow, orm_goal, other_user):
        orm_workflow.create_todo(orm_goal.id, "Textbook")
        foreign = Goal.objects.create(user=other_user, name="x", description="y", due_date=NOW)
        Todo.objects.create(goal=foreign, name="foreign")

        rows = orm_store.select(TODOS, filters={'goal__user_id': orm_goal.user_id}, expand=('goal',))

        assert [r['name'] for r in rows] == ["Textbook"]
        assert rows[0]['goal']['name'] == "Learn Spanish"

    def test_get_expands_todos_in_creation_order(self, orm_store, orm_workflow, orm_goal):
        for name in ("a", "b"):
            orm_workflow.create_todo(orm_goal.id, name)

        record = orm_store.get(GOALS, orm_goal.id, expand=('todos', 'category'))

        assert [t['name'] for t in record['todos']] == ["a", "b"]
        assert record['category'] is None

    def test_get_missing_returns_none(self, orm_store):
        assert orm_store.get(GOALS, 999) is None

    def test_update_missing_raises_not_found(self, orm_store):
        with pytest.raises(NotFoundError):
            orm_store.update(GOALS, 999, {'progress': 10})

    def test_delete_missing_raises_not_found(self, orm_store):
        with pytest.raises(NotFoundError):
            orm_store.delete(TODOS, 999)

    def test_unknown_filter_field_raises_store_error(self, orm_store):
        with pytest.raises(StoreError):
            orm_store.select(GOALS, filters={'colour': 'red'})

    def test_atomic_rolls_back_on_error(self, orm_store, orm_goal):
        with pytest.raises(StoreError):
            with orm_store.atomic():
                orm_store.update(GOALS, orm_goal.id, {'progress': 70})
                raise StoreError("second write failed")

        assert Goal.objects.get(pk=orm_goal.id).progress == 0

    def test_subscribe_reports_changes_until_unsubscribed(self, orm_store, user, django_capture_on_commit_callbacks):
        events = []
        unsubscribe = orm_store.subscribe(CATEGORIES, events.append)

        with django_capture_on_commit_callbacks(execute=True):
            record = orm_store.insert(CATEGORIES, {'user_id': user.id, 'name': 'Work'})
            orm_store.update(CATEGORIES, record['id'], {'name': 'Office'})
            orm_store.delete(CATEGORIES, record['id'])
        unsubscribe()
        with django_capture_on_commit_callbacks(execute=True):
            orm_store.insert(CATEGORIES, {'user_id': user.id, 'name': 'Home'})

        assert [e.action for e in events] == [ChangeAction.INSERT, ChangeAction.UPDATE, ChangeAction.DELETE]
        assert {e.record_id for e in events} == {record['id']}

    def test_rolled_back_changes_are_not_reported(self, orm_store, orm_goal, goal_events,
                                                  django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(StoreError):
                with orm_store.atomic():
                    orm_store.update(GOALS, orm_goal.id, {'progress': 70})
                    raise StoreError("second write failed")

        assert callbacks == []
        assert goal_events == []

    def test_changes_are_reported_after_commit(self, orm_store, orm_goal, goal_events,
                                               django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            with orm_store.atomic():
                orm_store.update(GOALS, orm_goal.id, {'progress': 70})
                assert goal_events == []

        assert [(e.action, e.record_id) for e in goal_events] == [(ChangeAction.UPDATE, orm_goal.id)]


class TestReferentialPolicy:
    def test_deleting_goal_cascades_to_todos(self, orm_workflow, orm_goal):
        orm_workflow.create_todo(orm_goal.id, "Textbook")

        orm_workflow.delete_goal(orm_goal.id)

        assert Goal.objects.count() == 0
        assert Todo.objects.count() == 0

    def test_deleting_category_keeps_goals_and_todos(self, orm_workflow):
        category = orm_workflow.create_category("Languages")
        goal = orm_workflow.create_goal("Learn Spanish", "B2", NOW + timedelta(days=5), category.id)
        orm_workflow.create_todo(goal.id, "Textbook")

        orm_workflow.delete_category(category.id)

        assert Category.objects.count() == 0
        assert Goal.objects.count() == 1
        assert Todo.objects.count() == 1
        assert Goal.objects.get().category_id is None


class TestWorkflowOnOrm:
    def test_toggle_persists_timestamp_and_progress(self, orm_workflow, orm_goal, clock):
        first = orm_workflow.create_todo(orm_goal.id, "a").todo
        orm_workflow.create_todo(orm_goal.id, "b")

        result = orm_workflow.toggle_todo_completion(first.id)

        todo = Todo.objects.get(pk=first.id)
        assert todo.completed is True
        assert todo.completed_time == clock()
        assert result.goal_progress == 50
        assert Goal.objects.get(pk=orm_goal.id).progress == 50

    def test_category_names_are_unique_per_user(self, orm_workflow, orm_store, other_user):
        first = orm_workflow.create_category("Work")
        foreign = GoalWorkflow(orm_store, StaticIdentityProvider(other_user.id)).create_category("Work")

        assert orm_workflow.create_category("WORK").id == first.id
        assert foreign.id != first.id

    def test_timeline_reads_completed_todos(self, orm_workflow, orm_goal, clock):
        todo = orm_workflow.create_todo(orm_goal.id, "a").todo
        orm_workflow.toggle_todo_completion(todo.id)

        page = TimelineService(orm_workflow.todos, user_id=orm_goal.user_id).fetch_weekly_completed(clock())

        assert [t.id for t in page.items] == [todo.id]
        assert page.items[0].goal_name == "Learn Spanish"
