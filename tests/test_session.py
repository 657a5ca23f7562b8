"""Tests for the per-user session: state refresh, notifications and optimistic updates."""

from datetime import date, timedelta

import pytest

from apps.core.application.session import GoalSession
from apps.core.errors import StoreError, ValidationError
from apps.core.ports.store import GOALS, TODOS
from tests.conftest import NOW, USER_ID


@pytest.fixture
def session(workflow):
    s = GoalSession(workflow)
    yield s
    s.stop()


@pytest.fixture
def started(session, goal_with_todos):
    session.start()
    return session


def count_refreshes(session, monkeypatch):
    calls = []
    original = session.refresh

    def refresh():
        calls.append(1)
        return original()

    monkeypatch.setattr(session, 'refresh', refresh)
    return calls


class TestRefresh:
    def test_start_loads_goals_and_selects_first_active(self, started, goal_with_todos):
        goal, _, _ = goal_with_todos

        assert started.state.loading is False
        assert [g.id for g in started.state.goals] == [goal.id]
        assert started.state.selected_goal.id == goal.id
        assert len(started.state.selected_goal.todos) == 2

    def test_external_change_triggers_refresh(self, started, store):
        store.insert(GOALS, {'user_id': USER_ID, 'name': 'Added elsewhere'})

        assert "Added elsewhere" in [g.name for g in started.state.goals]

    def test_stop_ends_subscription(self, started, store):
        started.stop()
        store.insert(GOALS, {'user_id': USER_ID, 'name': 'Added elsewhere'})

        assert len(started.state.goals) == 1

    def test_failed_refresh_adds_notification(self, started, workflow, monkeypatch):
        def broken():
            raise StoreError("timeout")

        monkeypatch.setattr(workflow, 'list_goals', broken)

        assert started.refresh() is False
        assert started.state.notifications[-1].title == "Error fetching goals"
        assert len(started.state.goals) == 1

    def test_anonymous_session_is_notified(self, anonymous_workflow):
        session = GoalSession(anonymous_workflow)

        assert session.start() is False
        assert session.state.notifications[0].message == "You must be logged in"
        session.stop()

    def test_dismiss_notification(self, session):
        note = session.state.notify("Error", "x")
        session.state.dismiss(note.id)
        assert session.state.notifications == []

    def test_notification_ids_are_per_session(self, workflow, anonymous_workflow):
        first, second = GoalSession(workflow), GoalSession(anonymous_workflow)

        assert [first.state.notify("Error", "a").id, first.state.notify("Error", "b").id] == [1, 2]
        assert second.state.notify("Error", "c").id == 1


class TestMutations:
    def test_own_mutation_refreshes_once(self, started, monkeypatch):
        calls = count_refreshes(started, monkeypatch)
        goal_id = started.state.goals[0].id

        started.create_todo(goal_id, "Flashcards")

        assert len(calls) == 1
        assert started.state.find_goal(goal_id).progress == 33

    def test_create_goal_appears_in_state(self, started):
        goal = started.create_goal("Swim", "1km", NOW + timedelta(days=10))

        assert started.state.goals[0].id == goal.id

    def test_validation_error_propagates(self, started, store):
        with pytest.raises(ValidationError):
            started.create_goal("Swim", "1km", NOW - timedelta(days=10))
        assert store.count(GOALS) == 1
        assert started.state.notifications == []

    def test_store_error_becomes_notification(self, started, workflow, monkeypatch):
        def broken(name):
            raise StoreError("constraint violated")

        monkeypatch.setattr(workflow, 'create_category', broken)

        assert started.create_category("Work") is None
        assert started.state.notifications[-1].title == "Error creating category"

    def test_delete_selected_goal_clears_selection(self, started, goal_with_todos):
        goal, _, _ = goal_with_todos

        assert started.delete_goal(goal.id) is True
        assert started.state.goals == []
        assert started.state.selected_goal_id is None

    def test_delete_category_keeps_goal(self, started, workflow, goal_with_todos):
        goal, _, _ = goal_with_todos
        category = started.create_category("Languages")
        started.update_goal(goal.id, goal.name, goal.description, goal.due_date, category.id)
        assert started.state.goals[0].category_name == "Languages"

        assert started.delete_category(category.id) is True
        assert started.state.goals[0].category_id is None
        assert started.state.categories == []


class TestOptimisticTodos:
    def test_toggle_is_reflected_and_persisted(self, started, store, goal_with_todos):
        goal, _, second = goal_with_todos

        assert started.toggle_todo(second.id) is True

        local = started.state.find_goal(goal.id)
        assert local.progress == 100
        assert local.find_todo(second.id).completed is True
        assert store.get(GOALS, goal.id)['progress'] == 100

    def test_toggle_failure_rolls_back(self, started, workflow, goal_with_todos, monkeypatch):
        goal, _, second = goal_with_todos
        seen = {}

        def broken(todo_id):
            # Zmiana lokalna jest już widoczna przed zapisem
            seen['progress'] = started.state.find_goal(goal.id).progress
            raise StoreError("network down")

        monkeypatch.setattr(workflow, 'toggle_todo_completion', broken)

        assert started.toggle_todo(second.id) is False
        assert seen['progress'] == 100
        local = started.state.find_goal(goal.id)
        assert local.progress == 50
        assert local.find_todo(second.id).completed is False
        assert started.state.notifications[-1].title == "Error updating task"

    def test_delete_failure_rolls_back(self, started, workflow, store, goal_with_todos, monkeypatch):
        goal, first, _ = goal_with_todos

        def broken(todo_id):
            raise StoreError("network down")

        monkeypatch.setattr(workflow, 'delete_todo', broken)

        assert started.delete_todo(first.id) is False
        assert len(started.state.find_goal(goal.id).todos) == 2
        assert started.state.notifications[-1].title == "Error deleting task"
        assert store.count(TODOS) == 2

    def test_delete_updates_progress(self, started, goal_with_todos):
        goal, _, second = goal_with_todos

        assert started.delete_todo(second.id) is True
        assert second.id not in [t.id for t in started.state.find_goal(goal.id).todos]
        assert started.state.find_goal(goal.id).progress == 100

    def test_failed_toggle_is_not_seen_by_other_session(self, started, workflow, store, goal_with_todos,
                                                        monkeypatch):
        goal, _, second = goal_with_todos
        other = GoalSession(workflow)
        other.start()

        def broken(goal_id, progress):
            raise StoreError("constraint violated")

        # Zadanie zapisane, postęp celu nie: cała jednostka pracy jest wycofana
        monkeypatch.setattr(workflow.goals, 'set_progress', broken)

        assert started.toggle_todo(second.id) is False
        assert store.get(TODOS, second.id)['completed'] is False
        assert other.state.find_goal(goal.id).find_todo(second.id).completed is False
        assert other.state.find_goal(goal.id).progress == 50
        other.stop()

    def test_committed_toggle_reaches_other_session(self, started, workflow, goal_with_todos):
        goal, _, second = goal_with_todos
        other = GoalSession(workflow)
        other.start()

        assert started.toggle_todo(second.id) is True
        assert other.state.find_goal(goal.id).find_todo(second.id).completed is True
        assert other.state.find_goal(goal.id).progress == 100
        other.stop()


class TestSessionTimeline:
    def test_load_timeline_and_more(self, started, workflow, goal_with_todos, clock, settings):
        settings.GOAL_TRACKER = {'TIMELINE_PAGE_SIZE': 1}
        goal, _, second = goal_with_todos
        clock.advance(hours=1)
        workflow.toggle_todo_completion(second.id)

        assert started.load_timeline() is True
        assert started.state.timeline.has_more is True
        assert [t.id for t in started.state.timeline.items] == [second.id]

        assert started.load_more() is True
        assert len(started.state.timeline.items) == 2

        assert started.load_more() is True
        assert started.state.timeline.has_more is False
        assert started.load_more() is False

    def test_week_navigation(self, started):
        assert started.load_week(date(2024, 1, 10)) is True
        assert len(started.state.timeline.items) == 1

        started.previous_week()
        assert started.state.timeline.week_anchor == date(2024, 1, 3)
        assert started.state.timeline.items == []

        started.next_week()
        assert started.state.timeline.week_anchor == date(2024, 1, 10)
        assert started.state.timeline.mode == 'weekly'

    def test_timeline_requires_user(self, anonymous_workflow):
        session = GoalSession(anonymous_workflow)
        assert session.load_timeline() is False
        assert session.state.notifications[-1].title == "Error fetching timeline"
