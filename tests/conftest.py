"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta

import pytest
import pytz

from apps.core.adapters.identity import StaticIdentityProvider
from apps.core.adapters.memory_store import InMemoryRecordStore
from apps.goals.application.workflow import GoalWorkflow

# Środa, 2024-01-10 12:00 UTC
NOW = datetime(2024, 1, 10, 12, 0, tzinfo=pytz.UTC)

USER_ID = 1


class FixedClock:
    """Zegar testowy: stały czas, przesuwany ręcznie."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store(clock):
    """Fresh in-memory store per test."""
    return InMemoryRecordStore(clock=clock)


@pytest.fixture
def workflow(store, clock):
    return GoalWorkflow(store, StaticIdentityProvider(USER_ID), clock=clock)


@pytest.fixture
def anonymous_workflow(store, clock):
    return GoalWorkflow(store, StaticIdentityProvider(None), clock=clock)


@pytest.fixture
def goal(workflow):
    """Goal due in a month, without todos."""
    return workflow.create_goal("Learn Spanish", "Reach B2 level", NOW + timedelta(days=30))


@pytest.fixture
def goal_with_todos(workflow, goal):
    """Goal with two todos, the first one completed (progress 50)."""
    first = workflow.create_todo(goal.id, "Finish textbook").todo
    second = workflow.create_todo(goal.id, "Watch a movie").todo
    workflow.toggle_todo_completion(first.id)
    return workflow.get_goal(goal.id), first, second


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(username="alice", password="secret-pass-123")


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(username="bob", password="secret-pass-456")


@pytest.fixture
def auth_client(client, user):
    client.force_login(user)
    return client
