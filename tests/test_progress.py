"""Tests for goal progress computation."""

import pytest

from apps.goals.domain.services import compute_progress
from apps.tasks.domain.entities import TodoEntity


def make_todos(total, done):
    return [TodoEntity(id=i + 1, goal_id=1, name=f"todo {i}", completed=i < done) for i in range(total)]


class TestComputeProgress:
    def test_empty_goal_has_zero_progress(self):
        assert compute_progress([]) == 0

    def test_one_of_three_rounds_down_to_33(self):
        assert compute_progress(make_todos(3, 1)) == 33

    def test_two_of_three_rounds_up_to_67(self):
        assert compute_progress(make_todos(3, 2)) == 67

    def test_half_rounds_up(self):
        # 1/8 = 12.5%
        assert compute_progress(make_todos(8, 1)) == 13

    @pytest.mark.parametrize("total,done,expected", [(2, 0, 0), (2, 1, 50), (2, 2, 100), (7, 7, 100)])
    def test_bounds(self, total, done, expected):
        assert compute_progress(make_todos(total, done)) == expected

    def test_accepts_generator(self):
        assert compute_progress(t for t in make_todos(4, 3)) == 75


class TestGoalProgressService:
    def test_recalculate_persists_progress(self, workflow, goal, store):
        first = workflow.create_todo(goal.id, "a").todo
        workflow.create_todo(goal.id, "b")
        store.update('todos', first.id, {'completed': True})

        assert workflow.progress.recalculate(goal.id) == 50
        assert store.get('goals', goal.id)['progress'] == 50

    def test_recalculate_without_todos(self, workflow, goal, store):
        store.update('goals', goal.id, {'progress': 80})

        assert workflow.progress.recalculate(goal.id) == 0
        assert store.get('goals', goal.id)['progress'] == 0
