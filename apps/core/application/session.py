# apps/core/application/session.py
import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Callable, List, Optional, TypeVar, Union

from apps.core.application.commands import CommandRunner, DeleteTodoCommand, ToggleTodoCommand
from apps.core.application.state import AppState, TimelineState
from apps.core.errors import AuthError, StoreError
from apps.core.ports.store import COLLECTIONS, ChangeEvent
from apps.goals.application.workflow import GoalWorkflow
from apps.goals.domain.entities import CategoryEntity, GoalEntity
from apps.goals.domain.services import first_active_goal
from apps.timeline.domain.services import TimelineService, shift_week

logger = logging.getLogger(__name__)

T = TypeVar('T')


class GoalSession:
    """
    Sesja jednego użytkownika: właściciel AppState.
    Powiadomienia z magazynu i każda mutacja kończą się tym samym refresh().
    Błędy magazynu (i brak logowania) trafiają do state.notifications,
    błędy walidacji idą do wywołującego (formularz).
    """

    def __init__(self, workflow: GoalWorkflow):
        self.workflow = workflow
        self.state = AppState()
        self.runner = CommandRunner(self.state)
        self._unsubscribers: List[Callable[[], None]] = []
        self._mutating = 0
        self._stale = False

    # --- subskrypcje ---

    def start(self) -> bool:
        for collection in COLLECTIONS:
            self._unsubscribers.append(self.workflow.store.subscribe(collection, self._on_change))
        return self.refresh()

    def stop(self):
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _on_change(self, event: ChangeEvent):
        if self._mutating:
            # Własna mutacja w toku - odśwież raz, po jej zakończeniu
            self._stale = True
            return
        logger.debug("Store change %s/%s #%s, refreshing", event.collection, event.action, event.record_id)
        self.refresh()

    @contextmanager
    def _mutation(self):
        self._mutating += 1
        try:
            yield
        finally:
            self._mutating -= 1
            if not self._mutating and self._stale:
                self._stale = False
                self.refresh()

    # --- odczyt ---

    def refresh(self) -> bool:
        try:
            goals = self.workflow.list_goals()
            categories = self.workflow.list_categories()
        except (StoreError, AuthError) as exc:
            logger.warning("Refresh failed: %s", exc)
            self.state.notify("Error fetching goals", str(exc))
            return False
        finally:
            self.state.loading = False

        self.state.goals = goals
        self.state.categories = categories
        if self.state.selected_goal is None:
            active = first_active_goal(goals)
            self.state.selected_goal_id = active.id if active else None
        return True

    def select_goal(self, goal_id: Optional[int]):
        self.state.selected_goal_id = goal_id

    def _perform(self, error_title: str, action: Callable[[], T]) -> Optional[T]:
        with self._mutation():
            try:
                result = action()
            except (StoreError, AuthError) as exc:
                logger.warning("%s: %s", error_title, exc)
                self.state.notify(error_title, str(exc))
                return None
            self._stale = True
        return result

    # --- cele i kategorie ---

    def create_goal(self, name: str, description: str, due_date: datetime,
                    category_id: Optional[int] = None) -> Optional[GoalEntity]:
        return self._perform(
            "Error creating goal",
            lambda: self.workflow.create_goal(name, description, due_date, category_id),
        )

    def update_goal(self, goal_id: int, name: str, description: str, due_date: datetime,
                    category_id: Optional[int] = None) -> Optional[GoalEntity]:
        return self._perform(
            "Error updating goal",
            lambda: self.workflow.update_goal(goal_id, name, description, due_date, category_id),
        )

    def toggle_goal_completion(self, goal_id: int) -> Optional[GoalEntity]:
        return self._perform("Error updating goal", lambda: self.workflow.toggle_goal_completion(goal_id))

    def delete_goal(self, goal_id: int) -> bool:
        done = self._perform("Error deleting goal", lambda: self.workflow.delete_goal(goal_id) or True)
        if done and self.state.selected_goal_id == goal_id:
            self.state.selected_goal_id = None
        return bool(done)

    def create_category(self, name: str) -> Optional[CategoryEntity]:
        return self._perform("Error creating category", lambda: self.workflow.create_category(name))

    def delete_category(self, category_id: int) -> bool:
        return bool(self._perform(
            "Error deleting category",
            lambda: self.workflow.delete_category(category_id) or True,
        ))

    # --- zadania ---

    def create_todo(self, goal_id: int, name: str, **fields):
        return self._perform("Error creating task", lambda: self.workflow.create_todo(goal_id, name, **fields))

    def update_todo(self, todo_id: int, **changes):
        return self._perform("Error updating task", lambda: self.workflow.update_todo(todo_id, **changes))

    def toggle_todo(self, todo_id: int) -> bool:
        with self._mutation():
            return self.runner.run(ToggleTodoCommand(self.state, self.workflow, todo_id))

    def delete_todo(self, todo_id: int) -> bool:
        with self._mutation():
            return self.runner.run(DeleteTodoCommand(self.state, self.workflow, todo_id))

    # --- oś czasu ---

    def _timeline_service(self) -> TimelineService:
        user = self.workflow.identity.get_current_user()
        if user is None:
            raise AuthError("You must be logged in")
        return TimelineService(self.workflow.todos, user_id=user.id)

    def load_timeline(self, page_size: Optional[int] = None) -> bool:
        """Widok 'all': pierwsza strona, od najnowszych."""
        try:
            page = self._timeline_service().fetch_completed_page(page_size=page_size)
        except (StoreError, AuthError) as exc:
            self.state.notify("Error fetching timeline", str(exc))
            return False
        self.state.timeline = TimelineState(
            mode='all', items=page.items, has_more=page.has_more, cursor=page.next_cursor
        )
        return True

    def load_more(self, page_size: Optional[int] = None) -> bool:
        timeline = self.state.timeline
        if timeline.mode != 'all' or not timeline.has_more:
            return False
        try:
            page = self._timeline_service().fetch_completed_page(cursor=timeline.cursor, page_size=page_size)
        except (StoreError, AuthError) as exc:
            self.state.notify("Error loading more items", str(exc))
            return False
        timeline.items.extend(page.items)
        timeline.has_more = page.has_more
        timeline.cursor = page.next_cursor
        return True

    def load_week(self, anchor: Union[date, datetime]) -> bool:
        try:
            page = self._timeline_service().fetch_weekly_completed(anchor)
        except (StoreError, AuthError) as exc:
            self.state.notify("Error fetching timeline", str(exc))
            return False
        self.state.timeline = TimelineState(mode='weekly', items=page.items, has_more=False, week_anchor=anchor)
        return True

    def previous_week(self) -> bool:
        anchor = self.state.timeline.week_anchor or self.workflow.clock()
        return self.load_week(shift_week(anchor, -1))

    def next_week(self) -> bool:
        anchor = self.state.timeline.week_anchor or self.workflow.clock()
        return self.load_week(shift_week(anchor, 1))
