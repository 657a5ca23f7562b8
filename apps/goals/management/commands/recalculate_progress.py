from django.core.management.base import BaseCommand

from apps.core.adapters.orm_store import DjangoRecordStore
from apps.goals.adapters.store_repositories import StoreGoalRepository
from apps.goals.domain.services import GoalProgressService
from apps.tasks.adapters.store_repositories import StoreTodoRepository


class Command(BaseCommand):
    help = 'Przelicza postęp wszystkich celów na podstawie ich zadań'

    def handle(self, *args, **options):
        store = DjangoRecordStore()
        goals = StoreGoalRepository(store)
        service = GoalProgressService(goals, StoreTodoRepository(store))

        goal_ids = goals.list_ids()
        for goal_id in goal_ids:
            progress = service.recalculate(goal_id)
            self.stdout.write(f"- cel #{goal_id}: {progress}%")

        self.stdout.write(self.style.SUCCESS(f'Przeliczono postęp {len(goal_ids)} celów.'))
