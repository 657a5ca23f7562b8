from django.contrib import admin
from .models import Todo
from apps.core.adapters.orm_store import DjangoRecordStore
from apps.goals.adapters.store_repositories import StoreGoalRepository
from apps.goals.domain.services import GoalProgressService
from apps.tasks.adapters.store_repositories import StoreTodoRepository


def _recalculate(goal_ids):
    store = DjangoRecordStore()
    service = GoalProgressService(StoreGoalRepository(store), StoreTodoRepository(store))
    for goal_id in set(goal_ids):
        service.recalculate(goal_id)


@admin.register(Todo)
class TodoAdmin(admin.ModelAdmin):
    list_display = ('name', 'goal', 'priority', 'due_date', 'completed', 'completed_time')
    list_filter = ('priority', 'completed')
    search_fields = ('name',)
    # Ukończenie tylko przez workflow (completed_time + postęp celu)
    readonly_fields = ('completed', 'completed_time', 'created_at')

    def save_model(self, request, obj, form, change):
        goal_ids = [obj.goal_id]
        if change:
            # Przeniesienie zadania zmienia postęp obu celów
            goal_ids += Todo.objects.filter(pk=obj.pk).values_list('goal_id', flat=True)
        super().save_model(request, obj, form, change)
        _recalculate(goal_ids)

    def delete_model(self, request, obj):
        goal_id = obj.goal_id
        super().delete_model(request, obj)
        _recalculate([goal_id])

    def delete_queryset(self, request, queryset):
        goal_ids = list(queryset.values_list('goal_id', flat=True))
        super().delete_queryset(request, queryset)
        _recalculate(goal_ids)
