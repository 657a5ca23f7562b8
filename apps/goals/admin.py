from django.contrib import admin
from .models import Category, Goal
from apps.core.adapters.orm_store import DjangoRecordStore
from apps.goals.adapters.store_repositories import StoreGoalRepository
from apps.goals.domain.services import GoalProgressService
from apps.tasks.adapters.store_repositories import StoreTodoRepository
from apps.tasks.models import Todo

admin.site.register(Category)


class TodoInline(admin.TabularInline):
    model = Todo
    extra = 0
    fields = ('name', 'priority', 'due_date', 'estimated_time', 'completed')
    readonly_fields = ('completed',)  # ukończenie tylko przez workflow (completed_time + postęp)


@admin.register(Goal)
class GoalAdmin(admin.ModelAdmin):
    list_display = ('name', 'user', 'category', 'due_date', 'progress', 'is_completed')
    list_filter = ('is_completed', 'category')
    search_fields = ('name', 'description')
    readonly_fields = ('progress',)
    inlines = [TodoInline]

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        # Zadania dodane/usunięte w inline zmieniają postęp
        store = DjangoRecordStore()
        GoalProgressService(StoreGoalRepository(store), StoreTodoRepository(store)).recalculate(form.instance.pk)
