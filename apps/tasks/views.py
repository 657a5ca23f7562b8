# apps/tasks/views.py
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.adapters.orm_store import to_record
from apps.core.responses import form_error_response, handles_domain_errors
from apps.goals.domain.services import sort_todos
from apps.goals.models import Goal
from apps.goals.views import workflow_for
from .adapters.store_repositories import StoreTodoRepository
from .filters import TodoFilter
from .forms import TodoForm
from .models import Todo
from .serializers import todo_to_dict


def _result_to_dict(result):
    return {'todo': todo_to_dict(result.todo), 'goal_progress': result.goal_progress}


@login_required
@require_GET
def todo_list_view(request):
    """Lista zadań użytkownika z filtrami (?goal=, ?priority=, ?completed=) i sortowaniem (?sort=)."""
    queryset = Todo.objects.filter(goal__user=request.user).select_related('goal').order_by('created_at', 'id')
    todo_filter = TodoFilter(request.GET, queryset=queryset)
    if not todo_filter.is_valid():
        return form_error_response(todo_filter.form)

    sort_by = request.GET.get('sort', 'none')
    if sort_by not in ('none', 'priority', 'due_date'):
        return JsonResponse({'error': f"Unknown sort option: {sort_by}", 'type': 'ValidationError'}, status=400)

    # Model -> rekord -> encja (ta sama ścieżka co w magazynie)
    todos = []
    for obj in todo_filter.qs:
        record = to_record(obj)
        record['goal'] = to_record(obj.goal)
        todos.append(StoreTodoRepository.to_entity(record))

    return JsonResponse({'todos': [todo_to_dict(t) for t in sort_todos(todos, sort_by)]})


@login_required
@require_POST
@handles_domain_errors
def todo_create_view(request):
    form = TodoForm(request.POST)
    if not form.is_valid():
        return form_error_response(form)

    data = form.cleaned_data
    goal = get_object_or_404(Goal, pk=data['goal_id'], user=request.user)

    result = workflow_for(request).create_todo(
        goal.id,
        data['name'],
        priority=data['priority'],
        due_date=data['due_date'],
        estimated_time=data['estimated_time'],
        description=data['description'],
    )
    return JsonResponse(_result_to_dict(result), status=201)


@login_required
@require_POST
@handles_domain_errors
def todo_edit_view(request, pk):
    get_object_or_404(Todo, pk=pk, goal__user=request.user)
    form = TodoForm(request.POST)
    if not form.is_valid():
        return form_error_response(form)

    todo = workflow_for(request).update_todo(pk, **form.changes(request.POST))
    return JsonResponse(todo_to_dict(todo))


@login_required
@require_POST
@handles_domain_errors
def todo_toggle_view(request, pk):
    get_object_or_404(Todo, pk=pk, goal__user=request.user)
    result = workflow_for(request).toggle_todo_completion(pk)
    return JsonResponse(_result_to_dict(result))


@login_required
@require_POST
@handles_domain_errors
def todo_delete_view(request, pk):
    get_object_or_404(Todo, pk=pk, goal__user=request.user)
    result = workflow_for(request).delete_todo(pk)
    return JsonResponse(_result_to_dict(result))
