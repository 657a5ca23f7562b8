# apps/goals/views.py
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.adapters.identity import RequestIdentityProvider
from apps.core.adapters.orm_store import DjangoRecordStore
from apps.core.responses import form_error_response, handles_domain_errors
from apps.goals.application.workflow import GoalWorkflow
from apps.goals.domain.services import first_active_goal, group_goals_by_category
from apps.goals.serializers import category_to_dict, goal_to_dict
from .forms import CategoryForm, GoalForm
from .models import Category, Goal


def workflow_for(request) -> GoalWorkflow:
    """Złożenie workflow dla żądania (ręczne wstrzykiwanie zależności)."""
    return GoalWorkflow(DjangoRecordStore(), RequestIdentityProvider(request))


@login_required
@require_GET
@handles_domain_errors
def goal_list_view(request):
    """Lista celów pogrupowana po kategoriach (ukończone tylko z ?show_completed=1)."""
    show_completed = request.GET.get('show_completed') in ('1', 'true', 'on')
    goals = workflow_for(request).list_goals()
    groups = group_goals_by_category(goals, show_completed=show_completed)
    active = first_active_goal(goals)

    return JsonResponse({
        'groups': {name: [goal_to_dict(g) for g in items] for name, items in groups.items()},
        'selected_goal_id': active.id if active else None,
    })


@login_required
@require_GET
@handles_domain_errors
def goal_detail_view(request, pk):
    get_object_or_404(Goal, pk=pk, user=request.user)
    goal = workflow_for(request).get_goal(pk)
    return JsonResponse(goal_to_dict(goal))


@login_required
@require_POST
@handles_domain_errors
def goal_create_view(request):
    form = GoalForm(request.POST)
    if not form.is_valid():
        return form_error_response(form)

    data = form.cleaned_data
    if data['category_id']:
        get_object_or_404(Category, pk=data['category_id'], user=request.user)

    goal = workflow_for(request).create_goal(
        name=data['name'],
        description=data['description'],
        due_date=data['due_date'],
        category_id=data['category_id'],
    )
    return JsonResponse(goal_to_dict(goal), status=201)


@login_required
@require_POST
@handles_domain_errors
def goal_edit_view(request, pk):
    get_object_or_404(Goal, pk=pk, user=request.user)
    form = GoalForm(request.POST)
    if not form.is_valid():
        return form_error_response(form)

    data = form.cleaned_data
    if data['category_id']:
        get_object_or_404(Category, pk=data['category_id'], user=request.user)

    goal = workflow_for(request).update_goal(
        pk,
        name=data['name'],
        description=data['description'],
        due_date=data['due_date'],
        category_id=data['category_id'],
    )
    return JsonResponse(goal_to_dict(goal, with_todos=False))


@login_required
@require_POST
@handles_domain_errors
def goal_toggle_view(request, pk):
    get_object_or_404(Goal, pk=pk, user=request.user)
    goal = workflow_for(request).toggle_goal_completion(pk)
    return JsonResponse(goal_to_dict(goal, with_todos=False))


@login_required
@require_POST
@handles_domain_errors
def goal_delete_view(request, pk):
    get_object_or_404(Goal, pk=pk, user=request.user)
    workflow_for(request).delete_goal(pk)
    return JsonResponse({'deleted': pk})


@login_required
@require_GET
@handles_domain_errors
def category_list_view(request):
    categories = workflow_for(request).list_categories()
    return JsonResponse({'categories': [category_to_dict(c) for c in categories]})


@login_required
@require_POST
@handles_domain_errors
def category_create_view(request):
    form = CategoryForm(request.POST)
    if not form.is_valid():
        return form_error_response(form)
    category = workflow_for(request).create_category(form.cleaned_data['name'])
    return JsonResponse(category_to_dict(category), status=201)


@login_required
@require_POST
@handles_domain_errors
def category_delete_view(request, pk):
    get_object_or_404(Category, pk=pk, user=request.user)
    workflow_for(request).delete_category(pk)
    return JsonResponse({'deleted': pk})
