# apps/timeline/views.py
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from django.views.decorators.http import require_GET

from apps.core.adapters.orm_store import DjangoRecordStore
from apps.core.errors import ValidationError
from apps.core.responses import handles_domain_errors
from apps.tasks.adapters.store_repositories import StoreTodoRepository
from apps.tasks.serializers import iso_or_none, todo_to_dict
from .domain.services import TimelineService, week_bounds


def _service_for(request) -> TimelineService:
    return TimelineService(StoreTodoRepository(DjangoRecordStore()), user_id=request.user.id)


def _groups_to_dict(page):
    return {day: [todo_to_dict(t) for t in items] for day, items in page.groups.items()}


def _parse_cursor(value):
    if not value:
        return None
    cursor = parse_datetime(value)
    if cursor is None:
        raise ValidationError("Cursor must be an ISO 8601 datetime", field='cursor')
    if timezone.is_naive(cursor):
        cursor = timezone.make_aware(cursor)
    return cursor


def _parse_page_size(value):
    if not value:
        return None
    try:
        page_size = int(value)
    except ValueError:
        raise ValidationError("Page size must be a number", field='page_size')
    if page_size < 1:
        raise ValidationError("Page size must be positive", field='page_size')
    return page_size


@login_required
@require_GET
@handles_domain_errors
def timeline_view(request):
    """Ukończone zadania od najnowszych, stronicowane kursorem (?cursor=<completed_time>)."""
    cursor = _parse_cursor(request.GET.get('cursor'))
    page_size = _parse_page_size(request.GET.get('page_size'))

    page = _service_for(request).fetch_completed_page(cursor=cursor, page_size=page_size)
    return JsonResponse({
        'groups': _groups_to_dict(page),
        'has_more': page.has_more,
        'next_cursor': iso_or_none(page.next_cursor),
    })


@login_required
@require_GET
@handles_domain_errors
def timeline_week_view(request):
    """Ukończone zadania z tygodnia (pon-nd) zawierającego ?week=YYYY-MM-DD (domyślnie bieżący)."""
    raw = request.GET.get('week')
    if raw:
        anchor = parse_date(raw)
        if anchor is None:
            raise ValidationError("Week must be a date (YYYY-MM-DD)", field='week')
    else:
        anchor = timezone.localdate()

    start, end = week_bounds(anchor)
    page = _service_for(request).fetch_weekly_completed(anchor)
    return JsonResponse({
        'week_start': start.isoformat(),
        'week_end': end.isoformat(),
        'groups': _groups_to_dict(page),
        'has_more': False,
    })
