# apps/core/responses.py
import functools
import logging

from django.http import JsonResponse

from apps.core.errors import AuthError, GoalTrackerError, NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)


def error_response(exc: GoalTrackerError) -> JsonResponse:
    """Błąd domenowy -> odpowiedź JSON (komunikat do wyświetlenia i zamknięcia przez użytkownika)."""
    body = {'error': str(exc), 'type': type(exc).__name__}
    if isinstance(exc, ValidationError):
        body['field'] = exc.field
        status = 400
    elif isinstance(exc, AuthError):
        status = 401
    elif isinstance(exc, NotFoundError):
        status = 404
    elif isinstance(exc, StoreError):
        # Przejściowy błąd, można ponowić
        status = 503
    else:
        status = 500
    return JsonResponse(body, status=status)


def form_error_response(form) -> JsonResponse:
    return JsonResponse({'error': 'Invalid input', 'type': 'ValidationError', 'fields': form.errors}, status=400)


def handles_domain_errors(view):
    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except GoalTrackerError as exc:
            if isinstance(exc, StoreError):
                logger.warning("%s failed: %s", view.__name__, exc)
            return error_response(exc)
    return wrapper
