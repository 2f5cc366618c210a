import json
import logging
from functools import wraps
from typing import Callable, Iterable

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from .services import AuthenticationError, DomainError, ValidationError

logger = logging.getLogger(__name__)


def error_response(exc: DomainError) -> JsonResponse:
    payload = {"message": exc.message, "code": exc.code}
    if exc.details:
        payload["details"] = exc.details
    return JsonResponse(payload, status=exc.status_code)


def json_body(request: HttpRequest) -> dict:
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError("Invalid JSON body") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON body")
    return payload


def api_view(methods: Iterable[str], login_required: bool = True) -> Callable:
    def decorator(view_func: Callable) -> Callable:
        @require_http_methods(list(methods))
        @wraps(view_func)
        def _wrapped_view(request: HttpRequest, *args, **kwargs) -> HttpResponse:
            try:
                if login_required and not request.user.is_authenticated:
                    raise AuthenticationError("Authentication required")
                return view_func(request, *args, **kwargs)
            except DomainError as exc:
                return error_response(exc)
            except Exception:
                logger.exception("Unhandled error in %s %s", request.method, request.path)
                return JsonResponse({"message": "Internal server error", "code": "internal_error"}, status=500)

        return _wrapped_view

    return decorator
