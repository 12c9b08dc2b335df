"""
Общий конверт JSON-ответов API и обработка ошибок представлений.

Любой ответ имеет вид {"success": bool, "data"?: ..., "error"?: str};
ошибки валидации форм: {"success": false, "errors": [{field, message}]}.
"""
import functools
import json
import logging

from django.db import DatabaseError
from django.http import JsonResponse

from .exceptions import ApiError, DependencyError, ValidationError

logger = logging.getLogger(__name__)


def success_response(data=None, status=200):
    """Успешный ответ; data не добавляется, если не передана."""
    payload = {"success": True}
    if data is not None:
        payload["data"] = data
    return JsonResponse(payload, status=status)


def error_response(message, status=400):
    return JsonResponse({"success": False, "error": message}, status=status)


def validation_error_response(errors, status=400):
    return JsonResponse({"success": False, "errors": errors}, status=status)


def form_errors(form, prefix=""):
    """Список ошибок формы в виде [{"field": ..., "message": ...}]."""
    errors = []
    for field, messages in form.errors.items():
        name = f"{prefix}{field}" if field != "__all__" else (
            prefix.rstrip(".") or field
        )
        for message in messages:
            errors.append({"field": name, "message": message})
    return errors


def parse_json_body(request) -> dict:
    """
    Разбирает тело запроса как JSON-объект.
    Пустое тело считается пустым объектом.
    """
    try:
        payload = json.loads(request.body.decode("utf-8") or "{}")
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise ValidationError()
    if not isinstance(payload, dict):
        raise ValidationError()
    return payload


def api_view(view):
    """
    Переводит ApiError в JSON-ответ с нужным статусом.
    Ошибки базы данных логируются и отдаются как 500.
    """

    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except ValidationError as e:
            if e.errors:
                return validation_error_response(e.errors, status=e.status_code)
            return error_response(e.message, status=e.status_code)
        except ApiError as e:
            if isinstance(e, DependencyError):
                logger.error(
                    "%s %s failed: %s", request.method, request.path, e
                )
            return error_response(e.message, status=e.status_code)
        except DatabaseError:
            logger.exception(
                "Database error on %s %s", request.method, request.path
            )
            return error_response(DependencyError.default_message, status=500)

    return wrapper
