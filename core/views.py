"""
Служебные представления API: проверка работоспособности, CSRF-токен
и вход сотрудников.
"""
from django.contrib.auth import authenticate, login, logout
from django.middleware.csrf import get_token
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_POST

from .api import api_view, error_response, parse_json_body, success_response


@require_GET
def health(request):
    return success_response({"status": "ok"})


@require_GET
@ensure_csrf_cookie
def csrf(request):
    """Токен для заголовка X-CSRFToken изменяющих запросов."""
    return success_response({"csrf_token": get_token(request)})


@require_POST
@api_view
def login_view(request):
    """
    Вход по логину и паролю (сессия Django).
    Изменяющие каталог запросы доступны только сотрудникам.
    """
    payload = parse_json_body(request)
    username = str(payload.get("username") or "").strip()
    password = str(payload.get("password") or "")
    user = authenticate(request, username=username, password=password)
    if user is None or not user.is_staff:
        return error_response("Неверный логин или пароль", status=401)
    login(request, user)
    return success_response({"username": user.get_username()})


@require_POST
def logout_view(request):
    logout(request)
    return success_response({"message": "Вы вышли из системы"})
