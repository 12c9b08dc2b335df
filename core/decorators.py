"""
Декораторы доступа для API.
"""
import functools

from .api import error_response


def staff_required(view):
    """
    Пропускает только вошедших сотрудников (is_staff).
    Аноним получает 401, обычный пользователь 403.
    """

    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        user = request.user
        if not user.is_authenticated:
            return error_response("Требуется авторизация", status=401)
        if not user.is_staff:
            return error_response("Недостаточно прав", status=403)
        return view(request, *args, **kwargs)

    return wrapper
