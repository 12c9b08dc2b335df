"""
Ошибки прикладного уровня и их HTTP-статусы.
"""


class ApiError(Exception):
    """Базовая ошибка, которую представление превращает в JSON-ответ."""

    status_code = 500
    default_message = "Внутренняя ошибка сервера"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    """Некорректный запрос: битый JSON, пропущенное поле, неверный email."""

    status_code = 400
    default_message = "Некорректный формат запроса"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict] | None = None,
    ):
        self.errors = errors or []
        super().__init__(message)


class NotFoundError(ApiError):
    """Нет записи с таким id или нет перевода на запрошенный язык."""

    status_code = 404
    default_message = "Запись не найдена"


class ConflictError(ApiError):
    """
    Ошибка внутри корректного по форме запроса
    (например, товар из заказа не найден в каталоге).
    """

    status_code = 400
    default_message = "Один из товаров не найден"


class DependencyError(ApiError):
    """База данных недоступна или транзакция не прошла."""

    status_code = 500
