"""
Языки контента: язык по умолчанию и определение языка запроса.
"""
DEFAULT_LANGUAGE = "ru"
SUPPORTED_LANGUAGES = ("ru", "en", "es")


def get_query_language(request) -> str:
    """Язык из параметра ?language= (по умолчанию русский)."""
    return (request.GET.get("language") or "").strip() or DEFAULT_LANGUAGE


def get_preferred_language(request) -> str:
    """
    Язык по заголовку Accept-Language.

    Проверяется только начало заголовка (ru-RU,ru;q=0.9,... -> ru);
    неподдерживаемые языки и пустой заголовок дают русский.
    """
    accept_language = request.headers.get("Accept-Language", "")
    for lang in SUPPORTED_LANGUAGES:
        if accept_language.startswith(lang):
            return lang
    return DEFAULT_LANGUAGE


def resolve_language(value, request) -> str:
    """Явно переданный язык или язык из Accept-Language."""
    value = (value or "").strip()
    return value or get_preferred_language(request)
