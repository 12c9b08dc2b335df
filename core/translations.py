"""
Переводы сущностей, хранящиеся в отдельных таблицах.

Базовая сущность (товар, категория, элемент галереи) не знает о языках:
строки перевода лежат в таблице вида (parent_id, language, поля...).
Списки строятся от строк перевода нужного языка, поэтому сущность без
перевода на этот язык в выдаче не видна. За полноту переводов отвечает
тот, кто заполняет каталог; подстановки другого языка при чтении списков
нет.
"""
from __future__ import annotations

from django.db import models

from .languages import DEFAULT_LANGUAGE


class TranslationResolver:
    """Доступ к строкам перевода одной модели."""

    def __init__(self, model: type[models.Model], parent_field: str):
        self.model = model
        self.parent_field = parent_field

    def rows(self, language: str) -> models.QuerySet:
        """Строки перевода на язык вместе с базовой строкой (один JOIN)."""
        return self.model.objects.filter(language=language).select_related(
            self.parent_field,
        )

    def get(self, parent_id: int, language: str):
        return self.rows(language).filter(
            **{f"{self.parent_field}_id": parent_id}
        ).first()

    def mapping(self, parent_id: int) -> dict:
        """Все переводы сущности: {язык: строка}."""
        return {
            row.language: row
            for row in self.model.objects.filter(
                **{f"{self.parent_field}_id": parent_id}
            )
        }


def resolve(mapping: dict, language: str, fallback: str = DEFAULT_LANGUAGE):
    """
    Перевод на язык, иначе на язык fallback, иначе None.
    Вызывающий сам решает, нужна ли ему подстановка.
    """
    if language in mapping:
        return mapping[language]
    return mapping.get(fallback)
