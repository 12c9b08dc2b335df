"""
Построение фильтров и пагинация списков.

Фильтры описываются типизированными предикатами и объединяются через AND.
Запрос количества и запрос страницы строятся из одного и того же
отфильтрованного QuerySet, поэтому метаданные пагинации всегда
соответствуют выданной странице.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from django.db.models import Q, QuerySet

SORT_DIRECTIONS = ("asc", "desc")


class Predicate:
    """Условие фильтрации, превращаемое в Q-объект."""

    def as_q(self) -> Q:
        raise NotImplementedError


@dataclass(frozen=True)
class Equals(Predicate):
    field: str
    value: Any

    def as_q(self) -> Q:
        return Q(**{self.field: self.value})


@dataclass(frozen=True)
class Search(Predicate):
    """Поиск подстроки без учёта регистра хотя бы в одном из полей."""

    fields: tuple[str, ...]
    term: str

    def as_q(self) -> Q:
        q = Q()
        for name in self.fields:
            q |= Q(**{f"{name}__icontains": self.term})
        return q


@dataclass
class PredicateSet:
    predicates: list[Predicate] = field(default_factory=list)

    def add(self, predicate: Predicate) -> PredicateSet:
        self.predicates.append(predicate)
        return self

    def equals(self, name: str, value: Any) -> PredicateSet:
        """Добавляет равенство, только если значение задано."""
        if value is not None:
            self.add(Equals(name, value))
        return self

    def search(self, fields: tuple[str, ...], term: str | None) -> PredicateSet:
        term = (term or "").strip()
        if term:
            self.add(Search(fields, term))
        return self

    def as_q(self) -> Q:
        q = Q()
        for predicate in self.predicates:
            q &= predicate.as_q()
        return q

    def apply(self, queryset: QuerySet) -> QuerySet:
        return queryset.filter(self.as_q())


def parse_positive_int(value, default: int) -> int:
    """Целое >= 1 или default для пустых, нечисловых и неположительных."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def parse_optional_id(value) -> int | None:
    """Id из query-параметра; некорректные значения игнорируются."""
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_sort_direction(value) -> str | None:
    value = (value or "").strip().lower()
    return value if value in SORT_DIRECTIONS else None


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    page_size: int = 10

    @classmethod
    def from_params(
        cls,
        page,
        page_size,
        default_page_size: int,
        max_page_size: int | None = None,
    ) -> PageRequest:
        size = parse_positive_int(page_size, default_page_size)
        if max_page_size and size > max_page_size:
            size = default_page_size
        return cls(page=parse_positive_int(page, 1), page_size=size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class Page:
    items: list
    total_items: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.page_size)

    def as_dict(self) -> dict:
        return {
            "items": self.items,
            "total_items": self.total_items,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
        }


def paginate(queryset: QuerySet, page_request: PageRequest) -> tuple[list, int]:
    """
    Возвращает (строки страницы, общее количество).
    Количество считается по тому же QuerySet без сортировки и среза.
    """
    total = queryset.order_by().count()
    start = page_request.offset
    rows = list(queryset[start:start + page_request.page_size])
    return rows, total
