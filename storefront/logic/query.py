"""Catalog filtering and sorting."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Sequence

from storefront.catalog.models import Post, Product
from storefront.utils.dates import recency_key


class SortKey(str, enum.Enum):
    RATING_DESC = "rating_desc"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NEWEST = "newest"

    @classmethod
    def parse(cls, value: str | None) -> SortKey | None:
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(slots=True, frozen=True)
class QueryCriteria:
    category: str = ""
    search_term: str = ""
    sort: SortKey | None = None


def filter_products(records: Sequence[Product], criteria: QueryCriteria) -> list[Product]:
    result = list(records)
    if criteria.category:
        result = [r for r in result if r.category == criteria.category]
    term = criteria.search_term.lower()
    if term:
        result = [r for r in result if term in r.search_text()]
    return result


def sort_products(records: Sequence[Product], sort: SortKey | None) -> list[Product]:
    if sort is SortKey.RATING_DESC:
        return sorted(records, key=lambda r: r.rating, reverse=True)
    if sort is SortKey.PRICE_ASC:
        return sorted(records, key=lambda r: r.price)
    if sort is SortKey.PRICE_DESC:
        return sorted(records, key=lambda r: r.price, reverse=True)
    if sort is SortKey.NEWEST:
        return sorted(records, key=lambda r: recency_key(r.last_updated), reverse=True)
    return list(records)


def query(records: Sequence[Product], criteria: QueryCriteria) -> list[Product]:
    return sort_products(filter_products(records, criteria), criteria.sort)


def query_posts(records: Sequence[Post]) -> list[Post]:
    return list(records)


def featured(records: Sequence[Product], limit: int = 3) -> list[Product]:
    return sort_products(records, SortKey.RATING_DESC)[:limit]
