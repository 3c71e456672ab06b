"""Catalog data models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

PRODUCT_FIELDS = (
    "id",
    "name",
    "brand",
    "category",
    "tags",
    "shortDescription",
    "descriptionHtml",
    "ingredients",
    "servingsPerContainer",
    "directions",
    "warnings",
    "allergens",
    "price",
    "compareAtPrice",
    "rating",
    "reviewsCount",
    "images",
    "clickbankHoplink",
    "sku",
    "countryOfOrigin",
    "certifications",
    "lastUpdated",
)

POST_FIELDS = (
    "id",
    "title",
    "excerpt",
    "bodyHtml",
    "coverImage",
    "author",
    "category",
    "tags",
    "publishedAt",
    "updatedAt",
)


@dataclass(slots=True)
class Ingredient:
    name: str
    dose: str
    note: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Ingredient:
        return cls(
            name=str(data.get("name") or ""),
            dose=str(data.get("dose") or ""),
            note=str(data.get("note") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "dose": self.dose, "note": self.note}


@dataclass(slots=True)
class Product:
    id: str
    name: str
    brand: str
    category: str
    price: float
    rating: float
    reviews_count: int
    images: list[str]
    tags: list[str] = field(default_factory=list)
    compare_at_price: float = 0.0
    short_description: str = ""
    description_html: str = ""
    ingredients: list[Ingredient] = field(default_factory=list)
    servings_per_container: int = 0
    directions: str = ""
    warnings: str = ""
    allergens: list[str] = field(default_factory=list)
    certifications: list[str] = field(default_factory=list)
    clickbank_hoplink: str = ""
    sku: str = ""
    country_of_origin: str = ""
    last_updated: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def recency(self) -> str | None:
        return self.last_updated

    def search_text(self) -> str:
        return f"{self.name} {self.brand} {' '.join(self.tags)}".lower()

    def affiliate_url(self) -> str:
        return self.clickbank_hoplink.replace("{{utm}}", f"product_{self.id}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Product:
        """Lenient parse of a stored record; raises ``ValueError`` without an id."""
        record_id = _identity(data)
        return cls(
            id=record_id,
            name=str(data.get("name") or ""),
            brand=str(data.get("brand") or ""),
            category=str(data.get("category") or ""),
            price=_number(data.get("price")),
            rating=_number(data.get("rating")),
            reviews_count=int(_number(data.get("reviewsCount"))),
            images=_strings(data.get("images")),
            tags=_strings(data.get("tags")),
            compare_at_price=_number(data.get("compareAtPrice")),
            short_description=str(data.get("shortDescription") or ""),
            description_html=str(data.get("descriptionHtml") or ""),
            ingredients=[
                Ingredient.from_dict(item)
                for item in data.get("ingredients") or []
                if isinstance(item, Mapping)
            ],
            servings_per_container=int(_number(data.get("servingsPerContainer"))),
            directions=str(data.get("directions") or ""),
            warnings=str(data.get("warnings") or ""),
            allergens=_strings(data.get("allergens")),
            certifications=_strings(data.get("certifications")),
            clickbank_hoplink=str(data.get("clickbankHoplink") or ""),
            sku=str(data.get("sku") or ""),
            country_of_origin=str(data.get("countryOfOrigin") or ""),
            last_updated=_optional_str(data.get("lastUpdated")),
            extra={k: v for k, v in data.items() if k not in PRODUCT_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "category": self.category,
            "tags": list(self.tags),
            "shortDescription": self.short_description,
            "descriptionHtml": self.description_html,
            "ingredients": [item.to_dict() for item in self.ingredients],
            "servingsPerContainer": self.servings_per_container,
            "directions": self.directions,
            "warnings": self.warnings,
            "allergens": list(self.allergens),
            "price": self.price,
            "compareAtPrice": self.compare_at_price,
            "rating": self.rating,
            "reviewsCount": self.reviews_count,
            "images": list(self.images),
            "clickbankHoplink": self.clickbank_hoplink,
            "sku": self.sku,
            "countryOfOrigin": self.country_of_origin,
            "certifications": list(self.certifications),
            "lastUpdated": self.last_updated,
            **self.extra,
        }


@dataclass(slots=True)
class Post:
    id: str
    title: str
    excerpt: str
    body_html: str
    published_at: str | None
    cover_image: str = ""
    author: str = ""
    category: str = ""
    tags: list[str] = field(default_factory=list)
    updated_at: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def recency(self) -> str | None:
        return self.published_at

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Post:
        return cls(
            id=_identity(data),
            title=str(data.get("title") or ""),
            excerpt=str(data.get("excerpt") or ""),
            body_html=str(data.get("bodyHtml") or ""),
            published_at=_optional_str(data.get("publishedAt")),
            cover_image=str(data.get("coverImage") or ""),
            author=str(data.get("author") or ""),
            category=str(data.get("category") or ""),
            tags=_strings(data.get("tags")),
            updated_at=_optional_str(data.get("updatedAt")),
            extra={k: v for k, v in data.items() if k not in POST_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "excerpt": self.excerpt,
            "bodyHtml": self.body_html,
            "coverImage": self.cover_image,
            "author": self.author,
            "category": self.category,
            "tags": list(self.tags),
            "publishedAt": self.published_at,
            "updatedAt": self.updated_at,
            **self.extra,
        }


@dataclass(slots=True)
class AnalyticsEvent:
    product_id: str
    target_url: str
    timestamp: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AnalyticsEvent:
        return cls(
            product_id=str(data.get("id") or ""),
            target_url=str(data.get("url") or ""),
            timestamp=str(data.get("timestamp") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {"id": self.product_id, "url": self.target_url, "timestamp": self.timestamp}


def _identity(data: Mapping[str, Any]) -> str:
    value = data.get("id")
    if value is None or isinstance(value, bool) or str(value).strip() == "":
        raise ValueError("record has no id")
    return str(value)


def _number(value: Any) -> float:
    if value in (None, "") or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _strings(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value else []
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value]


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)
