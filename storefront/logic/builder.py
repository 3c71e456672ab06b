"""Build catalog records from operator-submitted form fields."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Any, Callable, Mapping, Sequence

from storefront.catalog.models import Ingredient, Post, Product
from storefront.store.local import PENDING_POSTS, PENDING_SUPPLEMENTS, LocalStore
from storefront.utils.dates import format_timestamp, now_iso, parse_timestamp

logger = logging.getLogger(__name__)

ID_PREFIX = "custom"

PRODUCT_REQUIRED = (
    "name",
    "brand",
    "category",
    "price",
    "rating",
    "reviewsCount",
    "servingsPerContainer",
    "images",
)
PRODUCT_OPTIONAL = (
    "id",
    "tags",
    "shortDescription",
    "descriptionHtml",
    "ingredients",
    "directions",
    "warnings",
    "allergens",
    "compareAtPrice",
    "clickbankHoplink",
    "sku",
    "countryOfOrigin",
    "certifications",
)
POST_REQUIRED = ("title", "excerpt", "bodyHtml", "publishedAt")
POST_OPTIONAL = ("id", "coverImage", "author", "category", "tags")


class ValidationError(ValueError):
    """Raised when form fields cannot produce a well-formed record."""

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors = dict(errors)
        summary = "; ".join(f"{name}: {message}" for name, message in self.errors.items())
        super().__init__(summary)


class IdentityGenerator:
    """Millisecond-based ids that never repeat within a process."""

    def __init__(self, prefix: str = ID_PREFIX, clock: Callable[[], int] | None = None) -> None:
        self.prefix = prefix
        self._clock = clock or (lambda: time.time_ns() // 1_000_000)
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            value = max(self._clock(), self._last + 1)
            self._last = value
        return f"{self.prefix}-{value}"


new_identity = IdentityGenerator()


def split_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_ingredients(value: str | None) -> list[Ingredient]:
    ingredients: list[Ingredient] = []
    for line_no, line in enumerate((value or "").splitlines(), start=1):
        if not line.strip():
            continue
        parts = [part.strip() for part in line.split("|")]
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise ValueError(f"line {line_no} must look like 'name|dose|note'")
        note = "|".join(parts[2:]).strip() if len(parts) > 2 else ""
        ingredients.append(Ingredient(name=parts[0], dose=parts[1], note=note))
    return ingredients


class _FieldReader:
    """Collects every field error before failing the build."""

    def __init__(self, fields: Mapping[str, Any], required: Sequence[str], optional: Sequence[str]) -> None:
        self.fields = {key: "" if value is None else str(value) for key, value in fields.items()}
        self.errors: dict[str, str] = {}
        known = set(required) | set(optional)
        for name in self.fields:
            if name not in known:
                self.errors[name] = "unknown field"
        for name in required:
            if not self.fields.get(name, "").strip():
                self.errors[name] = "required"

    def text(self, name: str) -> str:
        return self.fields.get(name, "").strip()

    def number(self, name: str, *, minimum: float | None = None, maximum: float | None = None) -> float:
        raw = self.text(name)
        if name in self.errors:
            return 0.0
        try:
            value = float(raw)
        except ValueError:
            self.errors[name] = "must be a number"
            return 0.0
        if not math.isfinite(value):
            self.errors[name] = "must be a number"
        elif minimum is not None and value < minimum:
            self.errors[name] = f"must be at least {minimum:g}"
        elif maximum is not None and value > maximum:
            self.errors[name] = f"must be at most {maximum:g}"
        return value

    def integer(self, name: str) -> int:
        raw = self.text(name)
        if name in self.errors:
            return 0
        try:
            value = int(raw)
        except ValueError:
            self.errors[name] = "must be a whole number"
            return 0
        if value < 0:
            self.errors[name] = "must not be negative"
        return value

    def lenient_number(self, name: str) -> float:
        try:
            value = float(self.text(name))
        except ValueError:
            return 0.0
        return value if math.isfinite(value) and value >= 0 else 0.0

    def check(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)


def build_product(fields: Mapping[str, Any], *, categories: Sequence[str]) -> Product:
    reader = _FieldReader(fields, PRODUCT_REQUIRED, PRODUCT_OPTIONAL)
    category = reader.text("category")
    if category and category not in categories:
        reader.errors["category"] = "unknown category"
    images = split_list(reader.text("images"))
    if not images and "images" not in reader.errors:
        reader.errors["images"] = "at least one image URL is required"
    try:
        ingredients = parse_ingredients(reader.fields.get("ingredients"))
    except ValueError as exc:
        reader.errors["ingredients"] = str(exc)
        ingredients = []
    price = reader.number("price", minimum=0)
    rating = reader.number("rating", minimum=0, maximum=5)
    reviews_count = reader.integer("reviewsCount")
    servings = reader.integer("servingsPerContainer")
    reader.check()
    product = Product(
        id=reader.text("id") or new_identity(),
        name=reader.text("name"),
        brand=reader.text("brand"),
        category=category,
        price=price,
        rating=rating,
        reviews_count=reviews_count,
        images=images,
        tags=split_list(reader.text("tags")),
        compare_at_price=reader.lenient_number("compareAtPrice"),
        short_description=reader.text("shortDescription"),
        description_html=reader.text("descriptionHtml"),
        ingredients=ingredients,
        servings_per_container=servings,
        directions=reader.text("directions"),
        warnings=reader.text("warnings"),
        allergens=split_list(reader.text("allergens")),
        certifications=split_list(reader.text("certifications")),
        clickbank_hoplink=reader.text("clickbankHoplink"),
        sku=reader.text("sku"),
        country_of_origin=reader.text("countryOfOrigin"),
        last_updated=now_iso(),
    )
    logger.info("Built product %s (%s)", product.id, product.name)
    return product


def build_post(fields: Mapping[str, Any]) -> Post:
    reader = _FieldReader(fields, POST_REQUIRED, POST_OPTIONAL)
    published_at = None
    if "publishedAt" not in reader.errors:
        parsed = parse_timestamp(reader.text("publishedAt"))
        if parsed is None:
            reader.errors["publishedAt"] = "must be a valid date"
        else:
            published_at = format_timestamp(parsed)
    reader.check()
    post = Post(
        id=reader.text("id") or new_identity(),
        title=reader.text("title"),
        excerpt=reader.text("excerpt"),
        body_html=reader.text("bodyHtml"),
        published_at=published_at,
        cover_image=reader.text("coverImage"),
        author=reader.text("author"),
        category=reader.text("category"),
        tags=split_list(reader.text("tags")),
        updated_at=now_iso(),
    )
    logger.info("Built post %s (%s)", post.id, post.title)
    return post


def stage_product(store: LocalStore, product: Product) -> bool:
    return store.append(PENDING_SUPPLEMENTS, product.to_dict())


def stage_post(store: LocalStore, post: Post) -> bool:
    return store.append(PENDING_POSTS, post.to_dict())
