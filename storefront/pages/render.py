"""HTML rendering of storefront view models."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from storefront.config import Settings
from storefront.utils.dates import format_long_date

TEMPLATE_DIR = Path(__file__).parent / "templates"


def format_currency(amount: float | None) -> str:
    value = amount or 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def rating_stars(rating: float) -> Markup:
    """Five stars; a half point rounds up to a full star."""
    stars = []
    for position in range(1, 6):
        if position - 0.5 <= rating:
            stars.append('<span>&#9733;</span>')
        else:
            stars.append('<span class="star-empty">&#9734;</span>')
    return Markup("".join(stars))


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(enabled_extensions=("html",)),
    )
    env.filters["currency"] = format_currency
    env.filters["stars"] = rating_stars
    env.filters["long_date"] = format_long_date
    return env


ENV = _environment()


def render_page(template: str, settings: Settings, context: dict[str, Any]) -> str:
    merged = {"brand": settings.brand, "support_email": settings.support_email, **context}
    return ENV.get_template(template).render(**merged)
