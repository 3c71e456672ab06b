"""Runtime settings."""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass, field

from dotenv import load_dotenv

from storefront.catalog import load_categories

PLACEHOLDER_ADMIN_KEY = "CHANGE_ME_LONG_RANDOM_VALUE"


@dataclass(slots=True)
class Settings:
    brand: str = "health42"
    support_email: str = "support@health42.net"
    admin_key: str = PLACEHOLDER_ADMIN_KEY
    webhook_url: str | None = None
    webhook_source: str = "health42_site"
    supplements_url: str = "data/supplements.json"
    posts_url: str = "data/posts.json"
    store_dir: pathlib.Path = pathlib.Path(".storefront")
    store_quota_bytes: int = 5_000_000
    supplements_per_page: int = 12
    posts_per_page: int = 9
    search_debounce: float = 0.3
    http_timeout: float = 15.0
    categories: tuple[str, ...] = field(default_factory=load_categories)


def load_settings() -> Settings:
    """Build settings from the environment (and a ``.env`` file if present)."""
    load_dotenv()
    env = os.environ
    return Settings(
        brand=env.get("STOREFRONT_BRAND", "health42"),
        support_email=env.get("SUPPORT_EMAIL", "support@health42.net"),
        admin_key=env.get("ADMIN_KEY", PLACEHOLDER_ADMIN_KEY),
        webhook_url=env.get("WEBHOOK_URL") or None,
        webhook_source=env.get("WEBHOOK_SOURCE", "health42_site"),
        supplements_url=env.get("BASELINE_SUPPLEMENTS_URL", "data/supplements.json"),
        posts_url=env.get("BASELINE_POSTS_URL", "data/posts.json"),
        store_dir=pathlib.Path(env.get("STORE_DIR", ".storefront")),
        store_quota_bytes=int(env.get("STORE_QUOTA_BYTES", 5_000_000)),
        supplements_per_page=int(env.get("SUPPLEMENTS_PER_PAGE", 12)),
        posts_per_page=int(env.get("POSTS_PER_PAGE", 9)),
        search_debounce=int(env.get("SEARCH_DEBOUNCE_MS", 300)) / 1000,
        http_timeout=float(env.get("HTTP_TIMEOUT", 15.0)),
    )
