from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from storefront.api import main as api
from storefront.catalog.baseline import BaselineSource
from storefront.catalog.models import Post, Product
from storefront.config import Settings
from storefront.session import StorefrontSession
from storefront.store.local import LocalStore

FIXTURES = Path(__file__).parent / "fixtures" / "data"


def make_product(product_id: str, **overrides) -> Product:
    values = {
        "id": product_id,
        "name": f"Product {product_id}",
        "brand": "Acme",
        "category": "Nutrition",
        "price": 10.0,
        "rating": 4.0,
        "reviews_count": 1,
        "images": [f"https://img.example.com/{product_id}.jpg"],
        "last_updated": "2024-01-01",
    }
    values.update(overrides)
    return Product(**values)


def make_post(post_id: str, **overrides) -> Post:
    values = {
        "id": post_id,
        "title": f"Post {post_id}",
        "excerpt": "Excerpt",
        "body_html": "<p>Body</p>",
        "published_at": "2024-01-01",
    }
    values.update(overrides)
    return Post(**values)


def product_fields(**overrides) -> dict[str, str]:
    fields = {
        "name": "Zinc Boost",
        "brand": "Health42 Labs",
        "category": "Dietary Supplements",
        "price": "19.99",
        "rating": "4.5",
        "reviewsCount": "12",
        "servingsPerContainer": "60",
        "images": "https://img.example.com/a.jpg, https://img.example.com/b.jpg",
    }
    fields.update(overrides)
    return fields


def post_fields(**overrides) -> dict[str, str]:
    fields = {
        "title": "Hello",
        "excerpt": "Short",
        "bodyHtml": "<p>Long</p>",
        "publishedAt": "2024-06-01",
    }
    fields.update(overrides)
    return fields


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        admin_key="secret-key",
        supplements_url=str(FIXTURES / "supplements.json"),
        posts_url=str(FIXTURES / "posts.json"),
        store_dir=tmp_path / "store",
        supplements_per_page=2,
        posts_per_page=1,
        search_debounce=0.01,
    )


@pytest.fixture()
def store(settings):
    return LocalStore(settings.store_dir, quota_bytes=settings.store_quota_bytes)


@pytest.fixture()
def session(settings, store):
    source = BaselineSource(settings.supplements_url, settings.posts_url)
    return StorefrontSession(settings, store, source)


@pytest.fixture()
def client(settings):
    api.app.dependency_overrides[api.get_settings] = lambda: settings
    try:
        with TestClient(api.app) as test_client:
            yield test_client
    finally:
        api.app.dependency_overrides.clear()
