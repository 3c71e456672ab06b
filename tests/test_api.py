import logging

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from storefront.api import main as api
from storefront.config import PLACEHOLDER_ADMIN_KEY
from storefront.utils.admin import is_admin

from conftest import post_fields, product_fields


def test_catalog_json(client):
    response = client.get("/api/supplements", params={"sort": "price_desc"})
    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["items"]] == ["prodentim", "java-burn"]
    assert body["totalPages"] == 2
    assert body["controls"] == [{"number": 1, "active": True}, {"number": 2, "active": False}]


def test_catalog_json_search(client):
    body = client.get("/api/supplements", params={"q": "COLLAGEN"}).json()
    assert [item["id"] for item in body["items"]] == ["glow-collagen"]
    assert body["totalPages"] == 1
    assert body["controls"] == []


def test_catalog_page_renders(client):
    response = client.get("/catalog", params={"category": "Beauty"})
    assert response.status_code == 200
    assert "Glow Collagen" in response.text
    assert "1 results found" in response.text


def test_home_page(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "ProDentim" in response.text
    assert "Do Oral Probiotics Work?" in response.text


def test_supplement_detail_and_not_found(client):
    response = client.get("/supplement", params={"id": "prodentim"})
    assert response.status_code == 200
    assert "$69.00" in response.text
    assert "$99.00" in response.text
    missing = client.get("/supplement", params={"id": "nope"})
    assert missing.status_code == 404
    assert "Supplement not found" in missing.text
    assert client.get("/supplement").status_code == 404


def test_post_detail_and_api(client):
    assert "Collagen Basics" in client.get("/post", params={"id": "collagen-basics"}).text
    assert client.get("/post", params={"id": "nope"}).status_code == 404
    assert client.get("/api/posts/collagen-basics").json()["title"] == "Collagen Basics"
    assert client.get("/api/posts/nope").status_code == 404
    assert client.get("/api/posts", params={"page": 2}).json()["items"][0]["id"] == "collagen-basics"


def test_blog_page(client):
    response = client.get("/blog")
    assert response.status_code == 200
    assert "Do Oral Probiotics Work?" in response.text


def test_outbound_click_is_recorded(client, settings):
    response = client.get("/go", params={"id": "java-burn"}, follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"].endswith("tid=product_java-burn")
    export = client.get("/admin/export/analytics.csv", params={"key": settings.admin_key})
    assert export.status_code == 200
    assert export.text.startswith("id,url,timestamp")


def test_click_api(client):
    response = client.post("/api/supplements/prodentim/click")
    assert response.json()["id"] == "prodentim"
    assert client.post("/api/supplements/nope/click").status_code == 404


def test_admin_requires_key(client):
    response = client.post("/admin/supplements", params={"key": "wrong"}, json=product_fields())
    assert response.status_code == 403
    assert response.headers["refresh"] == "1; url=/"
    assert "Invalid admin key." in response.text
    assert '<meta http-equiv="refresh" content="1;url=/">' in response.text
    assert client.get("/admin/export/supplements").status_code == 403


def test_admin_add_supplement_then_export(client, settings):
    response = client.post(
        "/admin/supplements",
        params={"key": settings.admin_key},
        json=product_fields(id="zinc-boost", tags="Zinc-Boost"),
    )
    assert response.status_code == 201
    assert response.json()["record"]["id"] == "zinc-boost"
    export = client.get("/admin/export/supplements", params={"key": settings.admin_key})
    assert export.headers["content-disposition"] == 'attachment; filename="supplements.json"'
    assert {item["id"] for item in export.json()} == {"zinc-boost", "prodentim", "glow-collagen", "java-burn"}
    body = client.get("/api/supplements", params={"q": "zinc"}).json()
    assert [item["id"] for item in body["items"]] == ["zinc-boost"]


def test_admin_validation_errors(client, settings):
    response = client.post("/admin/supplements", params={"key": settings.admin_key}, json=product_fields(price="abc"))
    assert response.status_code == 422
    assert response.json() == {"errors": {"price": "must be a number"}}
    response = client.post("/admin/posts", params={"key": settings.admin_key}, json=post_fields(publishedAt="soon"))
    assert response.status_code == 422


def test_admin_add_post(client, settings):
    response = client.post("/admin/posts", params={"key": settings.admin_key}, json=post_fields(id="new-post"))
    assert response.status_code == 201
    assert client.get("/api/posts/new-post").json()["publishedAt"] == "2024-06-01T00:00:00.000Z"


def test_empty_analytics_export(client, settings):
    response = client.get("/admin/export/analytics.csv", params={"key": settings.admin_key})
    assert response.status_code == 404
    assert response.json()["notices"][0]["message"] == "No analytics data to export."


def test_contact_form_logs_without_webhook(client, caplog):
    caplog.set_level(logging.INFO, logger="storefront.utils.webhook")
    response = client.post(
        "/contact", json={"name": "Ann", "email": "ann@example.com", "message": "Please call me back"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "sent"
    assert "Please call me back" in caplog.text
    assert "ann@example.com" in caplog.text


def test_newsletter_failure_and_honeypot(client, settings):
    settings.webhook_url = "https://hooks.example.com/health42"
    with respx.mock(assert_all_called=True) as router:
        router.post(settings.webhook_url).mock(return_value=httpx.Response(500))
        response = client.post("/newsletter", json={"email": "bob@example.com"})
    assert response.status_code == 502
    assert response.json()["message"] == "Could not subscribe. Please try again."
    ignored = client.post("/newsletter", json={"email": "bot@example.com", "website": "x"})
    assert ignored.status_code == 202


def test_is_admin(settings):
    assert is_admin("secret-key", settings)
    assert not is_admin("", settings)
    assert not is_admin(None, settings)


def test_admin_save_failure_is_reported(client, settings):
    settings.store_quota_bytes = 10
    response = client.post("/admin/supplements", params={"key": settings.admin_key}, json=product_fields(id="zinc-boost"))
    assert response.status_code == 507
    body = response.json()
    assert body["record"]["id"] == "zinc-boost"
    assert body["notices"] == [{"message": "Could not save the supplement locally.", "level": "danger"}]
    assert client.get("/api/supplements/zinc-boost").status_code == 404
    response = client.post("/admin/posts", params={"key": settings.admin_key}, json=post_fields(id="new-post"))
    assert response.status_code == 507
    assert response.json()["notices"][0]["level"] == "danger"


@pytest.mark.parametrize("admin_key, warned", [(PLACEHOLDER_ADMIN_KEY, True), ("secret-key", False)])
def test_startup_checks_configured_admin_key(settings, caplog, admin_key, warned):
    caplog.set_level(logging.WARNING, logger="storefront.utils.admin")
    settings.admin_key = admin_key
    api.app.dependency_overrides[api.get_settings] = lambda: settings
    try:
        with TestClient(api.app):
            pass
    finally:
        api.app.dependency_overrides.clear()
    assert ("placeholder" in caplog.text) is warned
