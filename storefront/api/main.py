"""FastAPI application serving the storefront pages, JSON API and admin tools."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import urlencode

from fastapi import Body, Depends, FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from pydantic import BaseModel

from storefront.config import Settings, load_settings
from storefront.logic.builder import ValidationError
from storefront.logic.export import EXPORT_FILENAMES
from storefront.logic.query import QueryCriteria, SortKey, featured
from storefront.pages.render import render_page
from storefront.session import CatalogPage, NotFound, StorefrontSession
from storefront.utils.admin import is_admin, warn_if_placeholder
from storefront.utils.webhook import ContactMessage, NewsletterSignup, Outcome, WebhookClient

logger = logging.getLogger(__name__)

SORT_LABELS = [
    ("rating_desc", "Top rated"),
    ("price_asc", "Price: low to high"),
    ("price_desc", "Price: high to low"),
    ("newest", "Newest"),
]

FORM_MESSAGES = {
    ("contact", Outcome.SENT): "Thank you for your message! We will get back to you soon.",
    ("contact", Outcome.FAILED): "Something went wrong. Please try again.",
    ("newsletter", Outcome.SENT): "Thanks for subscribing! Please check your inbox.",
    ("newsletter", Outcome.FAILED): "Could not subscribe. Please try again.",
}


ADMIN_REDIRECT_DELAY = 1


@asynccontextmanager
async def lifespan(app: FastAPI):
    provider = app.dependency_overrides.get(get_settings, get_settings)
    warn_if_placeholder(provider())
    yield


app = FastAPI(title="health42 storefront", lifespan=lifespan)


class FormResponse(BaseModel):
    status: str
    message: str


def get_settings() -> Settings:
    return load_settings()


def get_session(settings: Settings = Depends(get_settings)) -> StorefrontSession:
    return StorefrontSession.from_settings(settings)


def get_webhook(settings: Settings = Depends(get_settings)) -> WebhookClient:
    return WebhookClient(settings.webhook_url, source=settings.webhook_source, timeout=settings.http_timeout)


def _criteria(category: str | None, q: str | None, sort: str | None) -> QueryCriteria:
    return QueryCriteria(category=category or "", search_term=q or "", sort=SortKey.parse(sort))


def _catalog_json(view: CatalogPage) -> dict[str, Any]:
    return {
        "items": [item.to_dict() for item in view.items],
        "page": view.page,
        "totalPages": view.total_pages,
        "totalResults": view.total_results,
        "controls": [{"number": c.number, "active": c.active} for c in view.controls],
    }


def _notices(session: StorefrontSession) -> list[dict[str, str]]:
    return [{"message": n.message, "level": n.level} for n in session.notices]


def _not_found(settings: Settings, heading: str, exc: NotFound) -> HTMLResponse:
    html = render_page("not_found.html", settings, {"heading": heading, "message": str(exc)})
    return HTMLResponse(html, status_code=404)


def _require_admin(key: str | None, settings: Settings) -> HTMLResponse | None:
    if is_admin(key, settings):
        return None
    logger.warning("Rejected admin request with invalid key")
    html = render_page("admin_denied.html", settings, {"redirect_to": "/", "delay": ADMIN_REDIRECT_DELAY})
    return HTMLResponse(html, status_code=403, headers={"Refresh": f"{ADMIN_REDIRECT_DELAY}; url=/"})


def _staged_response(session: StorefrontSession, record: dict[str, Any], saved: bool) -> JSONResponse:
    # 507: the record was valid but local storage refused it
    status_code = 201 if saved else 507
    return JSONResponse({"record": record, "notices": _notices(session)}, status_code=status_code)


@app.get("/", response_class=HTMLResponse)
async def home(session: StorefrontSession = Depends(get_session)) -> HTMLResponse:
    products = await session.load_products()
    blog = await session.blog()
    html = render_page(
        "home.html",
        session.settings,
        {"featured": featured(products), "latest": blog.latest(), "notices": session.notices},
    )
    return HTMLResponse(html)


@app.get("/catalog", response_class=HTMLResponse)
async def catalog_page(
    category: str | None = None,
    q: str | None = None,
    sort: str | None = None,
    page: int = 1,
    session: StorefrontSession = Depends(get_session),
) -> HTMLResponse:
    catalog = await session.catalog()
    criteria = _criteria(category, q, sort)
    view = catalog.apply(criteria, page=page)
    params = {"category": criteria.category, "q": criteria.search_term, "sort": sort if criteria.sort else ""}
    query_string = urlencode({k: v for k, v in params.items() if v})
    html = render_page(
        "catalog.html",
        session.settings,
        {
            "view": view,
            "categories": session.settings.categories,
            "sort_options": SORT_LABELS,
            "page_url": f"./catalog?{query_string}&" if query_string else "./catalog?",
            "notices": session.notices,
        },
    )
    return HTMLResponse(html)


@app.get("/supplement", response_class=HTMLResponse)
async def supplement_page(id: str | None = None, session: StorefrontSession = Depends(get_session)) -> HTMLResponse:
    try:
        supplement = await session.find_product(id)
    except NotFound as exc:
        return _not_found(session.settings, "Supplement not found", exc)
    html = render_page(
        "supplement.html",
        session.settings,
        {"supplement": supplement, "click_url": f"./go?{urlencode({'id': supplement.id})}"},
    )
    return HTMLResponse(html)


@app.get("/go")
async def outbound(id: str | None = None, session: StorefrontSession = Depends(get_session)) -> Response:
    try:
        supplement = await session.find_product(id)
    except NotFound as exc:
        return _not_found(session.settings, "Supplement not found", exc)
    event = session.record_click(supplement)
    return RedirectResponse(event.target_url, status_code=302)


@app.get("/blog", response_class=HTMLResponse)
async def blog_page(page: int = 1, session: StorefrontSession = Depends(get_session)) -> HTMLResponse:
    blog = await session.blog()
    html = render_page("blog.html", session.settings, {"page": blog.page(page), "notices": session.notices})
    return HTMLResponse(html)


@app.get("/post", response_class=HTMLResponse)
async def post_page(id: str | None = None, session: StorefrontSession = Depends(get_session)) -> HTMLResponse:
    try:
        post = await session.find_post(id)
    except NotFound as exc:
        return _not_found(session.settings, "Post not found", exc)
    return HTMLResponse(render_page("post.html", session.settings, {"post": post}))


@app.get("/api/supplements")
async def list_supplements(
    category: str | None = None,
    q: str | None = None,
    sort: str | None = None,
    page: int = 1,
    session: StorefrontSession = Depends(get_session),
) -> JSONResponse:
    catalog = await session.catalog()
    view = catalog.apply(_criteria(category, q, sort), page=page)
    return JSONResponse({**_catalog_json(view), "notices": _notices(session)})


@app.get("/api/supplements/{product_id}")
async def get_supplement(product_id: str, session: StorefrontSession = Depends(get_session)) -> JSONResponse:
    try:
        supplement = await session.find_product(product_id)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return JSONResponse(supplement.to_dict())


@app.post("/api/supplements/{product_id}/click")
async def record_click(product_id: str, session: StorefrontSession = Depends(get_session)) -> JSONResponse:
    try:
        supplement = await session.find_product(product_id)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return JSONResponse(session.record_click(supplement).to_dict())


@app.get("/api/posts")
async def list_posts(page: int = 1, session: StorefrontSession = Depends(get_session)) -> JSONResponse:
    blog = await session.blog()
    current = blog.page(page)
    return JSONResponse(
        {
            "items": [post.to_dict() for post in current.items],
            "page": current.page,
            "totalPages": current.total_pages,
            "totalResults": current.total_items,
            "notices": _notices(session),
        }
    )


@app.get("/api/posts/{post_id}")
async def get_post(post_id: str, session: StorefrontSession = Depends(get_session)) -> JSONResponse:
    try:
        post = await session.find_post(post_id)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return JSONResponse(post.to_dict())


def _form_response(form: str, outcome: Outcome) -> JSONResponse:
    if outcome is Outcome.IGNORED:
        return JSONResponse(FormResponse(status=outcome.value, message="").model_dump(), status_code=202)
    status_code = 200 if outcome is Outcome.SENT else 502
    body = FormResponse(status=outcome.value, message=FORM_MESSAGES[(form, outcome)])
    return JSONResponse(body.model_dump(), status_code=status_code)


@app.post("/contact")
async def contact(payload: ContactMessage, webhook: WebhookClient = Depends(get_webhook)) -> JSONResponse:
    return _form_response("contact", await webhook.send_contact(payload))


@app.post("/newsletter")
async def newsletter(payload: NewsletterSignup, webhook: WebhookClient = Depends(get_webhook)) -> JSONResponse:
    return _form_response("newsletter", await webhook.send_newsletter(payload))


@app.post("/admin/supplements")
async def admin_add_supplement(
    fields: dict[str, Any] = Body(...),
    key: str | None = Query(None),
    session: StorefrontSession = Depends(get_session),
) -> Response:
    denied = _require_admin(key, session.settings)
    if denied:
        return denied
    try:
        product, saved = session.stage_product(fields)
    except ValidationError as exc:
        return JSONResponse({"errors": exc.errors}, status_code=422)
    return _staged_response(session, product.to_dict(), saved)


@app.post("/admin/posts")
async def admin_add_post(
    fields: dict[str, Any] = Body(...),
    key: str | None = Query(None),
    session: StorefrontSession = Depends(get_session),
) -> Response:
    denied = _require_admin(key, session.settings)
    if denied:
        return denied
    try:
        post, saved = session.stage_post(fields)
    except ValidationError as exc:
        return JSONResponse({"errors": exc.errors}, status_code=422)
    return _staged_response(session, post.to_dict(), saved)


@app.get("/admin/export/analytics.csv")
async def admin_export_analytics(
    key: str | None = Query(None),
    session: StorefrontSession = Depends(get_session),
) -> Response:
    denied = _require_admin(key, session.settings)
    if denied:
        return denied
    content = session.export_analytics()
    if content is None:
        return JSONResponse({"notices": _notices(session)}, status_code=404)
    return Response(
        content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAMES["analytics"]}"'},
    )


@app.get("/admin/export/{kind}")
async def admin_export(
    kind: str,
    key: str | None = Query(None),
    session: StorefrontSession = Depends(get_session),
) -> Response:
    denied = _require_admin(key, session.settings)
    if denied:
        return denied
    if kind not in ("supplements", "posts"):
        raise HTTPException(status_code=404, detail=f"Unknown export {kind}")
    content = await session.export_json(kind)
    return Response(
        content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAMES[kind]}"'},
    )
