"""Per-load session state: canonical collections, views and notices."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping

from storefront.catalog.baseline import BaselineSource, parse_records
from storefront.catalog.models import AnalyticsEvent, Post, Product
from storefront.config import Settings
from storefront.logic import builder
from storefront.logic.export import analytics_csv, export_json
from storefront.logic.merge import merge
from storefront.logic.paginate import Page, PageControl, paginate
from storefront.logic.query import QueryCriteria, SortKey, query, query_posts
from storefront.store.local import ANALYTICS, PENDING_POSTS, PENDING_SUPPLEMENTS, LocalStore
from storefront.utils.dates import now_iso
from storefront.utils.debounce import Debouncer

logger = logging.getLogger(__name__)


class NotFound(LookupError):
    pass


@dataclass(slots=True, frozen=True)
class Notice:
    message: str
    level: str = "success"


@dataclass(slots=True)
class CatalogPage:
    """Render-agnostic view of one catalog page."""

    items: list[Product]
    page: int
    total_pages: int
    total_results: int
    controls: list[PageControl]
    criteria: QueryCriteria

    @property
    def summary(self) -> str:
        return f"{self.total_results} results found"


class StorefrontSession:
    def __init__(self, settings: Settings, store: LocalStore, source: BaselineSource) -> None:
        self.settings = settings
        self.store = store
        self.source = source
        self.notices: list[Notice] = []
        self._products: list[Product] | None = None
        self._posts: list[Post] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> StorefrontSession:
        store = LocalStore(settings.store_dir, quota_bytes=settings.store_quota_bytes)
        source = BaselineSource(settings.supplements_url, settings.posts_url, timeout=settings.http_timeout)
        return cls(settings, store, source)

    def notify(self, message: str, level: str = "success") -> None:
        self.notices.append(Notice(message, level))

    async def load_products(self) -> list[Product]:
        if self._products is None:
            baseline, staged = await asyncio.gather(
                self.source.fetch_products(),
                self._staged(PENDING_SUPPLEMENTS, Product.from_dict),
            )
            if self.source.supplements_url in self.source.failures:
                self.notify("Could not load the supplement catalog.", "danger")
            self._products = merge(baseline, staged)
            logger.info("Loaded %s supplements (%s staged)", len(self._products), len(staged))
        return self._products

    async def load_posts(self) -> list[Post]:
        if self._posts is None:
            baseline, staged = await asyncio.gather(
                self.source.fetch_posts(),
                self._staged(PENDING_POSTS, Post.from_dict),
            )
            if self.source.posts_url in self.source.failures:
                self.notify("Could not load blog posts.", "danger")
            self._posts = merge(baseline, staged)
            logger.info("Loaded %s posts (%s staged)", len(self._posts), len(staged))
        return self._posts

    async def _staged(self, key: str, factory: Callable[[dict[str, Any]], Any]) -> list[Any]:
        return parse_records(self.store.get(key, []), factory)

    async def find_product(self, product_id: str | None) -> Product:
        if not product_id:
            raise NotFound("No supplement ID was provided.")
        for product in await self.load_products():
            if product.id == product_id:
                return product
        raise NotFound("The requested supplement could not be found.")

    async def find_post(self, post_id: str | None) -> Post:
        if not post_id:
            raise NotFound("No post ID was provided.")
        for post in await self.load_posts():
            if post.id == post_id:
                return post
        raise NotFound("The requested post could not be found.")

    def record_click(self, product: Product) -> AnalyticsEvent:
        event = AnalyticsEvent(product_id=product.id, target_url=product.affiliate_url(), timestamp=now_iso())
        if not self.store.append(ANALYTICS, event.to_dict()):
            logger.warning("Click on %s was not recorded", product.id)
        return event

    def stage_product(self, fields: Mapping[str, Any]) -> tuple[Product, bool]:
        """Build and stage a supplement, returning it with whether the save went through."""
        product = builder.build_product(fields, categories=self.settings.categories)
        saved = builder.stage_product(self.store, product)
        if saved:
            self.notify("Supplement saved locally. Export to update the live data.")
        else:
            self.notify("Could not save the supplement locally.", "danger")
        self._products = None
        return product, saved

    def stage_post(self, fields: Mapping[str, Any]) -> tuple[Post, bool]:
        post = builder.build_post(fields)
        saved = builder.stage_post(self.store, post)
        if saved:
            self.notify("Post saved locally. Export to update the live data.")
        else:
            self.notify("Could not save the post locally.", "danger")
        self._posts = None
        return post, saved

    async def export_json(self, kind: str) -> str:
        if kind == "supplements":
            records: list[Any] = await self.load_products()
        elif kind == "posts":
            records = await self.load_posts()
        else:
            raise NotFound(f"Unknown export {kind!r}")
        self.notify(f"{kind}.json has been downloaded.")
        return export_json(records)

    def export_analytics(self) -> str | None:
        events = parse_records(self.store.get(ANALYTICS, []), AnalyticsEvent.from_dict)
        content = analytics_csv(events)
        if content is None:
            self.notify("No analytics data to export.", "danger")
        return content

    async def catalog(self) -> CatalogView:
        return CatalogView(await self.load_products(), self.settings)

    async def blog(self) -> BlogView:
        return BlogView(await self.load_posts(), self.settings.posts_per_page)


class CatalogView:
    """Filter/sort/page state over a canonical collection it never mutates."""

    def __init__(self, products: list[Product], settings: Settings) -> None:
        self.products = products
        self.page_size = settings.supplements_per_page
        self.criteria = QueryCriteria()
        self.page = 1
        self.results: list[Product] = list(products)
        self._debouncer = Debouncer(settings.search_debounce)

    def apply(self, criteria: QueryCriteria | None = None, page: int = 1) -> CatalogPage:
        if criteria is not None:
            self.criteria = criteria
        self.results = query(self.products, self.criteria)
        self.page = page
        return self.view()

    def set_category(self, category: str) -> CatalogPage:
        return self.apply(replace(self.criteria, category=category))

    def set_sort(self, sort: SortKey | str | None) -> CatalogPage:
        if not isinstance(sort, SortKey):
            sort = SortKey.parse(sort)
        return self.apply(replace(self.criteria, sort=sort))

    def search(self, term: str) -> asyncio.Task:
        """Debounced: only the last term typed within the delay is applied."""
        return self._debouncer.schedule(self._apply_search, term)

    async def settle(self) -> CatalogPage:
        await self._debouncer.flush()
        return self.view()

    def _apply_search(self, term: str) -> CatalogPage:
        return self.apply(replace(self.criteria, search_term=term))

    def go_to_page(self, page: int) -> CatalogPage:
        self.page = page
        return self.view()

    def view(self) -> CatalogPage:
        current: Page[Product] = paginate(self.results, self.page, self.page_size)
        return CatalogPage(
            items=current.items,
            page=current.page,
            total_pages=current.total_pages,
            total_results=current.total_items,
            controls=current.controls(),
            criteria=self.criteria,
        )


class BlogView:
    def __init__(self, posts: list[Post], page_size: int) -> None:
        self.posts = query_posts(posts)
        self.page_size = page_size

    def page(self, number: int = 1) -> Page[Post]:
        return paginate(self.posts, number, self.page_size)

    def latest(self, limit: int = 3) -> list[Post]:
        return self.posts[:limit]
