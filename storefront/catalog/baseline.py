"""Baseline dataset loading."""

from __future__ import annotations

import asyncio
import json
import logging
import pathlib
from typing import Any, Callable, TypeVar

import httpx

from storefront.catalog.models import Post, Product

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FetchFailure(RuntimeError):
    pass


class BaselineSource:
    """Reads the seed JSON documents from http(s) URLs or local paths."""

    def __init__(
        self,
        supplements_url: str,
        posts_url: str,
        *,
        session: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.supplements_url = supplements_url
        self.posts_url = posts_url
        self._session = session
        self._timeout = timeout
        self.failures: set[str] = set()

    async def fetch_products(self) -> list[Product]:
        return parse_records(await self.fetch(self.supplements_url), Product.from_dict)

    async def fetch_posts(self) -> list[Post]:
        return parse_records(await self.fetch(self.posts_url), Post.from_dict)

    async def fetch(self, location: str) -> list[Any]:
        """Fetch one document; failures degrade to an empty list."""
        try:
            data = await self.fetch_document(location)
        except FetchFailure as exc:
            logger.warning("Baseline fetch failed for %s: %s", location, exc)
            self.failures.add(location)
            return []
        if not isinstance(data, list):
            logger.warning("Baseline %s is not a JSON array; ignoring", location)
            self.failures.add(location)
            return []
        return data

    async def fetch_document(self, location: str) -> Any:
        if location.startswith(("http://", "https://")):
            return await self._get_json(location)
        return await asyncio.get_running_loop().run_in_executor(None, _read_json, pathlib.Path(location))

    async def _get_json(self, url: str) -> Any:
        session = self._session or httpx.AsyncClient(timeout=self._timeout)
        try:
            response = await session.get(url)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise FetchFailure(str(exc)) from exc
        except ValueError as exc:
            raise FetchFailure(f"invalid JSON from {url}") from exc
        finally:
            if self._session is None:
                await session.aclose()


def _read_json(path: pathlib.Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise FetchFailure(f"could not read {path}") from exc
    except ValueError as exc:
        raise FetchFailure(f"invalid JSON in {path}") from exc


def parse_records(items: list[Any], factory: Callable[[dict[str, Any]], T]) -> list[T]:
    records: list[T] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Skipping record %s: not an object", index)
            continue
        try:
            records.append(factory(item))
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping record %s: %s", index, exc)
    return records
