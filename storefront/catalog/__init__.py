"""Catalog records and seed data helpers."""

from __future__ import annotations

import pathlib

import yaml

CATEGORIES_PATH = pathlib.Path(__file__).with_name("categories.yml")


def load_categories(path: pathlib.Path = CATEGORIES_PATH) -> tuple[str, ...]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    return tuple(str(item) for item in data)
