"""Shared-secret admin gate."""

from __future__ import annotations

import hmac
import logging

from storefront.config import PLACEHOLDER_ADMIN_KEY, Settings

logger = logging.getLogger(__name__)


def is_admin(key: str | None, settings: Settings) -> bool:
    if not key:
        return False
    return hmac.compare_digest(key.encode("utf-8"), settings.admin_key.encode("utf-8"))


def warn_if_placeholder(settings: Settings) -> bool:
    if settings.admin_key == PLACEHOLDER_ADMIN_KEY:
        logger.warning("ADMIN_KEY is still the placeholder value; set a long random secret")
        return True
    return False
