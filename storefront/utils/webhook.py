"""Outbound webhook for contact messages and newsletter signups."""

from __future__ import annotations

import enum
import logging
from typing import Any

import httpx
from pydantic import BaseModel, EmailStr

logger = logging.getLogger(__name__)


class ContactMessage(BaseModel):
    name: str
    email: EmailStr
    subject: str = ""
    message: str
    website: str = ""


class NewsletterSignup(BaseModel):
    email: EmailStr
    name: str = ""
    website: str = ""


class Outcome(str, enum.Enum):
    SENT = "sent"
    FAILED = "failed"
    IGNORED = "ignored"


class WebhookClient:
    """Single-attempt JSON POSTs; no retries."""

    def __init__(
        self,
        url: str | None,
        *,
        source: str = "health42_site",
        session: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.url = url
        self.source = source
        self._session = session
        self._timeout = timeout

    async def submit(self, payload: dict[str, Any]) -> bool:
        if not self.url:
            logger.info("Webhook (log) → %s", payload)
            return True
        session = self._session or httpx.AsyncClient(timeout=self._timeout)
        try:
            response = await session.post(self.url, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("Webhook %s failed: %s", payload.get("type"), exc)
            return False
        finally:
            if self._session is None:
                await session.aclose()
        if not response.is_success:
            logger.warning("Webhook %s rejected with status %s", payload.get("type"), response.status_code)
            return False
        return True

    async def send_contact(self, message: ContactMessage) -> Outcome:
        if message.website:
            logger.info("Honeypot triggered on contact form")
            return Outcome.IGNORED
        payload = {
            "type": "contact_message",
            "source": self.source,
            "name": message.name,
            "email": message.email,
            "subject": message.subject,
            "message": message.message,
        }
        return Outcome.SENT if await self.submit(payload) else Outcome.FAILED

    async def send_newsletter(self, signup: NewsletterSignup) -> Outcome:
        if signup.website:
            logger.info("Honeypot triggered on newsletter form")
            return Outcome.IGNORED
        payload = {
            "type": "newsletter_signup",
            "source": self.source,
            "email": signup.email,
            "name": signup.name,
        }
        return Outcome.SENT if await self.submit(payload) else Outcome.FAILED
