import json

import httpx
import pytest
import respx

from storefront.utils.webhook import ContactMessage, NewsletterSignup, Outcome, WebhookClient

HOOK_URL = "https://hooks.example.com/health42"


@pytest.mark.asyncio
async def test_contact_message_envelope():
    async with respx.mock(assert_all_called=True) as router:
        route = router.post(HOOK_URL).mock(return_value=httpx.Response(200, json={"ok": True}))
        async with httpx.AsyncClient() as session:
            client = WebhookClient(HOOK_URL, session=session)
            outcome = await client.send_contact(
                ContactMessage(name="Ann", email="ann@example.com", subject="Hi", message="Hello")
            )
    assert outcome is Outcome.SENT
    payload = json.loads(route.calls.last.request.content)
    assert payload == {
        "type": "contact_message",
        "source": "health42_site",
        "name": "Ann",
        "email": "ann@example.com",
        "subject": "Hi",
        "message": "Hello",
    }


@pytest.mark.asyncio
async def test_non_2xx_is_failure_without_retry():
    async with respx.mock(assert_all_called=True) as router:
        route = router.post(HOOK_URL).mock(return_value=httpx.Response(500))
        async with httpx.AsyncClient() as session:
            client = WebhookClient(HOOK_URL, session=session)
            outcome = await client.send_newsletter(NewsletterSignup(email="bob@example.com"))
    assert outcome is Outcome.FAILED
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_transport_error_is_failure():
    async with respx.mock(assert_all_called=True) as router:
        router.post(HOOK_URL).mock(side_effect=httpx.ConnectError("down"))
        async with httpx.AsyncClient() as session:
            client = WebhookClient(HOOK_URL, session=session)
            assert await client.submit({"type": "newsletter_signup"}) is False


@pytest.mark.asyncio
async def test_honeypot_skips_request():
    async with respx.mock(assert_all_called=False) as router:
        route = router.post(HOOK_URL).mock(return_value=httpx.Response(200))
        async with httpx.AsyncClient() as session:
            client = WebhookClient(HOOK_URL, session=session)
            outcome = await client.send_newsletter(NewsletterSignup(email="bot@example.com", website="spam"))
    assert outcome is Outcome.IGNORED
    assert not route.called
