"""Pytest fixtures for the gatekeeper bridge.

Airtable is faked with httpx.MockTransport and Slack response URLs with a
webhook client factory that records what would have been posted.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from gatekeeper_bot.airtable_client import AirtableClient
from gatekeeper_bot.app import create_app
from gatekeeper_bot.config import BridgeConfig
from gatekeeper_bot.responder import DelayedResponder

TEST_TOKEN = "test-verification-token"
RESPONSE_URL = "https://hooks.slack.test/commands/T000/123/abc"


def make_record(record_id: str, **fields: Any) -> Dict[str, Any]:
    """Airtable API record object with keyword fields ('First_Name' -> 'First Name')."""
    return {
        "id": record_id,
        "createdTime": "2024-01-01T00:00:00.000Z",
        "fields": {name.replace("_", " "): value for name, value in fields.items()},
    }


@dataclass
class WebhookResult:
    status_code: int = 200
    body: str = "ok"


class FakeWebhookClient:
    def __init__(self, recorder: "WebhookRecorder", url: str):
        self.recorder = recorder
        self.url = url

    async def send(self, **kwargs):
        if self.recorder.error:
            raise self.recorder.error
        body = {k: v for k, v in kwargs.items() if v is not None}
        self.recorder.posts.append({"url": self.url, "body": body})
        return WebhookResult(status_code=self.recorder.status_code)


class WebhookRecorder:
    """Stands in for AsyncWebhookClient as a factory."""

    def __init__(self):
        self.posts: List[Dict[str, Any]] = []
        self.status_code = 200
        self.error: Optional[Exception] = None

    def __call__(self, url: str) -> FakeWebhookClient:
        return FakeWebhookClient(self, url)


class FakeAirtable:
    """Serves canned pages of records and remembers every request."""

    def __init__(self):
        self.pages: List[List[Dict[str, Any]]] = [[]]
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.error_body: Any = None
        self.raw_body: Any = None
        self.connect_error = False

    @property
    def records(self) -> List[Dict[str, Any]]:
        return [r for page in self.pages for r in page]

    @records.setter
    def records(self, records: List[Dict[str, Any]]):
        self.pages = [records]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.connect_error:
            raise httpx.ConnectError("connection refused", request=request)
        if self.raw_body is not None:
            return httpx.Response(self.status_code, json=self.raw_body)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json=self.error_body or {})

        index = int(request.url.params.get("offset", "0"))
        body: Dict[str, Any] = {"records": self.pages[index]}
        if index + 1 < len(self.pages):
            body["offset"] = str(index + 1)
        return httpx.Response(200, json=body)

    def client_factory(self, config: BridgeConfig) -> AirtableClient:
        return AirtableClient(config, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def config() -> BridgeConfig:
    return BridgeConfig(
        verification_token=TEST_TOKEN,
        airtable_api_key="keyTEST",
        base_id="appBASE",
        table_id="tblPEOPLE",
        api_url="https://api.airtable.test/v0",
        record_url_base="https://airtable.com",
        view=None,
        timeout=5.0,
        search_fields=("First Name", "Last Name"),
        superuser_ids=("USUPER",),
    )


@pytest.fixture
def airtable() -> FakeAirtable:
    return FakeAirtable()


@pytest.fixture
def webhooks() -> WebhookRecorder:
    return WebhookRecorder()


@pytest.fixture
async def client(config, airtable, webhooks) -> AsyncClient:
    """Async HTTP client against the bridge app (ASGI)."""
    app = create_app(
        config,
        responder=DelayedResponder(webhooks),
        airtable_factory=airtable.client_factory,
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
