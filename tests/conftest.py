"""Shared fixtures: stub gateway transport and an in-memory Redis double."""

import json
import os

os.environ.setdefault("CASHFREE_APP_ID", "test-app-id")
os.environ.setdefault("CASHFREE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("CASHFREE_API_ENV", "sandbox")
os.environ.setdefault("FRONTEND_URL", "http://localhost:5173")
os.environ["TRACING_ENABLED"] = "false"

import httpx
import pytest
from fastapi.testclient import TestClient

from innovatex.common.config import settings
from innovatex.common.idempotency import IdempotencyCache
from innovatex.common.rate_limit import FixedWindowLimiter
from innovatex.services.payment_proxy.main import (
    app,
    get_idempotency_cache,
    get_payment_service,
    get_rate_limiter,
)
from innovatex.services.payment_proxy.service import PaymentOrderService


class InMemoryPipeline:
    def __init__(self, store: "InMemoryRedis") -> None:
        self.store = store
        self.commands: list[tuple[str, tuple]] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.commands.clear()

    def incr(self, key):
        self.commands.append(("incr", (key,)))
        return self

    def expire(self, key, seconds):
        self.commands.append(("expire", (key, seconds)))
        return self

    async def execute(self):
        results = [getattr(self.store, f"_{name}")(*args) for name, args in self.commands]
        self.commands.clear()
        return results


class InMemoryRedis:
    """Implements the handful of async Redis commands the proxy uses."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def _incr(self, key):
        value = int(self.values.get(key, 0)) + 1
        self.values[key] = str(value)
        return value

    def _expire(self, key, seconds):
        self.ttls[key] = seconds
        return True

    def pipeline(self, transaction=True):
        return InMemoryPipeline(self)

    async def get(self, key):
        return self.values.get(key)

    async def setex(self, key, seconds, value):
        self.values[key] = value
        self.ttls[key] = seconds


class StubGateway:
    """Records outbound requests and answers with a configurable response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body = {
            "cf_order_id": "2149460581",
            "order_id": "INNOVATEX-SVR-1",
            "order_status": "ACTIVE",
            "payment_session_id": "session_abc123",
        }
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, content=self.body)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def gateway() -> StubGateway:
    return StubGateway()


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def payment_service(gateway) -> PaymentOrderService:
    return PaymentOrderService(settings, transport=httpx.MockTransport(gateway))


@pytest.fixture
def client(payment_service, fake_redis):
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    app.dependency_overrides[get_rate_limiter] = lambda: FixedWindowLimiter(fake_redis, 20, 900)
    app.dependency_overrides[get_idempotency_cache] = lambda: IdempotencyCache(fake_redis, 60)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def order_body() -> dict:
    return {
        "order_amount": "499.00",
        "customer_details": {
            "customer_id": "team-rocket",
            "customer_name": "Asha Rao",
            "customer_email": "asha@example.com",
            "customer_phone": "9876543210",
        },
    }
