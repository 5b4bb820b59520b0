"""Test fixtures — an isolated in-memory Redis per test.

Learn: Testing pattern for FastAPI + redis.asyncio:

1. Each test gets its own fakeredis FakeServer. Every client created
   on that server shares its data and its pub/sub bus, exactly like
   several connections to one real Redis.
2. The app reads its Redis client and realtime gateway from app.state,
   so the `client` fixture plugs the fakes in there and removes them
   afterwards. The lifespan never runs (httpx's ASGITransport doesn't
   send lifespan events), so no real Redis is needed.
3. bcrypt runs at its minimum cost factor to keep registration fast.
"""

import asyncio
import json
import os
import uuid

os.environ.setdefault("NEWSLIVE_BCRYPT_ROUNDS", "4")

import fakeredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from newslive.config import settings
from newslive.main import app
from newslive.realtime.gateway import RealtimeGateway


@pytest.fixture()
def redis_server():
    return fakeredis.FakeServer()


@pytest_asyncio.fixture()
async def redis(redis_server):
    """Data-operations client."""
    r = fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True)
    try:
        yield r
    finally:
        await r.aclose()


@pytest_asyncio.fixture()
async def gateway(redis_server):
    """A running gateway subscribed through its own connection."""
    subscriber = fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True)
    gw = RealtimeGateway(subscriber, settings.news_channel)
    await gw.start()
    try:
        yield gw
    finally:
        await gw.stop()
        await subscriber.aclose()


def _install(redis, gateway):
    app.state.redis = redis
    app.state.gateway = gateway


def _uninstall():
    for name in ("redis", "gateway"):
        if hasattr(app.state, name):
            delattr(app.state, name)
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(redis, gateway):
    """HTTP client against the app, backed by the fake Redis."""
    _install(redis, gateway)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    _uninstall()


@pytest_asyncio.fixture()
async def lenient_client(redis, gateway):
    """Like `client`, but unhandled exceptions become 500 responses.

    Learn: By default ASGITransport re-raises app exceptions into the
    test. Tests of the 500 handler need to see the response instead.
    """
    _install(redis, gateway)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    _uninstall()


# ═══════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════


async def register(client, username: str = "alice", password: str = "password_123"):
    """Register a fresh user. Returns (user, auth headers)."""
    email = f"{username}-{uuid.uuid4().hex[:8]}@example.com"
    r = await client.post(
        "/auth/register",
        json={"email": email, "username": username, "password": password},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    return body["user"], {"Authorization": f"Bearer {body['token']}"}


async def create_article(client, headers, **overrides):
    body = {
        "title": "Market Update",
        "content": "Stocks rose sharply today.",
        "category": "Tech",
    }
    body.update(overrides)
    r = await client.post("/articles", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


@pytest_asyncio.fixture()
async def alice(client):
    return await register(client, "alice")


@pytest_asyncio.fixture()
async def bob(client):
    return await register(client, "bob")


class FakePushClient:
    """Stands in for a WebSocket: records every frame it is sent."""

    def __init__(self, fail: bool = False):
        self.frames: asyncio.Queue = asyncio.Queue()
        self.fail = fail

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise ConnectionResetError("socket closed")
        await self.frames.put(json.loads(data))

    async def next_frame(self, timeout: float = 2.0) -> dict:
        return await asyncio.wait_for(self.frames.get(), timeout)


def sample_article(**overrides):
    from datetime import datetime, timezone

    from newslive.schemas.article import Article, Category

    now = datetime.now(timezone.utc)
    fields = dict(
        id="article-1",
        title="Market Update",
        content="Stocks rose sharply today.",
        category=Category.TECH,
        author_id="user-1",
        author_name="alice",
        created_at=now,
        updated_at=now,
    )
    fields.update(overrides)
    return Article(**fields)
