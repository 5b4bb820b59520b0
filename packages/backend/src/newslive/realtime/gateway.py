"""Realtime gateway — fans new-article events out to WebSocket clients.

Learn: One gateway per process. It holds a single Redis subscription to
the news channel for the lifetime of the app (started and stopped in
the lifespan) and a registry of connected clients. Every channel
message is decoded and re-sent to every client currently connected:
no per-client filtering, no acknowledgement, no replay.

Clients are anything with an async send_text(str) — in production a
Starlette WebSocket, in tests a mock.
"""

import asyncio
import json
import uuid
from typing import Any, Optional, Protocol

import redis.asyncio as aioredis
import structlog
from redis.exceptions import ConnectionError as RedisConnectionError
from starlette.requests import HTTPConnection

from newslive.realtime.events import NEW_ARTICLE

logger = structlog.get_logger()

RESUBSCRIBE_DELAY = 1.0
SEND_TIMEOUT = 5.0


class PushClient(Protocol):
    async def send_text(self, data: str) -> None: ...


class RealtimeGateway:
    """Redis channel listener + connected-client registry."""

    def __init__(self, redis: aioredis.Redis, channel: str):
        self.redis = redis
        self.channel = channel
        self._clients: dict[str, PushClient] = {}
        self._pubsub = None
        self._task: Optional[asyncio.Task] = None

    # ─── Lifecycle ──────────────────────────────────────

    async def start(self) -> None:
        """Subscribe to the channel and start relaying.

        The SUBSCRIBE completes before this returns, so anything
        published afterwards is seen.
        """
        if self._task is not None:
            return
        self._pubsub = self.redis.pubsub(ignore_subscribe_messages=True)
        await self._pubsub.subscribe(self.channel)
        self._task = asyncio.create_task(self._listen(), name="realtime-gateway")
        logger.info("gateway.subscribed", channel=self.channel)

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error("gateway.listener_failed", error=str(e))
            self._task = None
        if self._pubsub is not None:
            # closing the connection drops the subscription server-side
            await self._pubsub.aclose()
            self._pubsub = None
        logger.info("gateway.stopped", channel=self.channel)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ─── Clients ────────────────────────────────────────

    def connect(self, client: PushClient) -> str:
        client_id = uuid.uuid4().hex
        self._clients[client_id] = client
        logger.info("gateway.client_connected", client_id=client_id, clients=self.client_count)
        return client_id

    def disconnect(self, client_id: str) -> None:
        if self._clients.pop(client_id, None) is not None:
            logger.info(
                "gateway.client_disconnected",
                client_id=client_id,
                clients=self.client_count,
            )

    @property
    def client_count(self) -> int:
        return len(self._clients)

    # ─── Relay ──────────────────────────────────────────

    async def _listen(self) -> None:
        while True:
            try:
                async for message in self._pubsub.listen():
                    if message["type"] == "message":
                        await self.handle_message(message["data"])
            except asyncio.CancelledError:
                raise
            except RedisConnectionError as e:
                # redis-py re-subscribes on reconnect; give the server a moment
                logger.warning("gateway.connection_lost", error=str(e))
                await asyncio.sleep(RESUBSCRIBE_DELAY)
            except Exception as e:
                logger.exception("gateway.listen_error", error=str(e))
                await asyncio.sleep(RESUBSCRIBE_DELAY)

    async def handle_message(self, raw: str | bytes) -> int:
        """Decode one channel message and broadcast it. Returns deliveries."""
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("gateway.bad_message", channel=self.channel)
            return 0

        if not isinstance(data, dict) or data.get("type") != NEW_ARTICLE:
            logger.warning(
                "gateway.unknown_message",
                type=data.get("type") if isinstance(data, dict) else None,
            )
            return 0
        article = data.get("article")
        if not isinstance(article, dict):
            logger.warning("gateway.bad_message", channel=self.channel, reason="no article")
            return 0
        return await self.broadcast(NEW_ARTICLE, article)

    async def broadcast(self, event: str, data: Any) -> int:
        """Send one event to every connected client.

        Clients whose send fails, or takes longer than SEND_TIMEOUT, are
        dropped from the registry.
        """
        if not self._clients:
            return 0

        frame = json.dumps({"event": event, "data": data})
        targets = list(self._clients.items())
        results = await asyncio.gather(
            *(
                asyncio.wait_for(client.send_text(frame), SEND_TIMEOUT)
                for _, client in targets
            ),
            return_exceptions=True,
        )

        delivered = 0
        for (client_id, _), result in zip(targets, results):
            if isinstance(result, Exception):
                logger.info(
                    "gateway.send_failed",
                    client_id=client_id,
                    error=str(result) or type(result).__name__,
                )
                self.disconnect(client_id)
            else:
                delivered += 1

        logger.info("gateway.broadcast", event_name=event, delivered=delivered)
        return delivered


def get_gateway(conn: HTTPConnection) -> RealtimeGateway:
    """FastAPI dependency — works for both HTTP and WebSocket routes."""
    gateway = getattr(conn.app.state, "gateway", None)
    if gateway is None:
        raise RuntimeError("Realtime gateway not initialized. Is the lifespan running?")
    return gateway
