"""Redis client construction and FastAPI dependencies.

Learn: The lifespan in main.py opens two clients — one for data
operations and a dedicated one for the pub/sub subscription (a
subscribed connection can't run regular commands). Both live on
app.state, and route handlers reach them through the dependencies
below, so tests can swap in doubles via app.dependency_overrides.
"""

import redis.asyncio as aioredis
from fastapi import Request


async def create_redis(url: str) -> aioredis.Redis:
    """Open a Redis client and verify the connection."""
    client = aioredis.from_url(
        url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    return client


async def close_redis(client: aioredis.Redis | None) -> None:
    if client is not None:
        await client.aclose()


def get_redis(request: Request) -> aioredis.Redis:
    """FastAPI dependency — the data-operations client."""
    client = getattr(request.app.state, "redis", None)
    if client is None:
        raise RuntimeError("Redis not initialized. Is the lifespan running?")
    return client
