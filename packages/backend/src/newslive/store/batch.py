"""Write batches — one round trip for a document plus its indexes.

Learn: Every multi-key write (document + by-date index + category set)
goes through a WriteBatch. Commands are queued on a MULTI/EXEC pipeline
and sent together when the `async with` block exits cleanly; if the
block raises, the queue is discarded and nothing is sent.

Redis does not roll back an EXEC whose individual commands fail, and a
connection dropped mid-flight can leave some commands applied. Readers
therefore tolerate index entries whose document is gone (they are
skipped), and nothing here tries to repair them.
"""

from typing import Any

import redis.asyncio as aioredis
import structlog

logger = structlog.get_logger()


class WriteBatch:
    """Queue Redis commands and execute them as a single unit.

    Usage:
        batch = WriteBatch(redis, "article.create")
        async with batch as pipe:
            pipe.set(...)
            pipe.zadd(...)
        batch.results  # per-command replies, after exit
    """

    def __init__(self, redis: aioredis.Redis, label: str = "batch"):
        self.redis = redis
        self.label = label
        self.results: list[Any] = []
        self._pipe = None

    async def __aenter__(self):
        self._pipe = self.redis.pipeline(transaction=True)
        return self._pipe

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        pipe = self._pipe
        self._pipe = None
        if exc_type is not None:
            await pipe.reset()
            return False
        try:
            self.results = await pipe.execute()
        except Exception as e:
            logger.error("store.batch_failed", batch=self.label, error=str(e))
            raise
        return False
