"""Change notifier — publishes new-article events to Redis.

Learn: Redis pub/sub is fire-and-forget. If no gateway is subscribed,
the message is lost. That's fine for live UI updates: the article is
already stored and the next list fetch will show it.
"""

import redis.asyncio as aioredis
import structlog
from fastapi import Depends

from newslive.config import settings
from newslive.schemas.article import Article, NewArticleMessage
from newslive.store.connection import get_redis

logger = structlog.get_logger()


class ChangeNotifier:
    """Publishes {"type": "new_article", "article": {...}} messages."""

    def __init__(self, redis: aioredis.Redis, channel: str = settings.news_channel):
        self.redis = redis
        self.channel = channel

    async def publish_new_article(self, article: Article) -> int:
        """Publish the article. Returns how many subscribers received it."""
        payload = NewArticleMessage(article=article).model_dump_json(by_alias=True)
        receivers = await self.redis.publish(self.channel, payload)
        logger.info(
            "article.published",
            article_id=article.id,
            channel=self.channel,
            receivers=receivers,
        )
        return receivers


def get_notifier(redis: aioredis.Redis = Depends(get_redis)) -> ChangeNotifier:
    """FastAPI dependency."""
    return ChangeNotifier(redis)
