"""Article store — CRUD over article documents and their read indexes.

Learn: Each article is one JSON string at article:{id}. Three read paths
sit on top of it:

1. articles:by_date — ZSET scored by -created_at, so an ascending
   ZRANGE is newest first and pages map directly onto index ranges.
2. articles:category:{name} — plain SETs. A set has no order, so a
   category page loads every member, sorts in memory, then slices.
3. Title search — a linear scan over the by-date index. There is no
   inverted index; fine for a small/medium corpus.

Every write that touches a document and its indexes goes through one
WriteBatch. Reads skip index entries whose document is missing rather
than failing. Concurrent updates to the same article are last write
wins; there is no version check.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import redis.asyncio as aioredis
import structlog

from newslive.schemas.article import Article, Category
from newslive.store import keys
from newslive.store.batch import WriteBatch

logger = structlog.get_logger()

# Fields an update may change. id, author_id, author_name and created_at
# are fixed at creation; updated_at is always set by the store.
UPDATABLE_FIELDS = frozenset({"title", "content", "category"})


def _date_score(created_at: datetime) -> float:
    return -created_at.timestamp() * 1000


def _paginate(items: list, offset: int, limit: int) -> list:
    return items[offset:offset + limit]


class ArticleStore:
    """Article documents plus the by-date, by-category and title read paths."""

    def __init__(self, redis: aioredis.Redis):
        self.redis = redis

    # ─── Writes ─────────────────────────────────────────

    async def create(self, article: Article) -> Article:
        """Store a fully-formed article and index it.

        The caller assigns the id. An existing id is silently overwritten.
        """
        async with WriteBatch(self.redis, "article.create") as pipe:
            pipe.set(keys.article(article.id), article.model_dump_json(by_alias=True))
            pipe.zadd(keys.ARTICLES_BY_DATE, {article.id: _date_score(article.created_at)})
            pipe.sadd(keys.category(article.category.value), article.id)

        logger.info(
            "article.created",
            article_id=article.id,
            category=article.category.value,
            author_id=article.author_id,
        )
        return article

    async def update(self, article_id: str, fields: dict[str, Any]) -> Article | None:
        """Merge `fields` onto an existing article.

        Only title/content/category are applied; anything else in `fields`
        is ignored. updated_at is always refreshed. A category change moves
        the id between category sets in the same batch as the rewrite.
        Returns None if the article doesn't exist, including when a delete
        lands between the read and the write.
        """
        existing = await self.get_by_id(article_id)
        if existing is None:
            return None

        changes = {
            k: v for k, v in fields.items()
            if k in UPDATABLE_FIELDS and v is not None
        }
        merged = Article.model_validate({
            **existing.model_dump(),
            **changes,
            "updated_at": datetime.now(timezone.utc),
        })

        batch = WriteBatch(self.redis, "article.update")
        moved = merged.category != existing.category
        async with batch as pipe:
            # XX: never re-create a document deleted since it was read
            pipe.set(keys.article(article_id), merged.model_dump_json(by_alias=True), xx=True)
            if moved:
                pipe.srem(keys.category(existing.category.value), article_id)
                pipe.sadd(keys.category(merged.category.value), article_id)

        if not batch.results[0]:
            if moved:
                await self.redis.srem(keys.category(merged.category.value), article_id)
            logger.info("article.update_lost_to_delete", article_id=article_id)
            return None

        logger.info(
            "article.updated",
            article_id=article_id,
            fields=sorted(changes),
        )
        return merged

    async def delete(self, article_id: str) -> bool:
        """Remove an article from its document key and every index.

        Returns False if there was nothing to delete.
        """
        existing = await self.get_by_id(article_id)
        if existing is None:
            return False

        async with WriteBatch(self.redis, "article.delete") as pipe:
            pipe.delete(keys.article(article_id))
            pipe.zrem(keys.ARTICLES_BY_DATE, article_id)
            pipe.srem(keys.category(existing.category.value), article_id)

        logger.info("article.deleted", article_id=article_id)
        return True

    # ─── Reads ──────────────────────────────────────────

    async def get_by_id(self, article_id: str) -> Article | None:
        raw = await self.redis.get(keys.article(article_id))
        if raw is None:
            return None
        return Article.model_validate_json(raw)

    async def list_all(self, offset: int = 0, limit: int = 100) -> list[Article]:
        """Newest-first page straight off the by-date index."""
        if limit <= 0:
            return []
        ids = await self.redis.zrange(keys.ARTICLES_BY_DATE, offset, offset + limit - 1)
        return await self._load_many(ids)

    async def list_by_category(
        self, category: Category | str, offset: int = 0, limit: int = 100
    ) -> list[Article]:
        """Newest-first page of one category.

        Unknown category names just yield an empty list; validating the
        name is the API's job.
        """
        articles = await self._load_category(category)
        return _paginate(articles, offset, limit)

    async def search_by_title(
        self,
        query: str,
        offset: int = 0,
        limit: int = 100,
        category: Optional[Category | str] = None,
    ) -> list[Article]:
        """Case-insensitive substring match on title, newest first.

        Scans every article (or every article in `category`) on each call.
        """
        needle = query.strip().lower()
        if category is not None:
            candidates = await self._load_category(category)
        else:
            ids = await self.redis.zrange(keys.ARTICLES_BY_DATE, 0, -1)
            candidates = await self._load_many(ids)

        matches = [a for a in candidates if needle in a.title.lower()]
        return _paginate(matches, offset, limit)

    async def count(self) -> int:
        return await self.redis.zcard(keys.ARTICLES_BY_DATE)

    # ─── Helpers ────────────────────────────────────────

    async def _load_category(self, category: Category | str) -> list[Article]:
        name = category.value if isinstance(category, Category) else category
        ids = await self.redis.smembers(keys.category(name))
        articles = await self._load_many(ids)
        articles.sort(key=lambda a: a.created_at, reverse=True)
        return articles

    async def _load_many(self, ids: Iterable[str]) -> list[Article]:
        """Resolve ids to documents in one MGET, keeping input order.

        Ids whose document is gone are dropped.
        """
        ids = list(ids)
        if not ids:
            return []
        raws = await self.redis.mget([keys.article(i) for i in ids])
        articles = []
        for article_id, raw in zip(ids, raws):
            if raw is None:
                logger.warning("article.dangling_index_entry", article_id=article_id)
                continue
            articles.append(Article.model_validate_json(raw))
        return articles
