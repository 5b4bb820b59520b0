"""Article API routes.

Learn: Reads are public. Writes need a bearer session, and PUT/DELETE
additionally require that the caller owns the article. The route
handles HTTP concerns (auth, ownership, status codes); the store
handles Redis.

Creating an article also publishes it on the news channel so the
realtime gateway can push it to connected browsers.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from newslive.auth.dependencies import get_current_user
from newslive.config import settings
from newslive.errors import AuthorizationError, NotFoundError, ValidationError
from newslive.realtime.notifier import ChangeNotifier, get_notifier
from newslive.schemas.article import Article, ArticleCreate, ArticleUpdate, Category
from newslive.schemas.user import MessageResponse, PublicUser
from newslive.services.article_store import ArticleStore
from newslive.store.connection import get_redis

logger = structlog.get_logger()
router = APIRouter(prefix="/articles")


def _store(redis=Depends(get_redis)) -> ArticleStore:
    return ArticleStore(redis)


def _parse_category(category: Optional[str]) -> Optional[Category]:
    if not category:
        return None
    try:
        return Category(category)
    except ValueError:
        raise ValidationError(
            f"Invalid category. Must be one of: {', '.join(Category.values())}"
        )


async def _owned_article(
    store: ArticleStore, article_id: str, user: PublicUser
) -> Article:
    article = await store.get_by_id(article_id)
    if article is None:
        raise NotFoundError("Article not found")
    if article.author_id != user.id:
        raise AuthorizationError("You can only modify your own articles")
    return article


# ─── Reads ──────────────────────────────────────────────

@router.get("", response_model=list[Article])
async def list_articles(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    offset: int = Query(0, ge=0),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    store: ArticleStore = Depends(_store),
):
    """Newest-first articles, optionally filtered by category and/or title."""
    cat = _parse_category(category)

    if search and search.strip():
        return await store.search_by_title(search, offset, limit, category=cat)
    if cat is not None:
        return await store.list_by_category(cat, offset, limit)
    return await store.list_all(offset, limit)


@router.get("/{article_id}", response_model=Article)
async def get_article(article_id: str, store: ArticleStore = Depends(_store)):
    article = await store.get_by_id(article_id)
    if article is None:
        raise NotFoundError("Article not found")
    return article


# ─── Writes ─────────────────────────────────────────────

@router.post("", response_model=Article, status_code=201)
async def create_article(
    body: ArticleCreate,
    user: PublicUser = Depends(get_current_user),
    store: ArticleStore = Depends(_store),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """Create an article owned by the caller and announce it."""
    now = datetime.now(timezone.utc)
    article = Article(
        id=str(uuid.uuid4()),
        title=body.title,
        content=body.content,
        category=body.category,
        author_id=user.id,
        author_name=user.username,
        created_at=now,
        updated_at=now,
    )
    await store.create(article)

    # Best effort: the article is stored even if nobody hears about it
    try:
        await notifier.publish_new_article(article)
    except Exception as e:
        logger.warning("article.publish_failed", article_id=article.id, error=str(e))

    return article


@router.put("/{article_id}", response_model=Article)
async def update_article(
    article_id: str,
    body: ArticleUpdate,
    user: PublicUser = Depends(get_current_user),
    store: ArticleStore = Depends(_store),
):
    await _owned_article(store, article_id, user)
    updated = await store.update(article_id, body.model_dump(exclude_none=True))
    if updated is None:
        # deleted between the ownership check and the write
        raise NotFoundError("Article not found")
    return updated


@router.delete("/{article_id}", response_model=MessageResponse)
async def delete_article(
    article_id: str,
    user: PublicUser = Depends(get_current_user),
    store: ArticleStore = Depends(_store),
):
    await _owned_article(store, article_id, user)
    if not await store.delete(article_id):
        raise NotFoundError("Article not found")
    return MessageResponse(message="Article deleted")
