"""Pydantic schemas for articles.

Learn: The JSON wire format (and the documents stored in Redis) use
camelCase keys — authorId, createdAt, ... — because that's what the
web client reads. Python code uses snake_case attributes; the alias
generator maps between the two. Separate "Create"/"Update" schemas
(input) from the Article document (output).
"""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class Category(str, Enum):
    POLITICS = "Politics"
    SPORT = "Sport"
    TECH = "Tech"

    @classmethod
    def values(cls) -> list[str]:
        return [c.value for c in cls]


class Article(BaseModel):
    """A stored article document.

    author_name is a snapshot of the author's username at creation
    time. It is never refreshed afterwards (users can't be renamed).
    """

    id: str
    title: str
    content: str
    category: Category
    author_id: str
    author_name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class ArticleCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)
    category: Category


class ArticleUpdate(BaseModel):
    """Partial update — only the fields present are applied."""

    title: Optional[str] = Field(None, min_length=1, max_length=300)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[Category] = None


class NewArticleMessage(BaseModel):
    """Payload published on the broadcast channel."""

    type: Literal["new_article"] = "new_article"
    article: Article
