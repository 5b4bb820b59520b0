"""Redis key layout.

    article:{id}                 JSON article document
    articles:by_date             ZSET of article ids, score = -created_at (ms)
    articles:category:{name}     SET of article ids
    user:{id}                    JSON user document
    user:email:{email}           user id
    users                        SET of user ids
    session:{token}              user id, expires after the session TTL
"""

ARTICLES_BY_DATE = "articles:by_date"
USERS = "users"


def article(article_id: str) -> str:
    return f"article:{article_id}"


def category(name: str) -> str:
    return f"articles:category:{name}"


def user(user_id: str) -> str:
    return f"user:{user_id}"


def user_email(email: str) -> str:
    return f"user:email:{email}"


def session(token: str) -> str:
    return f"session:{token}"
