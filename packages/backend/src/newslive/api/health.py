"""Health check endpoints.

Learn: GET / is the liveness probe the web client pings. GET /health
also checks that Redis is reachable and reports how many realtime
clients are connected.
"""

from fastapi import APIRouter, Request

from newslive import __version__
from newslive.services.article_store import ArticleStore

router = APIRouter()


@router.get("/")
async def root():
    return {"status": "ok", "message": "NewsLive API is running"}


@router.get("/health")
async def health_check(request: Request):
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    redis = getattr(request.app.state, "redis", None)
    try:
        if redis is None:
            raise RuntimeError("not initialized")
        await redis.ping()
        checks["redis"] = "ok"
        checks["articles"] = await ArticleStore(redis).count()
    except Exception as e:
        checks["redis"] = f"error: {e}"

    gateway = getattr(request.app.state, "gateway", None)
    checks["realtime"] = "ok" if gateway is not None and gateway.running else "stopped"
    checks["clients"] = gateway.client_count if gateway is not None else 0

    healthy = checks["redis"] == "ok" and checks["realtime"] == "ok"
    return {"status": "healthy" if healthy else "degraded", **checks}
