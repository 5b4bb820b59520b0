"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied per route, not per router — article reads are
public while writes on the same router need a bearer session. Health
and auth routes are open.
"""

from fastapi import APIRouter

from newslive.api.articles import router as articles_router
from newslive.api.auth import router as auth_router
from newslive.api.health import router as health_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(articles_router, tags=["articles"])
