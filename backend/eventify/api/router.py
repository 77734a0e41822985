"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from eventify.api.routes import auth, categories, events, purchases

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(categories.router)
api_router.include_router(events.router)
api_router.include_router(purchases.router)
