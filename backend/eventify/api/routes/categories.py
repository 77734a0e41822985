"""
Category endpoints.
"""

from fastapi import APIRouter, Depends

from eventify.schemas.event import CategoryResponse
from eventify.services.event_service import list_categories
from eventify.stores.factory import get_storage
from eventify.stores.interfaces import Storage

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=list[CategoryResponse])
async def list_categories_endpoint(storage: Storage = Depends(get_storage)):
    return await list_categories(storage)
