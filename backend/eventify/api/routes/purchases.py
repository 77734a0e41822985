"""
Purchase endpoints: checkout and purchase history.
"""

from fastapi import APIRouter, Depends, status

from eventify.api.deps import get_current_user
from eventify.domain import User
from eventify.schemas.purchase import PurchaseCreate, PurchaseResponse
from eventify.services.purchase_service import create_purchase, get_purchase, list_user_purchases
from eventify.stores.factory import get_storage
from eventify.stores.interfaces import Storage

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.post("/", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED)
async def create_purchase_endpoint(
    purchase_data: PurchaseCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Check out a cart.

    Every line is validated before anything changes; inventory is decremented
    atomically with the purchase. Returns 409 if a ticket type does not have
    enough tickets left.
    """
    return await create_purchase(storage, user, purchase_data)


@router.get("/me", response_model=list[PurchaseResponse])
async def list_my_purchases_endpoint(
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await list_user_purchases(storage, user)


@router.get("/{purchase_id}", response_model=PurchaseResponse)
async def get_purchase_endpoint(
    purchase_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await get_purchase(storage, purchase_id, user)
