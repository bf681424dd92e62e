from fastapi import APIRouter, Depends, HTTPException

from aurelane.api.deps import get_cart_store, get_order_gateway
from aurelane.schemas.cart_schema import CheckoutDetails
from aurelane.services.cart_store import CartStore
from aurelane.services.checkout_service import CheckoutException, CheckoutService

router = APIRouter(tags=["checkout"])


@router.post("", summary="Place order from cart")
def place_order(
    payload: CheckoutDetails,
    store: CartStore = Depends(get_cart_store),
    gateway=Depends(get_order_gateway),
):
    svc = CheckoutService(store, gateway)
    try:
        return svc.place_order(payload)
    except CheckoutException as e:
        raise HTTPException(status_code=400, detail=str(e))
