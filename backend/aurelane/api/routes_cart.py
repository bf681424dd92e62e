from typing import Union

from fastapi import APIRouter, Depends, HTTPException

from aurelane.api.deps import get_cart_store
from aurelane.models.line_item import discount_to_fields
from aurelane.schemas.cart_schema import AddItemIn, UpdateQuantityIn
from aurelane.services.cart_store import CartStore, InvalidQuantity, ItemNotFound
from aurelane.services.pricing import effective_price, format_money, line_total

router = APIRouter(prefix="/api/cart", tags=["cart"])

GemIdPath = Union[int, str]


def cart_payload(store: CartStore) -> dict:
    items = []
    for it in store.items:
        discount, discount_type = discount_to_fields(it.discount)
        items.append(
            {
                "id": it.id,
                "name": it.name,
                "category": it.category,
                "unitPrice": it.unit_price,
                "discount": discount,
                "discountType": discount_type,
                "quantity": it.quantity,
                "image": it.image,
                "effectivePrice": effective_price(it),
                "lineTotal": line_total(it),
            }
        )
    totals = store.compute_totals()
    summary = store.summary()
    return {
        "items": items,
        "totals": totals.as_dict(),
        "summary": summary.as_dict(),
        "formatted": {
            "subtotal": format_money(summary.subtotal),
            "discount": format_money(summary.discount),
            "grandTotal": format_money(summary.grand_total),
            "shipping": "Free" if summary.shipping == 0 else format_money(summary.shipping),
            "total": format_money(summary.total),
        },
    }


def _resolve_id(store: CartStore, gem_id: str) -> GemIdPath:
    # path ids arrive as strings; match integer ids already in the cart only
    # when the path is that integer's canonical spelling ("-5" yes, "01" no)
    if store.is_in_cart(gem_id):
        return gem_id
    try:
        as_int = int(gem_id)
    except ValueError:
        return gem_id
    if str(as_int) == gem_id and store.is_in_cart(as_int):
        return as_int
    return gem_id


@router.get("", summary="Get cart")
def get_cart(store: CartStore = Depends(get_cart_store)):
    return cart_payload(store)


@router.post("/items", summary="Add gem to cart")
def add_item(payload: AddItemIn, store: CartStore = Depends(get_cart_store)):
    try:
        store.add_item(payload.gem, payload.quantity)
    except InvalidQuantity as e:
        raise HTTPException(status_code=400, detail=str(e))
    return cart_payload(store)


@router.get("/items/{gem_id}", summary="Check whether a gem is in the cart")
def get_item(gem_id: str, store: CartStore = Depends(get_cart_store)):
    gid = _resolve_id(store, gem_id)
    return {"id": gid, "inCart": store.is_in_cart(gid), "quantity": store.get_item_quantity(gid)}


@router.patch("/items/{gem_id}", summary="Set line item quantity")
def update_quantity(gem_id: str, payload: UpdateQuantityIn, store: CartStore = Depends(get_cart_store)):
    try:
        store.update_quantity(_resolve_id(store, gem_id), payload.quantity)
    except InvalidQuantity as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ItemNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return cart_payload(store)


@router.delete("/items/{gem_id}", summary="Remove line item")
def remove_item(gem_id: str, store: CartStore = Depends(get_cart_store)):
    store.remove_item(_resolve_id(store, gem_id))
    return cart_payload(store)


@router.delete("", summary="Clear cart")
def clear_cart(store: CartStore = Depends(get_cart_store)):
    store.clear()
    return cart_payload(store)
