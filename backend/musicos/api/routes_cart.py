from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from musicos.api.deps import get_cart_service
from musicos.schemas.cart_schema import AddItemIn
from musicos.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])

CART_COOKIE = "cart_uuid"


def _get_cart_uuid_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(CART_COOKIE)


def _snapshot(svc: CartService, cart) -> dict:
    snap = svc.to_cart(cart).snapshot()
    snap["cart_uuid"] = cart.cart_uuid
    snap["priceChanged"] = svc.price_changes(cart)
    return snap


@router.get("", summary="Get cart")
def get_cart(request: Request, response: Response, svc: CartService = Depends(get_cart_service)):
    cart = svc.get_or_create(_get_cart_uuid_cookie(request))
    response.set_cookie(CART_COOKIE, cart.cart_uuid, httponly=True, samesite="lax")
    return _snapshot(svc, cart)


@router.post("/items", summary="Add item to cart")
def add_item(
    payload: AddItemIn,
    request: Request,
    response: Response,
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.get_or_create(_get_cart_uuid_cookie(request))
    svc.add_item(cart, payload.id, payload.quantity)
    response.set_cookie(CART_COOKIE, cart.cart_uuid, httponly=True, samesite="lax")
    return _snapshot(svc, cart)


@router.delete("/items/{item_id}", summary="Remove item")
def remove_item(item_id: str, request: Request, svc: CartService = Depends(get_cart_service)):
    cart = svc.get_or_create(_get_cart_uuid_cookie(request))
    svc.remove_item(cart, item_id)
    return _snapshot(svc, cart)


@router.delete("", summary="Clear cart")
def clear_cart(request: Request, svc: CartService = Depends(get_cart_service)):
    cart = svc.get_or_create(_get_cart_uuid_cookie(request))
    svc.clear(cart)
    return _snapshot(svc, cart)
