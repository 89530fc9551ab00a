from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from musicos.adapters.identity import CurrentUser
from musicos.api.deps import get_cart_service, get_checkout_service, get_current_user
from musicos.api.routes_cart import CART_COOKIE
from musicos.config import settings
from musicos.errors import PermissionDenied
from musicos.schemas.order_schema import CheckoutIn
from musicos.services.cart_service import CartService
from musicos.services.checkout_service import CheckoutService, ProofFile

router = APIRouter(tags=["orders"])


def _own_order(svc: CheckoutService, order_id: str, user: CurrentUser):
    order = svc.get_order(order_id)
    if order.uid != user.uid and not user.is_admin:
        raise PermissionDenied("Sem permissão para aceder a este pedido")
    return order


@router.post("", status_code=201, summary="Create order (checkout)")
def create_order(
    payload: CheckoutIn,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    carts: CartService = Depends(get_cart_service),
    svc: CheckoutService = Depends(get_checkout_service),
):
    session_cart = None
    if payload.items is not None:
        cart = carts.price_items((it.id, it.quantity) for it in payload.items)
    else:
        session_cart = carts.find(request.cookies.get(CART_COOKIE))
        cart = carts.to_cart(session_cart) if session_cart else carts.price_items(())
    resp = svc.create_order(cart, payload.customer_data(), user, payload.payment_method)
    if session_cart is not None:
        carts.clear(session_cart)
    return resp


@router.get("", summary="List my orders, newest first")
def list_orders(
    user: CurrentUser = Depends(get_current_user),
    svc: CheckoutService = Depends(get_checkout_service),
):
    return {"success": True, "orders": svc.get_user_orders(user)}


@router.get("/{order_id}", summary="Order status")
def get_order(
    order_id: str,
    user: CurrentUser = Depends(get_current_user),
    svc: CheckoutService = Depends(get_checkout_service),
):
    _own_order(svc, order_id, user)
    return {"success": True, "order": svc.get_order_status(order_id)}


@router.get("/{order_id}/instructions", summary="Payment instructions")
def get_instructions(
    order_id: str,
    user: CurrentUser = Depends(get_current_user),
    svc: CheckoutService = Depends(get_checkout_service),
):
    _own_order(svc, order_id, user)
    return {"success": True, "instructions": svc.get_payment_instructions(order_id)}


@router.post("/{order_id}/proof", summary="Upload proof of payment")
def upload_proof(
    order_id: str,
    file: Optional[UploadFile] = File(None),
    user: CurrentUser = Depends(get_current_user),
    svc: CheckoutService = Depends(get_checkout_service),
):
    _own_order(svc, order_id, user)
    proof = None
    if file is not None:
        # one byte past the limit is enough to know the file is too large
        data = file.file.read(settings.MAX_PROOF_BYTES + 1)
        proof = ProofFile(filename=file.filename or "", content_type=file.content_type or "", data=data)
    return svc.upload_proof_of_payment(order_id, proof)
