from fastapi import APIRouter, Depends

from musicos.adapters.identity import CurrentUser
from musicos.api.deps import get_checkout_service, require_admin
from musicos.services.checkout_service import CheckoutService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post(
    "/orders/{order_id}/confirm-payment",
    summary="Mark a pending order as paid (trusted, no receipt verification)",
)
def confirm_payment(
    order_id: str,
    admin: CurrentUser = Depends(require_admin),
    svc: CheckoutService = Depends(get_checkout_service),
):
    return svc.confirm_payment(order_id)


@router.post("/orders/{order_id}/confirm", summary="Confirm the booking of a paid order")
def confirm_booking(
    order_id: str,
    admin: CurrentUser = Depends(require_admin),
    svc: CheckoutService = Depends(get_checkout_service),
):
    return svc.confirm_booking(order_id)


@router.get("/orders/by-reference/{reference}", summary="Find the order a bank transfer reference belongs to")
def find_by_reference(
    reference: str,
    admin: CurrentUser = Depends(require_admin),
    svc: CheckoutService = Depends(get_checkout_service),
):
    return {"success": True, "order": svc.find_by_reference(reference)}
