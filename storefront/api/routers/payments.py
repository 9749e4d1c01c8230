# storefront/api/routers/payments.py
from fastapi import APIRouter, Depends, Query, Response, status

from storefront.api.deps import get_checkout_service, get_settlement_service
from storefront.domain.schemas import CheckoutOut, Envelope, InitiatePaymentIn, OrderOut, VerifyPaymentIn
from storefront.services.checkout_service import CheckoutService
from storefront.services.settlement_service import SettlementService

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/initiate", response_model=Envelope[CheckoutOut])
def initiate_payment(
    payload: InitiatePaymentIn,
    user_id: int = Query(..., gt=0),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """
    Otwiera transakcje w bramce, zwraca adres przekierowania i referencje.
    """
    data = svc.initiate(user_id, payload, payload.amount)
    return {"success": True, "message": "Payment initiated", "data": data}


@router.post("/verify", response_model=Envelope[OrderOut], status_code=status.HTTP_201_CREATED)
def verify_payment(
    payload: VerifyPaymentIn,
    response: Response,
    user_id: int = Query(..., gt=0),
    svc: SettlementService = Depends(get_settlement_service),
):
    """
    Weryfikuje platnosc i tworzy zamowienie. Wielokrotne wywolanie zwraca to samo zamowienie (200).
    """
    order, created = svc.settle(user_id, payload.reference, payload.order_id)
    if not created:
        response.status_code = status.HTTP_200_OK
        return {"success": True, "message": "Order already exists", "data": order}
    return {"success": True, "message": "Order created successfully", "data": order}
