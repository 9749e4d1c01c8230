# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_order_service
from storefront.domain.schemas import Envelope, OrderOut, StatusIn
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@router.get("/", response_model=Envelope[List[OrderOut]])
def order_history(
    user_id: int = Query(..., gt=0),
    svc: OrderService = Depends(get_order_service),
):
    return {"success": True, "message": "Order history", "data": svc.order_history(user_id)}


@router.get("/{order_id}", response_model=Envelope[OrderOut])
def get_order(
    order_id: str,
    user_id: int = Query(..., gt=0),
    svc: OrderService = Depends(get_order_service),
):
    return {"success": True, "message": "Order found", "data": svc.get_order(order_id, user_id)}


@admin_router.patch("/{order_id}/status", response_model=Envelope[OrderOut])
def update_order_status(
    order_id: str,
    payload: StatusIn,
    svc: OrderService = Depends(get_order_service),
):
    order = svc.update_status(order_id, payload.status)
    return {"success": True, "message": "Order status updated successfully", "data": order}
