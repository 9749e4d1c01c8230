# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_cart_service
from storefront.domain.schemas import CartOut, Envelope, ItemIn, QuantityIn
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


@router.get("/", response_model=Envelope[CartOut])
def get_cart(
    user_id: int = Query(..., gt=0),
    svc: CartService = Depends(get_cart_service),
):
    return {"success": True, "message": "Cart", "data": svc.get_cart(user_id)}


@router.post("/items", response_model=Envelope[CartOut])
def add_item(
    payload: ItemIn,
    user_id: int = Query(..., gt=0),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.add_item(user_id, payload.product_id, payload.quantity)
    return {"success": True, "message": "Product added to cart", "data": cart}


@router.put("/items/{product_id}", response_model=Envelope[CartOut])
def update_item(
    product_id: int,
    payload: QuantityIn,
    user_id: int = Query(..., gt=0),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.update_item(user_id, product_id, payload.quantity)
    return {"success": True, "message": "Cart item updated", "data": cart}


@router.delete("/items/{product_id}", response_model=Envelope[CartOut])
def remove_item(
    product_id: int,
    user_id: int = Query(..., gt=0),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.remove_item(user_id, product_id)
    return {"success": True, "message": "Cart item removed", "data": cart}


@router.delete("/", response_model=Envelope[CartOut])
def clear_cart(
    user_id: int = Query(..., gt=0),
    svc: CartService = Depends(get_cart_service),
):
    return {"success": True, "message": "Cart cleared", "data": svc.clear(user_id)}
