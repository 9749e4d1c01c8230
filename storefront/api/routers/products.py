# storefront/api/routers/products.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_cart_service, get_deletion_guard
from storefront.domain.schemas import BulkDeleteIn, DeletionOut, Envelope, PriceIn
from storefront.services.cart_service import CartService
from storefront.services.deletion_guard import DeletionGuard, EntityKind

router = APIRouter(prefix="/admin/products", tags=["admin"])


@router.patch("/{product_id}/price", response_model=Envelope[dict])
def reprice_product(
    product_id: int,
    payload: PriceIn,
    svc: CartService = Depends(get_cart_service),
):
    product = svc.reprice_product(product_id, payload.price)
    return {"success": True, "message": "Product updated successfully", "data": product}


@router.get("/{product_id}/deletable", response_model=Envelope[dict])
def can_delete_product(product_id: int, guard: DeletionGuard = Depends(get_deletion_guard)):
    check = guard.can_delete(EntityKind.PRODUCT, product_id)
    return {
        "success": True,
        "message": "Product can be deleted" if check.allowed else "Product cannot be deleted",
        "data": {"allowed": check.allowed, "exists": check.exists, "blocked_by": check.blocked_by},
    }


@router.delete("/{product_id}", response_model=Envelope[DeletionOut])
def delete_product(product_id: int, guard: DeletionGuard = Depends(get_deletion_guard)):
    result = guard.delete_cascade(EntityKind.PRODUCT, product_id)
    return {"success": True, "message": "Product deleted successfully", "data": result}


@router.post("/bulk-delete", response_model=Envelope[DeletionOut])
def bulk_delete_products(payload: BulkDeleteIn, guard: DeletionGuard = Depends(get_deletion_guard)):
    result = guard.bulk_delete_products(payload.product_ids)
    return {"success": True, "message": "Products deleted successfully", "data": result}
