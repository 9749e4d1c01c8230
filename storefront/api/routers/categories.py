from fastapi import APIRouter, Depends

from storefront.api.deps import get_deletion_guard
from storefront.domain.schemas import DeletionOut, Envelope
from storefront.services.deletion_guard import DeletionGuard, EntityKind

router = APIRouter(prefix="/admin/categories", tags=["admin"])


@router.delete("/{category_id}", response_model=Envelope[DeletionOut])
def delete_category(category_id: int, guard: DeletionGuard = Depends(get_deletion_guard)):
    result = guard.delete_cascade(EntityKind.CATEGORY, category_id)
    return {"success": True, "message": "Category deleted successfully", "data": result}
