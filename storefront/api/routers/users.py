from fastapi import APIRouter, Depends

from storefront.api.deps import get_deletion_guard
from storefront.domain.schemas import DeletionOut, Envelope
from storefront.services.deletion_guard import DeletionGuard, EntityKind

router = APIRouter(prefix="/admin/users", tags=["admin"])


@router.delete("/{user_id}", response_model=Envelope[DeletionOut])
def delete_user(user_id: int, guard: DeletionGuard = Depends(get_deletion_guard)):
    result = guard.delete_cascade(EntityKind.USER, user_id)
    return {"success": True, "message": "User deleted successfully", "data": result}
