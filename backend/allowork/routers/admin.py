from fastapi import APIRouter, Depends

from allowork.auth import require_admin_user
from allowork.models import AdminStats, User
from allowork.services.marketplace_store import marketplace_store

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStats)
def admin_stats(_: User = Depends(require_admin_user)):
    return marketplace_store.admin_stats()
