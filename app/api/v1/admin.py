# ============================================================================
# FILE: app/api/v1/admin.py
# Admin-only endpoints
# ============================================================================
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.config.database import get_db
from app.models.consistency_fault import ConsistencyFault
from app.models.user import User
from app.api.dependencies import require_admin
from app.schemas.restaurant import ConsistencyFaultResponse

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/consistency-faults", response_model=List[ConsistencyFaultResponse])
def list_consistency_faults(
        kind: Optional[str] = Query(None, description="Filter by fault kind"),
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(50, ge=1, le=200, description="Number of records to return"),
        current_user: User = Depends(require_admin),
        db: Session = Depends(get_db)
):
    """
    Inventory repair failures recorded while cancelling bookings, newest first.
    Each entry names a booking whose slot could not be returned automatically.
    """
    query = db.query(ConsistencyFault)
    if kind:
        query = query.filter(ConsistencyFault.kind == kind)

    return query.order_by(ConsistencyFault.created_at.desc()).offset(skip).limit(limit).all()
