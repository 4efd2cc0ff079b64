from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from chon.api.deps import require_admin
from chon.db import models
from chon.db.database import get_db
from chon.services.dashboard_service import dashboard_stats

router = APIRouter(prefix="/api/admin/dashboard", tags=["dashboard"])


@router.get("/stats")
def get_dashboard_stats(db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    return {"success": True, "data": dashboard_stats(db)}
