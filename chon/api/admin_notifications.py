from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from chon.api.deps import require_admin
from chon.db import models, schemas
from chon.db.database import get_db
from chon.db.repositories import notifications as notification_repo
from chon.services.notification_service import NotificationService

router = APIRouter(prefix="/api/admin/notifications", tags=["admin-notifications"])


def serialize_notification(notification: models.Notification) -> Dict[str, Any]:
    return schemas.Notification.model_validate(notification).model_dump(mode="json")


@router.get("")
def list_notifications(
    notification_status: Optional[Literal["pending", "sent", "failed"]] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    rows = notification_repo.list_notifications(db, status=notification_status, limit=limit)
    return {"success": True, "data": [serialize_notification(row) for row in rows]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: schemas.NotificationCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    notification = NotificationService(db).create_notification(payload)
    if notification.status == "sent":
        message = "Notification sent successfully"
    elif notification.status == "pending":
        message = "Notification scheduled"
    else:
        message = "Failed to send notification"
    return {"success": True, "message": message, "data": serialize_notification(notification)}


@router.get("/{notification_id}")
def show_notification(notification_id: int, db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    notification = notification_repo.get_notification(db, notification_id=notification_id)
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    data = serialize_notification(notification)
    data["recipients"] = notification_repo.recipient_count(db, notification_id=notification_id)
    return {"success": True, "data": data}
