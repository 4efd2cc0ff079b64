"""
Player inbox endpoints.

Players are identified by ``whatsapp_number`` (query string for reads, body
for writes). Validation failures answer 422.
"""
import math
from typing import Any, Dict, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from chon.db import models, schemas
from chon.db.database import get_db
from chon.db.repositories import notifications as notification_repo
from chon.db.repositories import players as player_repo

router = APIRouter(prefix="/api/player-notifications", tags=["player-notifications"])


def _player_or_404(db: Session, whatsapp_number: str) -> models.Player:
    player = player_repo.get_by_whatsapp(db, whatsapp_number=whatsapp_number)
    if player is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
    return player


def _iso(value):
    return value.isoformat() if value is not None else None


def serialize_inbox_item(item: models.PlayerNotification) -> Dict[str, Any]:
    notification = item.notification
    return {
        "id": item.id,
        "notification_id": item.notification_id,
        "title": notification.title,
        "message": notification.message,
        "type": notification.type,
        "priority": notification.priority,
        "data": notification.data,
        "received_at": _iso(item.received_at),
        "read_at": _iso(item.read_at),
        "is_read": item.is_read(),
        "delivery_data": item.delivery_data,
    }


@router.get("")
def list_notifications(
    whatsapp_number: str = Query(...),
    page: int = Query(1, ge=1),
    per_page: int = Query(15, ge=1, le=50),
    inbox_filter: Literal["all", "unread", "read", "recent"] = Query("all", alias="filter"),
    db: Session = Depends(get_db),
):
    player = _player_or_404(db, whatsapp_number)
    items, total = notification_repo.page_player_notifications(
        db,
        player_id=player.id,
        inbox_filter=inbox_filter,
        page=page,
        per_page=per_page,
    )
    first = (page - 1) * per_page + 1 if items else None
    return {
        "success": True,
        "data": {
            "notifications": [serialize_inbox_item(item) for item in items],
            "pagination": {
                "current_page": page,
                "last_page": max(1, math.ceil(total / per_page)),
                "per_page": per_page,
                "total": total,
                "from": first,
                "to": first + len(items) - 1 if first is not None else None,
            },
            "summary": notification_repo.count_inbox(db, player_id=player.id),
        },
    }


@router.get("/unread-count")
def unread_count(whatsapp_number: str = Query(...), db: Session = Depends(get_db)):
    player = _player_or_404(db, whatsapp_number)
    counts = notification_repo.count_inbox(db, player_id=player.id)
    return {
        "success": True,
        "data": {"unread_count": counts["unread_count"], "total_notifications": counts["total_notifications"]},
    }


@router.post("/mark-as-read")
def mark_as_read(payload: schemas.MarkAsReadRequest, db: Session = Depends(get_db)):
    player = _player_or_404(db, payload.whatsapp_number)
    if not notification_repo.mark_read(db, player_id=player.id, notification_id=payload.notification_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found or already read")
    counts = notification_repo.count_inbox(db, player_id=player.id)
    return {
        "success": True,
        "message": "Notification marked as read",
        "data": {"unread_count": counts["unread_count"]},
    }


@router.post("/mark-all-as-read")
def mark_all_as_read(payload: schemas.PlayerLookup, db: Session = Depends(get_db)):
    player = _player_or_404(db, payload.whatsapp_number)
    notification_repo.mark_all_read(db, player_id=player.id)
    return {"success": True, "message": "All notifications marked as read", "data": {"unread_count": 0}}


@router.get("/{notification_id}")
def show_notification(notification_id: int, whatsapp_number: str = Query(...), db: Session = Depends(get_db)):
    player = _player_or_404(db, whatsapp_number)
    item = notification_repo.get_player_notification(db, player_id=player.id, notification_id=notification_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    # viewing a notification counts as reading it
    if item.is_unread():
        item.mark_read()
        db.commit()
        db.refresh(item)
    return {"success": True, "data": serialize_inbox_item(item)}
