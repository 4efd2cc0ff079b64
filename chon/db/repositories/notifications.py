"""
Repositories for broadcast notifications and per-player inbox rows.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from sqlalchemy.orm import Session, joinedload

from chon.db import models
from chon.db.models.notifications import RECENT_WINDOW, STATUS_PENDING


INBOX_FILTERS = ("all", "unread", "read", "recent")


def create_notification(db: Session, *, fields: Dict[str, Any]) -> models.Notification:
    notification = models.Notification(**fields)
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def get_notification(db: Session, *, notification_id: int) -> Optional[models.Notification]:
    return db.query(models.Notification).filter(models.Notification.id == notification_id).first()


def list_ready_to_send(db: Session, *, now: Optional[datetime] = None) -> List[models.Notification]:
    current = now or models.now_utc()
    return (
        db.query(models.Notification)
        .filter(
            models.Notification.status == STATUS_PENDING,
            (models.Notification.scheduled_at.is_(None)) | (models.Notification.scheduled_at <= current),
        )
        .order_by(models.Notification.id.asc())
        .all()
    )


def _inbox_query(db: Session, player_id: int):
    return db.query(models.PlayerNotification).filter(models.PlayerNotification.player_id == player_id)


def _apply_filter(query, inbox_filter: str, now: datetime):
    if inbox_filter == "unread":
        return query.filter(models.PlayerNotification.read_at.is_(None))
    if inbox_filter == "read":
        return query.filter(models.PlayerNotification.read_at.isnot(None))
    if inbox_filter == "recent":
        return query.filter(models.PlayerNotification.received_at >= now - RECENT_WINDOW)
    return query


def page_player_notifications(
    db: Session,
    *,
    player_id: int,
    inbox_filter: str = "all",
    page: int = 1,
    per_page: int = 15,
    now: Optional[datetime] = None,
) -> Tuple[List[models.PlayerNotification], int]:
    """Return one page of the player's inbox (newest first) and the filtered total."""
    query = _apply_filter(_inbox_query(db, player_id), inbox_filter, now or models.now_utc())
    total = query.count()
    items = (
        query.options(joinedload(models.PlayerNotification.notification))
        .order_by(models.PlayerNotification.received_at.desc(), models.PlayerNotification.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return items, total


def count_inbox(db: Session, *, player_id: int) -> Dict[str, int]:
    total = _inbox_query(db, player_id).count()
    unread = _inbox_query(db, player_id).filter(models.PlayerNotification.read_at.is_(None)).count()
    return {"total_notifications": total, "unread_count": unread, "read_count": total - unread}


def get_player_notification(
    db: Session,
    *,
    player_id: int,
    notification_id: int,
) -> Optional[models.PlayerNotification]:
    return (
        _inbox_query(db, player_id)
        .options(joinedload(models.PlayerNotification.notification))
        .filter(models.PlayerNotification.notification_id == notification_id)
        .first()
    )


def mark_read(db: Session, *, player_id: int, notification_id: int) -> bool:
    """Mark one unread inbox row as read; False when missing or already read."""
    row = (
        _inbox_query(db, player_id)
        .filter(
            models.PlayerNotification.notification_id == notification_id,
            models.PlayerNotification.read_at.is_(None),
        )
        .first()
    )
    if row is None:
        return False
    row.mark_read()
    db.commit()
    return True


def mark_all_read(db: Session, *, player_id: int) -> int:
    updated = (
        _inbox_query(db, player_id)
        .filter(models.PlayerNotification.read_at.is_(None))
        .update({models.PlayerNotification.read_at: models.now_utc()}, synchronize_session=False)
    )
    db.commit()
    return updated


def existing_recipients(db: Session, *, notification_id: int, player_ids: Sequence[int]) -> Set[int]:
    rows = (
        db.query(models.PlayerNotification.player_id)
        .filter(
            models.PlayerNotification.notification_id == notification_id,
            models.PlayerNotification.player_id.in_(list(player_ids)),
        )
        .all()
    )
    return {player_id for (player_id,) in rows}


def bulk_insert_player_notifications(db: Session, *, rows: List[Dict[str, Any]]) -> int:
    if not rows:
        return 0
    db.bulk_insert_mappings(models.PlayerNotification, rows)
    db.commit()
    return len(rows)


def list_notifications(db: Session, *, status: Optional[str] = None, limit: int = 100) -> List[models.Notification]:
    query = db.query(models.Notification)
    if status:
        query = query.filter(models.Notification.status == status)
    return query.order_by(models.Notification.created_at.desc(), models.Notification.id.desc()).limit(limit).all()


def recipient_count(db: Session, *, notification_id: int) -> int:
    return (
        db.query(models.PlayerNotification)
        .filter(models.PlayerNotification.notification_id == notification_id)
        .count()
    )
