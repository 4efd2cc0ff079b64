"""
Repositories for app version records.

The update check reads only active rows; admin CRUD sees everything.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from chon.db import models, schemas


def get_latest_active(db: Session, *, platform: str) -> Optional[models.AppVersion]:
    return (
        db.query(models.AppVersion)
        .filter(models.AppVersion.platform == platform, models.AppVersion.is_active.is_(True))
        .order_by(models.AppVersion.build_number.desc())
        .first()
    )


def list_versions(db: Session) -> List[models.AppVersion]:
    return (
        db.query(models.AppVersion)
        .order_by(models.AppVersion.platform.asc(), models.AppVersion.build_number.desc())
        .all()
    )


def get_version(db: Session, *, version_id: int) -> Optional[models.AppVersion]:
    return db.query(models.AppVersion).filter(models.AppVersion.id == version_id).first()


def find_duplicate(
    db: Session,
    *,
    platform: str,
    version: str,
    exclude_id: Optional[int] = None,
) -> Optional[models.AppVersion]:
    query = db.query(models.AppVersion).filter(
        models.AppVersion.platform == platform,
        models.AppVersion.version == version,
    )
    if exclude_id is not None:
        query = query.filter(models.AppVersion.id != exclude_id)
    return query.first()


def create_version(db: Session, *, payload: schemas.AppVersionCreate) -> models.AppVersion:
    row = models.AppVersion(**payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_version(db: Session, *, row: models.AppVersion, changes: Dict[str, Any]) -> models.AppVersion:
    for field, value in changes.items():
        setattr(row, field, value)
    db.commit()
    db.refresh(row)
    return row


def delete_version(db: Session, *, row: models.AppVersion) -> None:
    db.delete(row)
    db.commit()


def version_statistics(db: Session) -> Dict[str, Any]:
    q = db.query(models.AppVersion)
    return {
        "total_versions": q.count(),
        "ios_versions": q.filter(models.AppVersion.platform == "ios").count(),
        "android_versions": q.filter(models.AppVersion.platform == "android").count(),
        "active_versions": q.filter(models.AppVersion.is_active.is_(True)).count(),
        "force_updates": q.filter(models.AppVersion.is_force_update.is_(True)).count(),
        "latest_ios": get_latest_active(db, platform="ios"),
        "latest_android": get_latest_active(db, platform="android"),
    }
