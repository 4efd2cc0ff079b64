"""
App update endpoints.

``POST /api/app-updates/check`` is public and tells a mobile client whether a
newer build exists for its platform. The remaining routes manage version
records and require an admin token. Validation failures on these routes are
answered with 400 (see ``chon.api.main``).
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from chon.api.deps import require_admin
from chon.db import models, schemas
from chon.db.database import get_db
from chon.db.repositories import app_versions as app_version_repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/app-updates", tags=["app-updates"])

FORCED_UPDATE_MESSAGE = "This update is required to continue using the app."
OPTIONAL_UPDATE_MESSAGE = "A new version is available with exciting new features!"
NULLABLE_FIELDS = ("app_store_url", "release_notes", "released_at")


def _serialize(row: Optional[models.AppVersion]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return schemas.AppVersion.model_validate(row).model_dump(mode="json")


def _server_error(message: str, exc: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": message, "error": str(exc)},
    )


def build_update_info(latest: models.AppVersion, request: schemas.AppUpdateCheckRequest) -> Dict[str, Any]:
    force_update = bool(latest.is_force_update) and latest.build_number > request.current_build_number
    return {
        "latest_version": latest.version,
        "latest_build_number": latest.build_number,
        "current_version": request.current_version,
        "current_build_number": request.current_build_number,
        "is_force_update": force_update,
        "app_store_url": latest.app_store_url,
        "release_notes": latest.release_notes,
        "released_at": latest.released_at.isoformat() if latest.released_at else None,
        "update_message": FORCED_UPDATE_MESSAGE if force_update else OPTIONAL_UPDATE_MESSAGE,
    }


@router.post("/check")
def check_for_updates(payload: schemas.AppUpdateCheckRequest, db: Session = Depends(get_db)):
    logger.info(
        "app_update_check: platform=%s version=%s build=%s app_version=%s",
        payload.platform,
        payload.current_version,
        payload.current_build_number,
        payload.app_version,
    )
    try:
        latest = app_version_repo.get_latest_active(db, platform=payload.platform)
    except Exception as exc:
        logger.error("app_update_check_failed: error=%s", exc)
        raise _server_error("Internal server error", exc)

    if latest is None:
        return {"success": True, "update_available": False, "message": "No updates available", "data": None}
    if latest.build_number <= payload.current_build_number:
        return {"success": True, "update_available": False, "message": "App is up to date", "data": None}
    return {
        "success": True,
        "update_available": True,
        "message": "Update available",
        "data": build_update_info(latest, payload),
    }


@router.get("")
def list_app_versions(db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    try:
        rows = app_version_repo.list_versions(db)
    except Exception as exc:
        logger.error("app_versions_list_failed: error=%s", exc)
        raise _server_error("Failed to fetch app versions", exc)
    return {"success": True, "data": [_serialize(row) for row in rows]}


@router.get("/statistics")
def app_version_statistics(db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    try:
        stats = app_version_repo.version_statistics(db)
    except Exception as exc:
        logger.error("app_versions_statistics_failed: error=%s", exc)
        raise _server_error("Failed to fetch statistics", exc)
    stats["latest_ios"] = _serialize(stats["latest_ios"])
    stats["latest_android"] = _serialize(stats["latest_android"])
    return {"success": True, "data": stats}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_app_version(
    payload: schemas.AppVersionCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    if app_version_repo.find_duplicate(db, platform=payload.platform, version=payload.version):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Version already exists for this platform")
    try:
        row = app_version_repo.create_version(db, payload=payload)
    except Exception as exc:
        db.rollback()
        logger.error("app_version_create_failed: platform=%s version=%s error=%s", payload.platform, payload.version, exc)
        raise _server_error("Failed to create app version", exc)
    logger.info(
        "app_version_created: id=%s platform=%s version=%s build=%s by=%s",
        row.id,
        row.platform,
        row.version,
        row.build_number,
        admin.id,
    )
    return {"success": True, "message": "App version created successfully", "data": _serialize(row)}


@router.put("/{version_id}")
def update_app_version(
    version_id: int,
    payload: schemas.AppVersionUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    row = app_version_repo.get_version(db, version_id=version_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="App version not found")

    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field in NULLABLE_FIELDS
    }
    platform = changes.get("platform") or row.platform
    version = changes.get("version") or row.version
    if app_version_repo.find_duplicate(db, platform=platform, version=version, exclude_id=row.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Version already exists for this platform")

    try:
        row = app_version_repo.update_version(db, row=row, changes=changes)
    except Exception as exc:
        db.rollback()
        logger.error("app_version_update_failed: id=%s error=%s", version_id, exc)
        raise _server_error("Failed to update app version", exc)
    logger.info("app_version_updated: id=%s fields=%s by=%s", row.id, sorted(changes), admin.id)
    return {"success": True, "message": "App version updated successfully", "data": _serialize(row)}


@router.delete("/{version_id}")
def delete_app_version(
    version_id: int,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    row = app_version_repo.get_version(db, version_id=version_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="App version not found")
    try:
        app_version_repo.delete_version(db, row=row)
    except Exception as exc:
        db.rollback()
        logger.error("app_version_delete_failed: id=%s error=%s", version_id, exc)
        raise _server_error("Failed to delete app version", exc)
    logger.info("app_version_deleted: id=%s by=%s", version_id, admin.id)
    return {"success": True, "message": "App version deleted successfully"}
