import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from chon.api.deps import bearer_token, player_from_jwt, validation_failed
from chon.db import schemas
from chon.db.database import get_db
from chon.db.repositories import players as player_repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/player", tags=["players"])

PLAYER_NOT_FOUND = "Player not found. Please provide player_id or whatsapp_number in the request body."


@router.post("/fcm-token")
def update_fcm_token(
    payload: schemas.FcmTokenUpdate,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(bearer_token),
):
    """Register or refresh the push token of a player's device.

    The player is taken from ``player_id``, else ``whatsapp_number``, else the
    bearer JWT.
    """
    if payload.player_id is None and not payload.whatsapp_number and not token:
        raise validation_failed({"player_id": ["Either player_id, whatsapp_number, or Bearer token is required."]})

    try:
        if payload.player_id is not None:
            player = player_repo.get_player(db, player_id=payload.player_id)
            if player is None:
                raise validation_failed({"player_id": ["The selected player id is invalid."]})
        elif payload.whatsapp_number:
            player = player_repo.get_by_whatsapp(db, whatsapp_number=payload.whatsapp_number)
        else:
            player = player_from_jwt(db, token)
            if player is None:
                logger.warning("fcm_token_unknown_bearer: token_prefix=%s...", token[:20])

        if player is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PLAYER_NOT_FOUND)

        player.fcm_token = payload.fcm_token
        db.commit()
    except HTTPException:
        raise
    except Exception as exc:
        db.rollback()
        logger.error("fcm_token_update_failed: error=%s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to update FCM token", "error": str(exc)},
        )

    logger.info(
        "fcm_token_updated: player_id=%s device_type=%s app_version=%s",
        player.id,
        payload.device_type,
        payload.app_version,
    )
    return {
        "success": True,
        "message": "FCM token updated successfully",
        "data": {
            "player_id": player.id,
            "fcm_token": payload.fcm_token,
            "device_type": payload.device_type,
        },
    }
