"""
API dependency helpers.

Admin routes authenticate with a personal access token in
``Authorization: Bearer``; player routes identify the caller by
``whatsapp_number`` or by the claims of a mobile app JWT.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import Depends, Header, HTTPException, status
import jwt
from sqlalchemy.orm import Session

from chon.db import models
from chon.db.database import get_db
from chon.db.repositories import players as player_repo
from chon.db.repositories import tokens as token_repo
from chon.utils.token_crypto import parse_token, verify_secret

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Unauthorized - Please login"
FORBIDDEN_MESSAGE = "Access denied - Admin privileges required"


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
        return token or None
    return None


def require_admin(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None),
) -> models.User:
    """Resolve the admin user behind a PAT or fail with 401/403."""
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_MESSAGE)
    parsed = parse_token(token)
    if not parsed:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_MESSAGE)
    pat = token_repo.get_by_token_id(db, token_id=parsed.token_id)
    if not pat or pat.revoked_at is not None or not verify_secret(parsed.secret, pat.token_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_MESSAGE)

    user = db.query(models.User).filter(models.User.id == pat.user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_MESSAGE)
    if not user.is_admin:
        logger.warning("admin_access_denied: user_id=%s role=%s", user.id, user.role)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_MESSAGE)

    token_repo.mark_used(db, pat=pat)
    return user


def decode_jwt_payload(token: str) -> Optional[Dict[str, Any]]:
    """Return the claims of a JWT without verifying its signature.

    The mobile app's tokens are issued by the companion API; here they only
    select which player a device token belongs to.
    """
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as exc:
        logger.warning("jwt_decode_failed: token_prefix=%s... error=%s", token[:20], exc)
        return None
    return payload if isinstance(payload, dict) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def player_from_jwt(db: Session, token: str) -> Optional[models.Player]:
    """Find the player named by a JWT's claims.

    Only the first claim present is consulted, in this order: ``player_id``;
    ``id`` (only when the token has no ``user_id``, since then ``id`` is a
    user id); ``whatsapp_number``; ``sub`` as a numeric id or else a WhatsApp
    number.
    """
    claims = decode_jwt_payload(token)
    if not claims:
        return None

    if claims.get("player_id") is not None:
        player_id = _as_int(claims["player_id"])
        return player_repo.get_player(db, player_id=player_id) if player_id is not None else None

    if claims.get("id") is not None and "user_id" not in claims:
        claim_id = _as_int(claims["id"])
        return player_repo.get_player(db, player_id=claim_id) if claim_id is not None else None

    if claims.get("whatsapp_number") is not None:
        return player_repo.get_by_whatsapp(db, whatsapp_number=str(claims["whatsapp_number"]))

    subject = claims.get("sub")
    if subject is not None:
        subject_id = _as_int(subject)
        if subject_id is not None:
            return player_repo.get_player(db, player_id=subject_id)
        return player_repo.get_by_whatsapp(db, whatsapp_number=str(subject))
    return None


def bearer_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    return _bearer_token(authorization)


def validation_failed(errors: Dict[str, list], status_code: int = status.HTTP_422_UNPROCESSABLE_ENTITY) -> HTTPException:
    """Build the ``Validation failed`` error used for checks pydantic cannot express."""
    return HTTPException(status_code=status_code, detail={"message": "Validation failed", "errors": errors})
