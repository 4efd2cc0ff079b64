"""
Repositories for admin Personal Access Tokens.
"""
from __future__ import annotations

from typing import Optional, Tuple

from sqlalchemy.orm import Session

from chon.db import models
from chon.utils import token_crypto


def create_token(db: Session, *, user_id: int, name: str) -> Tuple[models.PersonalAccessToken, str]:
    token_id, secret, full_token = token_crypto.generate_token()
    pat = models.PersonalAccessToken(
        user_id=user_id,
        token_id=token_id,
        token_hash=token_crypto.hash_secret(secret),
        name=name,
        last_four=secret[-4:],
    )
    db.add(pat)
    db.commit()
    db.refresh(pat)
    return pat, full_token


def get_by_token_id(db: Session, *, token_id: str) -> Optional[models.PersonalAccessToken]:
    return (
        db.query(models.PersonalAccessToken)
        .filter(models.PersonalAccessToken.token_id == token_id)
        .first()
    )


def mark_used(db: Session, *, pat: models.PersonalAccessToken) -> None:
    pat.last_used_at = models.now_utc()
    db.commit()
