from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

from sqlalchemy.orm import Session

from chon.db import models


def get_player(db: Session, *, player_id: int) -> Optional[models.Player]:
    return db.query(models.Player).filter(models.Player.id == player_id).first()


def get_by_whatsapp(db: Session, *, whatsapp_number: str) -> Optional[models.Player]:
    return db.query(models.Player).filter(models.Player.whatsapp_number == whatsapp_number).first()


def iter_player_id_batches(
    db: Session,
    *,
    batch_size: int,
    only_ids: Optional[Sequence[int]] = None,
) -> Iterator[List[int]]:
    """Yield ascending player id batches using keyset pagination on ``id``."""
    last_id = 0
    while True:
        query = db.query(models.Player.id).filter(models.Player.id > last_id)
        if only_ids:
            query = query.filter(models.Player.id.in_(list(only_ids)))
        ids = [row[0] for row in query.order_by(models.Player.id.asc()).limit(batch_size).all()]
        if not ids:
            return
        yield ids
        last_id = ids[-1]


def fcm_tokens_for(db: Session, *, player_ids: Sequence[int]) -> List[str]:
    rows = (
        db.query(models.Player.fcm_token)
        .filter(models.Player.id.in_(list(player_ids)), models.Player.fcm_token.isnot(None))
        .all()
    )
    return [token for (token,) in rows if token]


def top_player(db: Session) -> Optional[models.Player]:
    return db.query(models.Player).order_by(models.Player.total_score.desc(), models.Player.id.asc()).first()
