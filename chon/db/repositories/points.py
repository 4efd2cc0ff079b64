from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from chon.db import models


def get_balance(db: Session, *, player_id: int) -> Optional[models.PlayerPointsBalance]:
    return db.query(models.PlayerPointsBalance).filter(models.PlayerPointsBalance.player_id == player_id).first()


def get_or_create_balance(db: Session, *, player_id: int) -> models.PlayerPointsBalance:
    """Return the player's balance row, adding a zeroed one to the session if missing."""
    balance = get_balance(db, player_id=player_id)
    if balance is None:
        balance = models.PlayerPointsBalance(player_id=player_id, current_balance=0, total_earned=0, total_spent=0)
        db.add(balance)
        db.flush()
    return balance


def list_transactions(db: Session, *, player_id: Optional[int] = None, limit: int = 100) -> List[models.PointsTransaction]:
    query = db.query(models.PointsTransaction)
    if player_id is not None:
        query = query.filter(models.PointsTransaction.player_id == player_id)
    return query.order_by(models.PointsTransaction.created_at.desc(), models.PointsTransaction.id.desc()).limit(limit).all()
