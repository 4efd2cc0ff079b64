import logging
from typing import Optional

from sqlalchemy.orm import Session

from chon.db import models, schemas
from chon.db.models.points import CREDIT_TYPES, REF_ADMIN_ACTION
from chon.db.repositories import points as points_repo

logger = logging.getLogger(__name__)


def record_admin_transaction(
    db: Session,
    payload: schemas.PointsTransactionCreate,
) -> models.PointsTransaction:
    """Apply an admin-entered points transaction to the player's balance.

    Credits raise the balance and ``total_earned``; a spend lowers the balance
    without going below zero and always adds the full amount to ``total_spent``.
    """
    balance = points_repo.get_or_create_balance(db, player_id=payload.player_id)
    before = balance.current_balance or 0

    if payload.type in CREDIT_TYPES:
        after = before + payload.amount
        balance.total_earned = (balance.total_earned or 0) + payload.amount
    else:
        after = max(0, before - payload.amount)
        balance.total_spent = (balance.total_spent or 0) + payload.amount
    balance.current_balance = after

    transaction = models.PointsTransaction(
        player_id=payload.player_id,
        type=payload.type,
        amount=payload.amount,
        balance_before=before,
        balance_after=after,
        reference_type=payload.reference_type or REF_ADMIN_ACTION,
        reference_id=payload.reference_id,
        metadata_json=payload.metadata,
    )
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    logger.info(
        "points_transaction_recorded: player_id=%s type=%s amount=%s balance=%s->%s",
        payload.player_id,
        payload.type,
        payload.amount,
        before,
        after,
    )
    return transaction


def player_balance(db: Session, player_id: int) -> Optional[models.PlayerPointsBalance]:
    return points_repo.get_balance(db, player_id=player_id)
