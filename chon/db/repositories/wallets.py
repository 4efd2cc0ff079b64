from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from chon.db import models
from chon.db.models.wallets import TRANSACTION_COMPLETED, TRANSACTION_ENTRY_FEE


def get_payment_method_by_code(db: Session, *, code: Optional[str]) -> Optional[models.PaymentMethod]:
    if not code:
        return None
    return db.query(models.PaymentMethod).filter(models.PaymentMethod.code == code).first()


def get_transaction(db: Session, *, transaction_id: int) -> Optional[models.Transaction]:
    return db.query(models.Transaction).filter(models.Transaction.id == transaction_id).first()


def list_transactions(
    db: Session,
    *,
    player_id: Optional[int] = None,
    status: Optional[str] = None,
    limit: int = 100,
) -> List[models.Transaction]:
    query = db.query(models.Transaction)
    if player_id is not None:
        query = query.filter(models.Transaction.player_id == player_id)
    if status:
        query = query.filter(models.Transaction.status == status)
    return query.order_by(models.Transaction.created_at.desc(), models.Transaction.id.desc()).limit(limit).all()


def total_completed_entry_fees(db: Session) -> Decimal:
    value = (
        db.query(func.sum(models.Transaction.amount))
        .filter(
            models.Transaction.transaction_type == TRANSACTION_ENTRY_FEE,
            models.Transaction.status == TRANSACTION_COMPLETED,
        )
        .scalar()
    )
    total = Decimal(str(value)) if value is not None else Decimal("0")
    return total.quantize(Decimal("0.01"))
