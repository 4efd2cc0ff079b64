"""Fee and display helpers for money transactions, plus admin status changes."""
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from chon.db import models
from chon.db.models.wallets import to_decimal
from chon.db.repositories import wallets as wallet_repo

logger = logging.getLogger(__name__)


def fee_amount(db: Session, transaction: models.Transaction) -> Decimal:
    method = wallet_repo.get_payment_method_by_code(db, code=transaction.payment_method)
    if method is None:
        return Decimal("0")
    return method.calculate_fee(transaction.amount)


def total_with_fee(db: Session, transaction: models.Transaction) -> Decimal:
    return to_decimal(transaction.amount) + fee_amount(db, transaction)


def payment_method_display(db: Session, transaction: models.Transaction) -> str:
    if not transaction.payment_method:
        return "N/A"
    method = wallet_repo.get_payment_method_by_code(db, code=transaction.payment_method)
    if method is None:
        return transaction.payment_method
    details = transaction.payment_details or {}
    if details.get("last4"):
        return f"{method.name} ending in {details['last4']}"
    return method.name


def describe_transaction(db: Session, transaction: models.Transaction) -> Dict[str, Any]:
    return {
        "id": transaction.id,
        "player_id": transaction.player_id,
        "competition_id": transaction.competition_id,
        "transaction_type": transaction.transaction_type,
        "status": transaction.status,
        "amount": str(to_decimal(transaction.amount)),
        "signed_amount": str(transaction.signed_amount()),
        "fee_amount": str(fee_amount(db, transaction)),
        "total_with_fee": str(total_with_fee(db, transaction)),
        "payment_method": payment_method_display(db, transaction),
        "reference_id": transaction.reference_id,
        "created_at": transaction.created_at.isoformat() if transaction.created_at else None,
    }


def complete_transaction(db: Session, transaction: models.Transaction, reason: Optional[str] = None) -> models.Transaction:
    transaction.mark_completed(reason)
    db.commit()
    db.refresh(transaction)
    logger.info("transaction_completed: id=%s", transaction.id)
    return transaction


def fail_transaction(db: Session, transaction: models.Transaction, reason: Optional[str] = None) -> models.Transaction:
    transaction.mark_failed(reason)
    db.commit()
    db.refresh(transaction)
    logger.warning("transaction_failed: id=%s reason=%s", transaction.id, reason)
    return transaction
