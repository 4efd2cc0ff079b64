from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from chon.api.deps import require_admin
from chon.db import models
from chon.db.database import get_db
from chon.db.repositories import wallets as wallet_repo
from chon.services import wallet_service

router = APIRouter(prefix="/api/admin/transactions", tags=["admin-transactions"])


def _pending_or_error(db: Session, transaction_id: int) -> models.Transaction:
    transaction = wallet_repo.get_transaction(db, transaction_id=transaction_id)
    if transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    if not transaction.is_pending():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Only pending transactions can be changed")
    return transaction


@router.get("")
def list_transactions(
    player_id: Optional[int] = None,
    transaction_status: Optional[str] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    rows = wallet_repo.list_transactions(db, player_id=player_id, status=transaction_status, limit=limit)
    return {"success": True, "data": [wallet_service.describe_transaction(db, row) for row in rows]}


@router.post("/{transaction_id}/complete")
def complete_transaction(
    transaction_id: int,
    reason: Optional[str] = Body(default=None, embed=True),
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    transaction = wallet_service.complete_transaction(db, _pending_or_error(db, transaction_id), reason)
    return {"success": True, "message": "Transaction completed", "data": wallet_service.describe_transaction(db, transaction)}


@router.post("/{transaction_id}/fail")
def fail_transaction(
    transaction_id: int,
    reason: Optional[str] = Body(default=None, embed=True),
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    transaction = wallet_service.fail_transaction(db, _pending_or_error(db, transaction_id), reason)
    return {"success": True, "message": "Transaction marked as failed", "data": wallet_service.describe_transaction(db, transaction)}
