from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from chon.api.deps import require_admin, validation_failed
from chon.db import models, schemas
from chon.db.database import get_db
from chon.db.repositories import players as player_repo
from chon.db.repositories import points as points_repo
from chon.services import points_service

router = APIRouter(prefix="/api/admin", tags=["admin-points"])


def _serialize(transaction: models.PointsTransaction):
    return schemas.PointsTransaction.model_validate(transaction).model_dump(mode="json")


@router.get("/points-transactions")
def list_points_transactions(
    player_id: Optional[int] = None,
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    rows = points_repo.list_transactions(db, player_id=player_id, limit=limit)
    return {"success": True, "data": [_serialize(row) for row in rows]}


@router.post("/points-transactions", status_code=status.HTTP_201_CREATED)
def create_points_transaction(
    payload: schemas.PointsTransactionCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    if player_repo.get_player(db, player_id=payload.player_id) is None:
        raise validation_failed({"player_id": ["The selected player id is invalid."]})
    transaction = points_service.record_admin_transaction(db, payload)
    return {"success": True, "message": "Points transaction recorded", "data": _serialize(transaction)}


@router.get("/points-balances/{player_id}")
def show_points_balance(player_id: int, db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    balance = points_service.player_balance(db, player_id)
    if balance is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Points balance not found")
    return {"success": True, "data": schemas.PlayerPointsBalance.model_validate(balance).model_dump()}
