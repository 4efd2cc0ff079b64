from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from chon.db import models


def _active(db: Session):
    return db.query(models.Advertising).filter(models.Advertising.is_active.is_(True))


def list_active(db: Session) -> List[models.Advertising]:
    return _active(db).order_by(models.Advertising.created_at.desc(), models.Advertising.id.desc()).all()


def random_active(db: Session) -> Optional[models.Advertising]:
    return _active(db).order_by(func.random()).first()


def first_active(db: Session) -> Optional[models.Advertising]:
    return _active(db).order_by(models.Advertising.id.asc()).first()


def get_advertisement(db: Session, *, advertisement_id: int) -> Optional[models.Advertising]:
    return db.query(models.Advertising).filter(models.Advertising.id == advertisement_id).first()
