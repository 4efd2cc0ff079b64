"""
Read-side queries for localized app content (questions, competitions, payment methods).
"""
from __future__ import annotations

from typing import Dict, List

from sqlalchemy.orm import Session

from chon.db import models


def list_questions(db: Session) -> List[models.Question]:
    return db.query(models.Question).order_by(models.Question.id.asc()).all()


def list_competitions(db: Session) -> List[models.Competition]:
    return db.query(models.Competition).order_by(models.Competition.id.asc()).all()


def list_payment_methods(db: Session) -> List[models.PaymentMethod]:
    return db.query(models.PaymentMethod).order_by(models.PaymentMethod.id.asc()).all()


def kurdish_translation_stats(db: Session) -> Dict[str, int]:
    return {
        "questions_with_kurdish": db.query(models.Question)
        .filter(models.Question.question_text_kurdish.isnot(None))
        .count(),
        "competitions_with_kurdish": db.query(models.Competition)
        .filter(models.Competition.name_kurdish.isnot(None))
        .count(),
        "payment_methods_with_kurdish": db.query(models.PaymentMethod)
        .filter(models.PaymentMethod.name_kurdish.isnot(None))
        .count(),
    }
