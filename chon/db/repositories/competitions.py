from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from chon.db import models
from chon.db.models.wallets import TRANSACTION_COMPLETED


def list_competitions(db: Session) -> List[models.Competition]:
    return db.query(models.Competition).order_by(models.Competition.start_time.desc()).all()


def get_competition(db: Session, *, competition_id: int) -> Optional[models.Competition]:
    return db.query(models.Competition).filter(models.Competition.id == competition_id).first()


def status_counts(db: Session, *, now: Optional[datetime] = None) -> Dict[str, int]:
    current = now or models.now_utc()
    c = models.Competition
    q = db.query(c)
    return {
        "upcoming": q.filter(c.open_time > current).count(),
        "open": q.filter(c.open_time <= current, c.start_time > current).count(),
        "active": q.filter(c.start_time <= current, c.end_time > current).count(),
        "completed": q.filter(c.end_time <= current).count(),
    }


def average_active_entry_fee(db: Session, *, now: Optional[datetime] = None) -> Decimal:
    current = now or models.now_utc()
    c = models.Competition
    value = db.query(func.avg(c.entry_fee)).filter(c.start_time <= current, c.end_time > current).scalar()
    if value is None:
        return Decimal("0")
    return Decimal(str(value)).quantize(Decimal("0.01"))


def most_popular_game_type(db: Session) -> str:
    c = models.Competition
    row = (
        db.query(c.game_type, func.count(c.id).label("total"))
        .filter(c.game_type.isnot(None))
        .group_by(c.game_type)
        .order_by(func.count(c.id).desc())
        .first()
    )
    return row[0].capitalize() if row else "None"


def get_questions(db: Session, *, question_ids: List[int]) -> List[models.Question]:
    if not question_ids:
        return []
    return db.query(models.Question).filter(models.Question.id.in_(question_ids)).all()


def list_player_answers(
    db: Session,
    *,
    competition_id: int,
    is_correct: Optional[bool] = None,
    player_id: Optional[int] = None,
) -> List[models.CompetitionPlayerAnswer]:
    a = models.CompetitionPlayerAnswer
    q = db.query(a).filter(a.competition_id == competition_id)
    if is_correct is not None:
        q = q.filter(a.is_correct.is_(is_correct))
    if player_id is not None:
        q = q.filter(a.player_id == player_id)
    return q.order_by(a.answered_at.desc(), a.id.desc()).all()


def competition_results(db: Session, *, competition_id: int) -> Dict[str, Any]:
    """Participation and score summary for one competition."""
    t = models.Transaction
    lb = models.CompetitionLeaderboard
    total_players = (
        db.query(func.count(func.distinct(t.player_id)))
        .filter(t.competition_id == competition_id, t.status == TRANSACTION_COMPLETED)
        .scalar()
    )
    total_correct = (
        db.query(models.CompetitionPlayerAnswer)
        .filter(
            models.CompetitionPlayerAnswer.competition_id == competition_id,
            models.CompetitionPlayerAnswer.is_correct.is_(True),
        )
        .count()
    )
    avg_score, max_score, min_score = (
        db.query(func.avg(lb.score), func.max(lb.score), func.min(lb.score))
        .filter(lb.competition_id == competition_id)
        .one()
    )
    top = (
        db.query(lb)
        .filter(lb.competition_id == competition_id)
        .order_by(lb.score.desc(), lb.id.asc())
        .first()
    )
    top_player = None
    if top is not None:
        top_player = {
            "player_id": top.player_id,
            "nickname": top.player.nickname if top.player and top.player.nickname else "Unknown",
            "score": top.score,
        }
    return {
        "total_players": total_players or 0,
        "total_correct_answers": total_correct,
        "average_score": round(float(avg_score), 2) if avg_score is not None else 0,
        "highest_score": max_score or 0,
        "lowest_score": min_score or 0,
        "top_player": top_player,
    }
