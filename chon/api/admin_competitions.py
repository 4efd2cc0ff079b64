import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from chon.api.deps import require_admin
from chon.db import models, schemas
from chon.db.database import get_db
from chon.db.models.competitions import CompetitionScheduleError
from chon.db.repositories import competitions as competition_repo
from chon.services.competition_service import CompetitionLockedError, CompetitionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/competitions", tags=["admin-competitions"])


def serialize_competition(competition: models.Competition) -> Dict[str, Any]:
    data = schemas.Competition.model_validate(competition).model_dump(mode="json")
    data["status"] = competition.get_status()
    data["can_delete"] = competition.can_delete()
    data["question_ids"] = [question.id for question in competition.questions]
    data["prize_tiers"] = [
        {
            **schemas.PrizeTier.model_validate(tier).model_dump(mode="json"),
            "rank_range": tier.rank_range_description(),
            "prize": tier.prize_description(),
        }
        for tier in competition.prize_tiers
    ]
    return data


def serialize_player_answer(answer: models.CompetitionPlayerAnswer) -> Dict[str, Any]:
    return {
        "id": answer.id,
        "player_id": answer.player_id,
        "player_nickname": answer.player.nickname if answer.player else None,
        "question_id": answer.question_id,
        "question_text": answer.question.question_text if answer.question else None,
        "player_answer": answer.player_answer,
        "correct_answer": answer.correct_answer,
        "is_correct": answer.is_correct,
        "answered_at": answer.answered_at.isoformat() if answer.answered_at else None,
    }


def _get_or_404(db: Session, competition_id: int) -> models.Competition:
    competition = competition_repo.get_competition(db, competition_id=competition_id)
    if competition is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Competition not found")
    return competition


@router.get("")
def list_competitions(db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    return {"success": True, "data": [serialize_competition(c) for c in competition_repo.list_competitions(db)]}


@router.get("/statistics")
def competition_statistics(db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    return {"success": True, "data": CompetitionService(db).statistics()}


@router.get("/{competition_id}")
def show_competition(competition_id: int, db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    return {"success": True, "data": serialize_competition(_get_or_404(db, competition_id))}


@router.get("/{competition_id}/results")
def competition_results(competition_id: int, db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    competition = _get_or_404(db, competition_id)
    return {"success": True, "data": competition_repo.competition_results(db, competition_id=competition.id)}


@router.get("/{competition_id}/answers")
def list_player_answers(
    competition_id: int,
    is_correct: Optional[bool] = None,
    player_id: Optional[int] = None,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    competition = _get_or_404(db, competition_id)
    answers = competition_repo.list_player_answers(
        db, competition_id=competition.id, is_correct=is_correct, player_id=player_id
    )
    return {"success": True, "data": [serialize_player_answer(answer) for answer in answers]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_competition(
    payload: schemas.CompetitionCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    try:
        competition = CompetitionService(db).create_competition(payload)
    except CompetitionScheduleError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return {"success": True, "message": "Competition created successfully", "data": serialize_competition(competition)}


@router.put("/{competition_id}")
def update_competition(
    competition_id: int,
    payload: schemas.CompetitionUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    competition = _get_or_404(db, competition_id)
    try:
        competition = CompetitionService(db).update_competition(competition, payload)
    except CompetitionLockedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except CompetitionScheduleError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return {"success": True, "message": "Competition updated successfully", "data": serialize_competition(competition)}


@router.delete("/{competition_id}")
def delete_competition(competition_id: int, db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    competition = _get_or_404(db, competition_id)
    try:
        CompetitionService(db).delete_competition(competition)
    except CompetitionLockedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return {"success": True, "message": "Competition deleted successfully"}
