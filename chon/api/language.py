"""Localized content for the mobile app (``?language=en|ku|ar|km``)."""
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from chon.db import models
from chon.db.database import get_db
from chon.db.repositories import content as content_repo

router = APIRouter(prefix="/api/language", tags=["language"])

SUPPORTED_LANGUAGES = {"en": "English", "ku": "Kurdish"}


def _question(question: models.Question, language: str) -> Dict[str, Any]:
    return {
        "id": question.id,
        "question_text": question.translated("question_text", language),
        "options": question.translated_options(language),
        "correct_answer": question.translated("correct_answer", language),
        "question_type": question.question_type,
        "level": question.level,
        "has_kurdish": question.has_kurdish_translation(),
        "available_languages": question.available_languages(),
    }


def _competition(competition: models.Competition, language: str) -> Dict[str, Any]:
    return {
        "id": competition.id,
        "name": competition.translated("name", language),
        "description": competition.translated("description", language),
        "entry_fee": str(competition.entry_fee) if competition.entry_fee is not None else None,
        "game_type": competition.game_type,
        "status": competition.get_status(),
        "has_kurdish": competition.has_kurdish_translation(),
        "available_languages": competition.available_languages(),
    }


def _payment_method(method: models.PaymentMethod, language: str) -> Dict[str, Any]:
    return {
        "id": method.id,
        "name": method.translated("name", language),
        "instructions": method.translated("instructions", language),
        "code": method.code,
        "provider": method.provider,
        "is_active": method.is_active,
        "has_kurdish": method.has_kurdish_translation(),
        "available_languages": method.available_languages(),
    }


@router.get("/questions")
def get_questions(language: str = "en", db: Session = Depends(get_db)):
    data = [_question(q, language) for q in content_repo.list_questions(db)]
    return {"success": True, "language": language, "data": data}


@router.get("/competitions")
def get_competitions(language: str = "en", db: Session = Depends(get_db)):
    data = [_competition(c, language) for c in content_repo.list_competitions(db)]
    return {"success": True, "language": language, "data": data}


@router.get("/payment-methods")
def get_payment_methods(language: str = "en", db: Session = Depends(get_db)):
    data = [_payment_method(m, language) for m in content_repo.list_payment_methods(db)]
    return {"success": True, "language": language, "data": data}


@router.get("/available-languages")
def get_available_languages(db: Session = Depends(get_db)):
    return {
        "success": True,
        "available_languages": dict(SUPPORTED_LANGUAGES),
        "translation_stats": content_repo.kurdish_translation_stats(db),
    }
