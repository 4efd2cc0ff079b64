from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Integer, String, Text, Index, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .base import Base, now_utc
from .competitions import competitions_questions, STATUS_ACTIVE, STATUS_OPEN
from .translations import TranslatableMixin
from chon.db.types import UTCDateTime


QUESTION_TYPES = {
    "multi_choice": "Multiple Choice",
    "puzzle": "Puzzle",
    "pattern_recognition": "Pattern Recognition",
    "true_false": "True/False",
    "math": "Math Problem",
}

QUESTION_LEVELS = {
    "easy": "Easy",
    "medium": "Medium",
    "hard": "Hard",
}


class Question(TranslatableMixin, Base):
    __tablename__ = 'questions'
    __translatable_fields__ = ("question_text", "options", "correct_answer")
    __translation_markers__ = ("question_text",)

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_text = Column(Text, nullable=False)
    question_text_kurdish = Column(Text, nullable=True)
    question_text_arabic = Column(Text, nullable=True)
    question_text_kurmanji = Column(Text, nullable=True)
    question_type = Column(String(30), nullable=False, default='multi_choice')
    options = Column(JSONB, nullable=False, default=list)
    options_kurdish = Column(JSONB, nullable=True)
    options_arabic = Column(JSONB, nullable=True)
    options_kurmanji = Column(JSONB, nullable=True)
    correct_answer = Column(Text, nullable=False)
    correct_answer_kurdish = Column(Text, nullable=True)
    correct_answer_arabic = Column(Text, nullable=True)
    correct_answer_kurmanji = Column(Text, nullable=True)
    level = Column(String(10), nullable=False, default='medium')
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    competitions = relationship("Competition", secondary=competitions_questions, back_populates="questions")

    __table_args__ = (
        Index('idx_questions_type_level', 'question_type', 'level'),
    )

    def translated_options(self, language: str = "en") -> list:
        return self.translated("options", language) or []

    def can_edit(self, now: Optional[datetime] = None) -> bool:
        """False while any attached competition is open for registration or running."""
        current = now or now_utc()
        return not any(
            competition.get_status(current) in (STATUS_OPEN, STATUS_ACTIVE)
            for competition in self.competitions
        )


@event.listens_for(Question, "before_insert")
def _default_question_options(mapper, connection, target):
    if target.options is None:
        target.options = []
