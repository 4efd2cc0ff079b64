from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CompetitionBase(BaseModel):
    name: str = Field(max_length=255)
    name_kurdish: Optional[str] = Field(default=None, max_length=255)
    name_arabic: Optional[str] = Field(default=None, max_length=255)
    name_kurmanji: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    description_kurdish: Optional[str] = None
    description_arabic: Optional[str] = None
    description_kurmanji: Optional[str] = None
    entry_fee: Decimal = Decimal("0")
    open_time: datetime
    start_time: datetime
    end_time: datetime
    max_users: int = Field(default=100, ge=1)
    game_type: Optional[str] = Field(default=None, max_length=50)


class CompetitionCreate(CompetitionBase):
    question_ids: List[int] = Field(default_factory=list)


class CompetitionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    name_kurdish: Optional[str] = Field(default=None, max_length=255)
    name_arabic: Optional[str] = Field(default=None, max_length=255)
    name_kurmanji: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    description_kurdish: Optional[str] = None
    description_arabic: Optional[str] = None
    description_kurmanji: Optional[str] = None
    entry_fee: Optional[Decimal] = None
    open_time: Optional[datetime] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    max_users: Optional[int] = Field(default=None, ge=1)
    game_type: Optional[str] = Field(default=None, max_length=50)
    question_ids: Optional[List[int]] = None

    @field_validator("name", "entry_fee", "open_time", "start_time", "end_time", "max_users")
    @classmethod
    def _required_column_not_null(cls, value):
        # omit the field to keep the stored value
        if value is None:
            raise ValueError("This field cannot be null")
        return value


class PrizeTier(BaseModel):
    id: int
    rank_from: int
    rank_to: int
    prize_type: str
    prize_value: Optional[Decimal] = None
    model_config = ConfigDict(from_attributes=True)


class Competition(CompetitionBase):
    id: int
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)
