from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


PointsTransactionType = Literal["purchase", "spend", "admin_credit", "refund"]
PointsReferenceType = Literal["competition", "package_purchase", "admin_action"]


class PointsTransactionCreate(BaseModel):
    player_id: int
    type: PointsTransactionType
    amount: int = Field(ge=1)
    reference_type: Optional[PointsReferenceType] = None
    reference_id: Optional[str] = Field(default=None, max_length=255)
    metadata: Optional[Dict[str, Any]] = None
    # numeric ids from older clients are stored as text
    model_config = ConfigDict(coerce_numbers_to_str=True)


class PointsTransaction(BaseModel):
    id: int
    player_id: int
    type: str
    type_label: str
    amount: int
    balance_before: int
    balance_after: int
    reference_type: Optional[str] = None
    reference_type_label: Optional[str] = None
    reference_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias="metadata_json")
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class PlayerPointsBalance(BaseModel):
    player_id: int
    current_balance: int
    total_earned: int
    total_spent: int
    model_config = ConfigDict(from_attributes=True)
