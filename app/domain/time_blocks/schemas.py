"""Time block schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import BlockType
from ...shared.validators import validate_timezone, validate_weekdays


class TimeBlockCreate(BaseModel):
    """Schema for blocking a period (lunch, day off, vacation...)"""

    type: BlockType = BlockType.CUSTOM
    reason: Optional[str] = Field(None, min_length=2, max_length=200)
    startsAt: datetime
    endsAt: datetime
    isRecurring: bool = False
    recurringDays: Optional[list[int]] = None
    timezone: Optional[str] = None

    @field_validator("recurringDays")
    @classmethod
    def validate_days(cls, v):
        return validate_weekdays(v)

    @field_validator("timezone")
    @classmethod
    def validate_tz(cls, v):
        return validate_timezone(v)


class TimeBlockUpdate(BaseModel):
    """Schema for updating a time block"""

    type: Optional[BlockType] = None
    reason: Optional[str] = Field(None, min_length=2, max_length=200)
    startsAt: Optional[datetime] = None
    endsAt: Optional[datetime] = None
    isRecurring: Optional[bool] = None
    recurringDays: Optional[list[int]] = None
    active: Optional[bool] = None
    timezone: Optional[str] = None

    @field_validator("recurringDays")
    @classmethod
    def validate_days(cls, v):
        return validate_weekdays(v)

    @field_validator("timezone")
    @classmethod
    def validate_tz(cls, v):
        return validate_timezone(v)


class TimeBlockResponse(BaseModel):
    """Schema for time block response"""

    id: str
    type: str
    reason: Optional[str]
    startsAt: datetime
    endsAt: datetime
    isRecurring: bool
    recurringDays: list[int]
    active: bool
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True
