"""
Pydantic models for /api/goals.

Goal platforms are stored exactly as 'all', 'Shopee', 'TikTok' or 'Lazada';
the shared platform validator maps other spellings onto those names.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator

from .base import BaseParamsModel, canonical_platform
from .types import CoercedInt


class GoalQueryParams(BaseParamsModel):
    """GET /api/goals. Omitted filters match every goal."""

    year: CoercedInt = Field(default=None, ge=2000, le=2200)
    month: CoercedInt = Field(default=None, ge=1, le=12)
    platform: Optional[str] = Field(default=None)
    type: Optional[Literal['revenue', 'profit']] = Field(default=None)

    @field_validator('platform', mode='before')
    @classmethod
    def normalize_platform(cls, v):
        # Absent means "any platform" here, not the 'all' goal row
        if v is None or v == '':
            return None
        return canonical_platform(v)

    @field_validator('type', mode='before')
    @classmethod
    def blank_type_is_none(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v


class GoalUpsertBody(BaseParamsModel):
    """POST /api/goals"""

    platform: str
    year: int = Field(ge=2000, le=2200)
    month: int = Field(ge=1, le=12)
    type: Literal['revenue', 'profit']
    target: float = Field(allow_inf_nan=False, ge=0)

    @field_validator('platform', mode='before')
    @classmethod
    def normalize_platform(cls, v):
        if v is None or (isinstance(v, str) and v.strip() == ''):
            raise ValueError("platform is required")
        return canonical_platform(v)
