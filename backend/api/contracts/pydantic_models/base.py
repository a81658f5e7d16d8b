"""
Base Pydantic model for all API param schemas.

Key features:
- frozen=True: Immutable after normalization (prevents downstream mutation)
- populate_by_name=True: Accept both alias and field name
- extra='ignore': Ignore undeclared fields (safe)
- platform normalized to its canonical name at the boundary
"""

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError, field_validator

from schemas.api_contract import PlatformFilter
from utils.normalize import ValidationError


def canonical_platform(v):
    """'all' for None, blank or 'all'; otherwise the canonical marketplace name."""
    try:
        return PlatformFilter.from_wire(v).to_wire()
    except ValidationError as e:
        raise ValueError(str(e)) from e


class BaseParamsModel(BaseModel):
    """
    Base model for all API param schemas.

    All param models inherit from this to ensure consistent behavior:
    - Frozen after creation (immutable)
    - Whitespace stripped from strings
    - Both alias and field name accepted
    - Unknown fields ignored
    - platform normalized to 'all' or a canonical marketplace name

    Invariant: after validation, platform is 'all', 'Shopee', 'TikTok' or
    'Lazada'. Use .platform_filter for the typed All | Specific value.
    """
    model_config = ConfigDict(
        frozen=True,  # Immutable after normalization
        str_strip_whitespace=True,  # Strip whitespace from strings
        populate_by_name=True,  # Accept both alias and field name
        extra='ignore',  # Ignore undeclared fields
    )

    @field_validator('platform', mode='before', check_fields=False)
    @classmethod
    def normalize_platform(cls, v):
        """Accepts None, '', 'all' or any spelling of a marketplace name."""
        return canonical_platform(v)

    @property
    def platform_filter(self) -> PlatformFilter:
        return PlatformFilter.from_wire(getattr(self, 'platform', None))

    @classmethod
    def parse(cls, raw: Mapping[str, Any]):
        """
        Validate raw request values.

        Raises:
            ValidationError: First failing field, in the shape routes turn into a 400
        """
        try:
            values = raw.to_dict() if hasattr(raw, 'to_dict') else dict(raw)
            return cls.model_validate(values)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = '.'.join(str(p) for p in first.get('loc', ())) or None
            message = first.get('msg', 'Invalid value')
            if message.startswith('Value error, '):
                message = message[len('Value error, '):]
            raise ValidationError(message, field=field, received_value=first.get('input')) from e
