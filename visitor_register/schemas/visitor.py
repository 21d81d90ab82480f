# visitor_register/schemas/visitor.py
"""
Visitor request/response schemas.
Validation rules live here so every failing field is reported in one
response instead of stopping at the first.
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from visitor_register.utils.clock import as_utc, utcnow

NATIONAL_ID_RE = re.compile(r"[0-9]{11}")
NAME_MAX_LENGTH = 100
MIN_BIRTH_YEAR = 1900

_NAME_MESSAGES = {
    "first_name": "First name must not be empty.",
    "last_name": "Last name must not be empty.",
    "reason_for_visit": "Reason for visit must not be empty.",
}


def _require_text(value, field_name: str, max_length: Optional[int] = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise PydanticCustomError("not_empty", _NAME_MESSAGES[field_name])
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise PydanticCustomError(
            "too_long", "Must be at most {max_length} characters.", {"max_length": max_length}
        )
    return value


def _check_birth_year(year: int) -> int:
    latest = utcnow().year
    if not MIN_BIRTH_YEAR <= year <= latest:
        raise PydanticCustomError(
            "birth_year", "Birth year must be between {first} and {last}.",
            {"first": MIN_BIRTH_YEAR, "last": latest},
        )
    return year


class VisitorIdentity(BaseModel):
    """Fields checked by the kiosk before the visitor accepts the disclosures."""

    national_id: str = Field(validation_alias=AliasChoices("national_id", "tc_kimlik"))
    first_name: str
    last_name: str
    birth_year: int

    @field_validator("national_id", mode="before")
    @classmethod
    def national_id_is_eleven_digits(cls, value):
        if not isinstance(value, str) or not NATIONAL_ID_RE.fullmatch(value):
            raise PydanticCustomError("national_id", "National ID must be exactly 11 digits.")
        return value

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def names_not_empty(cls, value, info):
        return _require_text(value, info.field_name, NAME_MAX_LENGTH)

    @field_validator("birth_year", mode="before")
    @classmethod
    def birth_year_is_integer(cls, value):
        # Accepts 1990 and "1990", rejects booleans, floats and free text.
        if isinstance(value, bool):
            raise PydanticCustomError("birth_year", "Birth year must be a whole number.")
        if isinstance(value, int):
            return _check_birth_year(value)
        if isinstance(value, str):
            try:
                year = int(value.strip())
            except ValueError:
                pass
            else:
                return _check_birth_year(year)
        raise PydanticCustomError("birth_year", "Birth year must be a whole number.")


class VisitorCreate(VisitorIdentity):
    reason_for_visit: str

    @field_validator("reason_for_visit", mode="before")
    @classmethod
    def reason_not_empty(cls, value):
        return _require_text(value, "reason_for_visit")


class VisitorOut(BaseModel):
    id: str
    national_id: str
    first_name: str
    last_name: str
    birth_year: int
    reason_for_visit: str
    entry_time: datetime
    exit_time: Optional[datetime]
    duration_minutes: Optional[int]
    visit_duration: Optional[str]      # "N minutes", null while active
    is_active: bool

    @field_validator("entry_time", "exit_time")
    @classmethod
    def in_utc(cls, value):
        return as_utc(value)

    class Config:
        from_attributes = True


class VisitorMetricsOut(BaseModel):
    visitors_today: int
    active_visitors: int
    average_visit_duration_minutes: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True
