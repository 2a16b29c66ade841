"""
Consent Schemas

Pydantic models for consent requests and responses.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from consent_log.models.consent_record import ConsentStatus
from consent_log.utils.sanitize import sanitize_text_field


def parse_status(value: Any) -> ConsentStatus:
    """Accept 1/0, true/false or "accepted"/"declined"; reject anything else."""
    if isinstance(value, ConsentStatus):
        return value
    if isinstance(value, bool):
        return ConsentStatus.ACCEPTED if value else ConsentStatus.DECLINED
    if isinstance(value, int) and value in (0, 1):
        return ConsentStatus(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("accepted", "1", "true"):
            return ConsentStatus.ACCEPTED
        if lowered in ("declined", "0", "false"):
            return ConsentStatus.DECLINED
    raise ValueError("status must be one of: accepted, declined, 1, 0")


def require_key(value: str) -> str:
    """Reject identifiers that are empty once markup and control characters are stripped."""
    if not sanitize_text_field(value):
        raise ValueError("must not be empty after removing markup and control characters")
    return value


class ConsentKey(BaseModel):
    """Identifies a consent record by its (user_id, consent_id) pair"""

    user_id: str = Field(..., min_length=1, max_length=255, description="Subject identifier, e.g. an email")
    consent_id: str = Field(..., min_length=1, max_length=255, description="Consent or form identifier")

    @field_validator("user_id", "consent_id")
    @classmethod
    def validate_key(cls, value: str) -> str:
        return require_key(value)


class ConsentWrite(ConsentKey):
    """Request to add or update a consent"""

    status: ConsentStatus = Field(..., description="accepted/declined or 1/0")

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, value: Any) -> ConsentStatus:
        return parse_status(value)


class RemoveUserConsentsRequest(BaseModel):
    """Request to remove every consent recorded for a user"""

    user_id: str = Field(..., min_length=1, max_length=255)

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, value: str) -> str:
        return require_key(value)


class ConsentResponse(BaseModel):
    """Consent record as returned by the API"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    consent_id: str
    status: int
    status_label: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class ConsentListResponse(BaseModel):
    """One page of consent records"""

    items: list[ConsentResponse]
    total: int
    offset: int
    limit: int
    has_next: bool


class ConsentCheckResponse(BaseModel):
    """Existence and acceptance state of a pair"""

    user_id: str
    consent_id: str
    exists: bool
    record_id: int | None = None
    has_consent: bool


class ConsentOperationResponse(BaseModel):
    """Outcome of a mutating consent operation"""

    success: bool
    message: str


class RemoveUserConsentsResponse(BaseModel):
    """Outcome of the remove-all-for-user action"""

    success: bool
    removed: int
    message: str
