"""
Consent Routes

Admin API over the consent store: listing, pair lookups, add/update/remove
and the bulk "remove all for user" action.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from consent_log.config import settings
from consent_log.database import get_db
from consent_log.exceptions import ConsentAlreadyExistsError, ConsentNotFoundError, InvalidConsentStatusError
from consent_log.models.consent_record import ConsentStatus
from consent_log.repositories.consent_repository import ConsentRepository
from consent_log.schemas.consent import (
    ConsentCheckResponse,
    ConsentListResponse,
    ConsentOperationResponse,
    ConsentResponse,
    ConsentWrite,
    RemoveUserConsentsRequest,
    RemoveUserConsentsResponse,
    parse_status,
)
from consent_log.services.consent_service import ConsentLog
from consent_log.utils.sanitize import sanitize_text_field

router = APIRouter(tags=["Consents"])

logger = logging.getLogger(__name__)


def get_consent_log(db: AsyncSession = Depends(get_db)) -> ConsentLog:
    """Build a consent store bound to the request's database session."""
    return ConsentLog(ConsentRepository(db))


@router.get("/", response_model=ConsentListResponse)
async def list_consents(
    user_id: str | None = Query(None, max_length=255),
    consent_id: str | None = Query(None, max_length=255),
    status_filter: str | None = Query(None, alias="status", description="accepted/declined or 1/0"),
    offset: int = Query(0, ge=0),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    consent_log: ConsentLog = Depends(get_consent_log),
) -> ConsentListResponse:
    """
    List consent records, newest first.

    Optional equality filters on user, consent and status.
    """
    parsed_status: ConsentStatus | None = None
    if status_filter is not None:
        try:
            parsed_status = parse_status(status_filter)
        except ValueError as e:
            raise InvalidConsentStatusError(status_filter) from e

    records, total = await consent_log.list_consents(
        user_id=user_id,
        consent_id=consent_id,
        status=parsed_status,
        offset=offset,
        limit=limit,
    )

    return ConsentListResponse(
        items=[ConsentResponse.model_validate(record) for record in records],
        total=total,
        offset=offset,
        limit=limit,
        has_next=offset + len(records) < total,
    )


@router.get("/check", response_model=ConsentCheckResponse)
async def check_consent(
    user_id: str = Query(..., min_length=1, max_length=255),
    consent_id: str = Query(..., min_length=1, max_length=255),
    consent_log: ConsentLog = Depends(get_consent_log),
) -> ConsentCheckResponse:
    """Report whether a consent exists for the pair and whether it is accepted."""
    record_id = await consent_log.exists(user_id, consent_id)
    has_consent = await consent_log.has_consent(user_id, consent_id) if record_id is not None else False

    return ConsentCheckResponse(
        user_id=sanitize_text_field(user_id),
        consent_id=sanitize_text_field(consent_id),
        exists=record_id is not None,
        record_id=record_id,
        has_consent=has_consent,
    )


@router.get("/record", response_model=ConsentResponse)
async def get_consent(
    user_id: str = Query(..., min_length=1, max_length=255),
    consent_id: str = Query(..., min_length=1, max_length=255),
    consent_log: ConsentLog = Depends(get_consent_log),
) -> ConsentResponse:
    record = await consent_log.get(user_id, consent_id)
    if record is None:
        raise ConsentNotFoundError(user_id, consent_id)
    return ConsentResponse.model_validate(record)


@router.post("/", response_model=ConsentOperationResponse, status_code=status.HTTP_201_CREATED)
async def add_consent(
    request: ConsentWrite,
    consent_log: ConsentLog = Depends(get_consent_log),
) -> ConsentOperationResponse:
    """
    Record a new consent decision.

    Fails with 409 if the pair already has a record; use PUT to change it.
    """
    if not await consent_log.add(request.user_id, request.consent_id, request.status):
        raise ConsentAlreadyExistsError(request.user_id, request.consent_id)

    return ConsentOperationResponse(success=True, message=f"Consent {request.status.label.lower()}")


@router.put("/", response_model=ConsentOperationResponse)
async def update_consent(
    request: ConsentWrite,
    consent_log: ConsentLog = Depends(get_consent_log),
) -> ConsentOperationResponse:
    """Change the status of an existing consent. Fails with 404 if there is none."""
    if not await consent_log.update(request.user_id, request.consent_id, request.status):
        raise ConsentNotFoundError(request.user_id, request.consent_id)

    return ConsentOperationResponse(success=True, message=f"Consent {request.status.label.lower()}")


@router.delete("/", response_model=ConsentOperationResponse)
async def remove_consent(
    user_id: str = Query(..., min_length=1, max_length=255),
    consent_id: str = Query(..., min_length=1, max_length=255),
    consent_log: ConsentLog = Depends(get_consent_log),
) -> ConsentOperationResponse:
    if not await consent_log.remove(user_id, consent_id):
        raise ConsentNotFoundError(user_id, consent_id)

    return ConsentOperationResponse(success=True, message="Consent removed")


@router.post("/remove-user", response_model=RemoveUserConsentsResponse)
async def remove_user_consents(
    request: RemoveUserConsentsRequest,
    consent_log: ConsentLog = Depends(get_consent_log),
) -> RemoveUserConsentsResponse:
    """
    Remove every consent recorded for a user.

    Always answers 200; `success` is false when nothing matched.
    """
    removed = await consent_log.remove_all_for_user(request.user_id)

    if removed:
        logger.info(f"Removed {removed} consents for user {request.user_id}")
        message = f"Removed {removed} consents"
    else:
        message = "No consents found for user"

    return RemoveUserConsentsResponse(success=removed > 0, removed=removed, message=message)
