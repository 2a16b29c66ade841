"""
Consent Service

Records per-user consent decisions keyed by (user_id, consent_id).

Mutations report "precondition not met" by returning False rather than
raising: add() fails when the pair already exists, update() and remove()
fail when it does not. Storage failures raise DatabaseError.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from consent_log.models.consent_record import ConsentRecord, ConsentStatus
from consent_log.repositories.consent_repository import ConsentRepository
from consent_log.utils.sanitize import sanitize_text_field

logger = logging.getLogger(__name__)


def coerce_status(value: Any) -> ConsentStatus:
    """
    Normalize a caller-supplied status to ConsentStatus.

    "accepted"/"declined" (any case) and booleans map directly; everything
    else goes through int() and only exactly 1 counts as accepted.
    Non-numeric values are declined.
    """
    if isinstance(value, ConsentStatus):
        return value
    if isinstance(value, bool):
        return ConsentStatus.ACCEPTED if value else ConsentStatus.DECLINED
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("accepted", "declined"):
            return ConsentStatus[lowered.upper()]
    try:
        number = int(value)
    except (TypeError, ValueError):
        return ConsentStatus.DECLINED
    return ConsentStatus.ACCEPTED if number == ConsentStatus.ACCEPTED else ConsentStatus.DECLINED


class ConsentLog:
    """Consent store operating through an injected ConsentRepository"""

    def __init__(self, repository: ConsentRepository):
        self.repository = repository

    async def exists(self, user_id: str, consent_id: str) -> int | None:
        """Return the id of the record for the pair, or None."""
        user_id = sanitize_text_field(user_id)
        consent_id = sanitize_text_field(consent_id)
        return await self.repository.find_id(user_id=user_id, consent_id=consent_id)

    async def get(self, user_id: str, consent_id: str) -> ConsentRecord | None:
        user_id = sanitize_text_field(user_id)
        consent_id = sanitize_text_field(consent_id)
        return await self.repository.find_one(user_id=user_id, consent_id=consent_id)

    async def has_consent(self, user_id: str, consent_id: str) -> bool:
        """True only if a record exists and its stored status is exactly accepted."""
        record = await self.get(user_id, consent_id)
        if record is None:
            return False
        return record.status == ConsentStatus.ACCEPTED

    async def add(self, user_id: str, consent_id: str, status: Any) -> bool:
        user_id = sanitize_text_field(user_id)
        consent_id = sanitize_text_field(consent_id)
        status = coerce_status(status)

        # Keys that sanitize to nothing could never be looked up or bulk-removed
        if not user_id or not consent_id:
            return False

        if await self.repository.find_id(user_id=user_id, consent_id=consent_id) is not None:
            return False

        # The unique constraint settles races between concurrent adds
        record = await self.repository.insert(
            user_id=user_id,
            consent_id=consent_id,
            status=int(status),
            created_at=datetime.now(timezone.utc),
        )
        if record is None:
            return False

        logger.info("Consent added: id=%s user=%s consent=%s status=%s", record.id, user_id, consent_id, status.label)
        return True

    async def update(self, user_id: str, consent_id: str, status: Any) -> bool:
        user_id = sanitize_text_field(user_id)
        consent_id = sanitize_text_field(consent_id)
        status = coerce_status(status)

        record_id = await self.repository.find_id(user_id=user_id, consent_id=consent_id)
        if record_id is None:
            return False

        await self.repository.update_fields(
            record_id,
            status=int(status),
            updated_at=datetime.now(timezone.utc),
        )
        logger.info("Consent updated: id=%s user=%s consent=%s status=%s", record_id, user_id, consent_id, status.label)
        return True

    async def remove(self, user_id: str, consent_id: str) -> bool:
        user_id = sanitize_text_field(user_id)
        consent_id = sanitize_text_field(consent_id)

        record_id = await self.repository.find_id(user_id=user_id, consent_id=consent_id)
        if record_id is None:
            return False

        await self.repository.delete(record_id)
        logger.info("Consent removed: id=%s user=%s consent=%s", record_id, user_id, consent_id)
        return True

    async def remove_all_for_user(self, user_id: str) -> int:
        """Delete every consent recorded for user_id and return how many went."""
        user_id = sanitize_text_field(user_id)
        if not user_id:
            return 0

        removed = await self.repository.delete_where(user_id=user_id)
        logger.info("Consents removed for user=%s: %d", user_id, removed)
        return removed

    async def list_consents(
        self,
        user_id: str | None = None,
        consent_id: str | None = None,
        status: ConsentStatus | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[ConsentRecord], int]:
        """Return one page of records, newest first, with the total match count."""
        filters: dict[str, Any] = {}
        if user_id is not None:
            filters["user_id"] = sanitize_text_field(user_id)
        if consent_id is not None:
            filters["consent_id"] = sanitize_text_field(consent_id)
        if status is not None:
            filters["status"] = int(status)

        total = await self.repository.count(**filters)
        records = await self.repository.page(offset=offset, limit=limit, **filters)
        return records, total
