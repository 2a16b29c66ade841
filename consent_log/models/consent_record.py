"""
ConsentRecord model.

One row per (user_id, consent_id) pair holding the latest accept/decline
decision for that pair.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, String, UniqueConstraint

from consent_log.database import Base


class ConsentStatus(enum.IntEnum):
    DECLINED = 0
    ACCEPTED = 1

    @property
    def label(self) -> str:
        return self.name.capitalize()


def status_label(value: int | None) -> str | None:
    """Render a stored status flag; values other than exactly 1 or 0 have no label."""
    if value == ConsentStatus.ACCEPTED:
        return ConsentStatus.ACCEPTED.label
    if value == ConsentStatus.DECLINED:
        return ConsentStatus.DECLINED.label
    return None


class ConsentRecord(Base):
    __tablename__ = "consent_records"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    consent_id = Column(String(255), nullable=False)
    # Stored as a plain integer flag: 1 = accepted, 0 = declined
    status = Column(Integer, nullable=False, default=int(ConsentStatus.DECLINED))
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "consent_id", name="uq_consent_user_consent"),
        Index("idx_consent_consent_id", "consent_id"),
    )

    @property
    def is_accepted(self) -> bool:
        return self.status == ConsentStatus.ACCEPTED

    @property
    def status_label(self) -> str | None:
        return status_label(self.status)

    def __repr__(self) -> str:
        return f"<ConsentRecord id={self.id} user_id={self.user_id!r} consent_id={self.consent_id!r} status={self.status}>"
