"""
Consent Repository

Storage collaborator for consent records: insert-with-fields, filtered
queries combining equality predicates with AND, field updates and deletes.
All methods run on an injected AsyncSession and commit their own writes.
"""

import logging
from typing import Any

from sqlalchemy import and_, delete, func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from consent_log.exceptions import DatabaseError
from consent_log.models.consent_record import ConsentRecord

logger = logging.getLogger(__name__)


class ConsentRepository:
    """Thin data-access layer over the consent_records table"""

    model = ConsentRecord

    def __init__(self, db: AsyncSession):
        self.db = db

    def _where(self, filters: dict[str, Any]):
        columns = self.model.__table__.columns
        clauses = []
        for field, value in filters.items():
            if field not in columns:
                raise ValueError(f"Unknown {self.model.__name__} field: {field}")
            clauses.append(columns[field] == value)
        return and_(*clauses) if clauses else None

    def _select(self, filters: dict[str, Any]):
        stmt = select(self.model)
        where = self._where(filters)
        if where is not None:
            stmt = stmt.where(where)
        return stmt

    async def _rollback(self, operation: str, exc: Exception) -> None:
        await self.db.rollback()
        logger.error("Consent storage %s failed: %s", operation, exc)

    async def insert(self, **fields: Any) -> ConsentRecord | None:
        """
        Insert a new record.

        Returns None when the row violates a unique constraint, i.e. the
        (user_id, consent_id) pair is already taken.
        """
        record = self.model(**fields)
        self.db.add(record)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.info("Consent insert rejected by unique constraint: %s", e.orig)
            return None
        except SQLAlchemyError as e:
            await self._rollback("insert", e)
            raise DatabaseError("Failed to insert consent record", operation="insert") from e

        await self.db.refresh(record)
        return record

    async def find(self, **filters: Any) -> list[ConsentRecord]:
        """Return every record matching all of the given field values."""
        try:
            result = await self.db.execute(self._select(filters).order_by(self.model.id))
        except SQLAlchemyError as e:
            await self._rollback("find", e)
            raise DatabaseError("Failed to query consent records", operation="find") from e
        return list(result.scalars().all())

    async def find_one(self, **filters: Any) -> ConsentRecord | None:
        try:
            result = await self.db.execute(self._select(filters).order_by(self.model.id).limit(1))
        except SQLAlchemyError as e:
            await self._rollback("find_one", e)
            raise DatabaseError("Failed to query consent records", operation="find_one") from e
        return result.scalars().first()

    async def find_id(self, **filters: Any) -> int | None:
        stmt = select(self.model.id)
        where = self._where(filters)
        if where is not None:
            stmt = stmt.where(where)
        try:
            result = await self.db.execute(stmt.order_by(self.model.id).limit(1))
        except SQLAlchemyError as e:
            await self._rollback("find_id", e)
            raise DatabaseError("Failed to query consent records", operation="find_id") from e
        return result.scalars().first()

    async def count(self, **filters: Any) -> int:
        stmt = select(func.count()).select_from(self.model)
        where = self._where(filters)
        if where is not None:
            stmt = stmt.where(where)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            await self._rollback("count", e)
            raise DatabaseError("Failed to count consent records", operation="count") from e
        return result.scalar_one()

    async def page(self, offset: int = 0, limit: int = 20, **filters: Any) -> list[ConsentRecord]:
        """Return one page of matching records, newest first."""
        stmt = (
            self._select(filters)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset(offset)
            .limit(limit)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            await self._rollback("page", e)
            raise DatabaseError("Failed to list consent records", operation="page") from e
        return list(result.scalars().all())

    async def update_fields(self, record_id: int, **fields: Any) -> bool:
        """Overwrite the given fields on one record. Returns False if the id is gone."""
        self._where(fields)  # validates field names
        stmt = update(self.model).where(self.model.id == record_id).values(**fields)
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._rollback("update", e)
            raise DatabaseError("Failed to update consent record", operation="update") from e
        return result.rowcount > 0

    async def delete(self, record_id: int) -> bool:
        try:
            result = await self.db.execute(delete(self.model).where(self.model.id == record_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._rollback("delete", e)
            raise DatabaseError("Failed to delete consent record", operation="delete") from e
        return result.rowcount > 0

    async def delete_where(self, **filters: Any) -> int:
        """Delete every record matching the filters and return the count."""
        where = self._where(filters)
        if where is None:
            raise ValueError("delete_where requires at least one filter")
        try:
            result = await self.db.execute(delete(self.model).where(where))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._rollback("delete_where", e)
            raise DatabaseError("Failed to delete consent records", operation="delete_where") from e
        return result.rowcount
