"""
Koalab Backend: Resource Store Adapter
=======================================

What:  Find/insert access to the boards, lines and postits tables.
How:   One generic Collection per ORM model. Every operation is a single
       round-trip on the request's AsyncSession; driver and SQL errors are
       wrapped in DatabaseError so the global handler answers 500.
Who:   BoardService (and, for lines, nothing yet).

Operations:
    find_all(db, **filters)  → list of rows (filters are column equality)
    find_by_id(db, id)       → row, or NotFoundError
    insert(db, row)          → row with a freshly generated id
"""

import logging
from typing import Generic, List, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from koalab.database import Base
from koalab.exceptions import DatabaseError, NotFoundError
from koalab.models.board import Board, Line, Postit, generate_id

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

# Errors treated as store failures (asyncpg connect errors surface as OSError)
STORE_ERRORS = (SQLAlchemyError, OSError)


class Collection(Generic[ModelT]):
    """
    Typed access to one table.

    Args:
        model:    ORM class stored in the table
        resource: Singular name used in error messages ("board")
    """

    def __init__(self, model: Type[ModelT], resource: str):
        self.model = model
        self.resource = resource

    @property
    def name(self) -> str:
        return self.model.__tablename__

    async def find_all(self, db: AsyncSession, **filters) -> List[ModelT]:
        """All rows whose columns equal the given filters (all rows if none)."""
        try:
            result = await db.execute(select(self.model).filter_by(**filters))
            return list(result.scalars().all())
        except STORE_ERRORS as e:
            logger.error("Error listing %s (filters=%s): %s", self.name, filters, str(e))
            raise DatabaseError(
                message=f"Could not retrieve {self.name}. Please try again.",
                context={"collection": self.name, "error_type": type(e).__name__},
            ) from e

    async def find_by_id(self, db: AsyncSession, record_id: str) -> ModelT:
        """
        Row with primary key `record_id`.

        Raises:
            NotFoundError: no such row (→ 404)
            DatabaseError: query failed (→ 500)
        """
        try:
            record = await db.get(self.model, record_id)
        except STORE_ERRORS as e:
            logger.error("Error fetching %s %s: %s", self.resource, record_id, str(e))
            raise DatabaseError(
                message=f"Could not retrieve the {self.resource}. Please try again.",
                context={"collection": self.name, "id": record_id},
            ) from e

        if record is None:
            raise NotFoundError(resource=self.resource, resource_id=record_id)
        return record

    async def insert(self, db: AsyncSession, record: ModelT) -> ModelT:
        """
        Insert `record` under a new server-generated id.

        Any id already set on the record is overwritten. The row is committed
        before returning, so a failed write is a DatabaseError (→ 500) and
        never a success response.
        """
        record.id = generate_id()
        try:
            db.add(record)
            await db.commit()
        except STORE_ERRORS as e:
            logger.error("Error inserting into %s: %s", self.name, str(e))
            raise DatabaseError(
                message=f"Could not save the {self.resource}. Please try again.",
                context={"collection": self.name, "error_type": type(e).__name__},
            ) from e

        logger.info("Inserted %s %s", self.resource, record.id)
        return record


boards: Collection[Board] = Collection(Board, "board")
lines: Collection[Line] = Collection(Line, "line")
postits: Collection[Postit] = Collection(Postit, "postit")
