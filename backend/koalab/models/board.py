"""
Koalab Backend: Whiteboard ORM Models
======================================

What:  ORM models for the `boards`, `lines` and `postits` tables.
How:   Inherit from the shared DeclarativeBase; create_schema() creates the
       tables on startup.
Who:   Used by the store collections (services/store.py).

Identifiers:
    Every row gets an opaque 32-char hex string (uuid4().hex) generated in
    Python at insert time. The same string is used in URLs, JSON bodies and
    foreign-key-like `board_id` columns, so no conversion happens anywhere.

    `board_id` is deliberately NOT a foreign key: postits may reference a
    board that does not exist. It is unbounded text, like every
    client-supplied string column.
"""

import uuid

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from koalab.database import Base

ID_LENGTH = 32


def generate_id() -> str:
    """New opaque identifier for a board, line or postit."""
    return uuid.uuid4().hex


class Board(Base):
    """A whiteboard canvas. Created once, never mutated or deleted."""

    __tablename__ = "boards"

    id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        primary_key=True,
        default=generate_id,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Board(id={self.id}, title='{self.title}')>"


class Line(Base):
    """
    A straight stroke drawn on a board.

    Reserved: the table exists but no endpoint reads or writes it yet.
    """

    __tablename__ = "lines"

    id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        primary_key=True,
        default=generate_id,
    )
    board_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    x1: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    x2: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    y1: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    y2: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<Line(id={self.id}, board_id={self.board_id}, "
            f"({self.x1},{self.y1})->({self.x2},{self.y2}))>"
        )


class Postit(Base):
    """
    A sticky note positioned on a board.

    The API exposes `coords` {x, y} and `size` {w, h} as nested objects;
    they are stored as flat columns.
    """

    __tablename__ = "postits"

    id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        primary_key=True,
        default=generate_id,
    )
    # Indexed: GET /api/boards/{id}/postits filters on it
    board_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    x: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    y: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    w: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    h: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    angle: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    color: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Postit(id={self.id}, board_id={self.board_id}, title='{self.title}')>"
