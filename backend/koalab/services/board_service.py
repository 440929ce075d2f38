"""
Koalab Backend: Board Service
==============================

What:  The list/create/show operations behind the /api/boards endpoints.
How:   Maps request schemas to ORM rows, delegates persistence to the store
       collections, and maps rows back to response schemas.
Who:   Called by the board route handlers.

Every operation is one store round-trip. Errors raised by the collections
(NotFoundError, DatabaseError) propagate unchanged to the global handlers.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from koalab.models.board import Board, Postit
from koalab.schemas.board import (
    BoardCreate,
    BoardResponse,
    Coords,
    PostitCreate,
    PostitResponse,
    Size,
)
from koalab.services import store

logger = logging.getLogger(__name__)


def postit_to_response(postit: Postit) -> PostitResponse:
    """Re-nest the flat coordinate and size columns."""
    return PostitResponse(
        id=postit.id,
        board_id=postit.board_id,
        title=postit.title,
        coords=Coords(x=postit.x, y=postit.y),
        size=Size(w=postit.w, h=postit.h),
        angle=postit.angle,
        color=postit.color,
    )


class BoardService:
    """Stateless; receives the request's session on every call."""

    async def list_boards(self, db: AsyncSession) -> List[BoardResponse]:
        rows = await store.boards.find_all(db)
        return [BoardResponse.model_validate(row) for row in rows]

    async def create_board(self, db: AsyncSession, payload: BoardCreate) -> BoardResponse:
        board = await store.boards.insert(db, Board(title=payload.title))
        return BoardResponse.model_validate(board)

    async def get_board(self, db: AsyncSession, board_id: str) -> BoardResponse:
        board = await store.boards.find_by_id(db, board_id)
        return BoardResponse.model_validate(board)

    async def list_postits(self, db: AsyncSession, board_id: str) -> List[PostitResponse]:
        """Postits whose board_id equals `board_id`; empty for unknown boards."""
        rows = await store.postits.find_all(db, board_id=board_id)
        return [postit_to_response(row) for row in rows]

    async def create_postit(
        self,
        db: AsyncSession,
        board_id: str,
        payload: PostitCreate,
    ) -> PostitResponse:
        """
        Insert a postit on `board_id`.

        The board's existence is not checked, so orphaned postits are
        possible.
        """
        postit = Postit(
            board_id=board_id,
            title=payload.title,
            x=payload.coords.x,
            y=payload.coords.y,
            w=payload.size.w,
            h=payload.size.h,
            angle=payload.angle,
            color=payload.color,
        )
        postit = await store.postits.insert(db, postit)
        return postit_to_response(postit)


board_service = BoardService()
