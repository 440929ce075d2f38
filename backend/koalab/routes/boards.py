"""
Koalab Backend: Board and Postit Routes
========================================

What:  List/create/show endpoints for boards and their postits.
How:   Thin handlers delegating to BoardService. The whole router sits
       behind require_session, so none of these run without a valid cookie.

Route Inventory:
    GET  /api/boards                 list all boards
    POST /api/boards                 create a board
    GET  /api/boards/{id}            show one board (404 if unknown)
    GET  /api/boards/{id}/postits    list the board's postits
    POST /api/boards/{id}/postits    create a postit on the board
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from koalab.database import get_db_session
from koalab.schemas.board import (
    BoardCreate,
    BoardResponse,
    PostitCreate,
    PostitResponse,
)
from koalab.schemas.common import ErrorResponse
from koalab.security import require_session
from koalab.services.board_service import board_service

router = APIRouter(
    prefix="/api/boards",
    tags=["Boards"],
    dependencies=[Depends(require_session)],
    responses={
        403: {"description": "Missing or invalid session cookie", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
)


@router.get("", response_model=List[BoardResponse], summary="List all boards")
async def list_boards(db: AsyncSession = Depends(get_db_session)) -> List[BoardResponse]:
    return await board_service.list_boards(db)


@router.post(
    "",
    response_model=BoardResponse,
    responses={400: {"description": "Malformed request body", "model": ErrorResponse}},
    summary="Create a board",
)
async def create_board(
    payload: BoardCreate,
    db: AsyncSession = Depends(get_db_session),
) -> BoardResponse:
    """The identifier is always generated here; a client `_id` is ignored."""
    return await board_service.create_board(db, payload)


@router.get(
    "/{board_id}",
    response_model=BoardResponse,
    responses={404: {"description": "Board not found", "model": ErrorResponse}},
    summary="Show one board",
)
async def show_board(
    board_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> BoardResponse:
    return await board_service.get_board(db, board_id)


@router.get(
    "/{board_id}/postits",
    response_model=List[PostitResponse],
    summary="List the postits of a board",
)
async def list_postits(
    board_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[PostitResponse]:
    return await board_service.list_postits(db, board_id)


@router.post(
    "/{board_id}/postits",
    response_model=PostitResponse,
    responses={400: {"description": "Malformed request body", "model": ErrorResponse}},
    summary="Create a postit on a board",
)
async def create_postit(
    board_id: str,
    payload: PostitCreate,
    db: AsyncSession = Depends(get_db_session),
) -> PostitResponse:
    """board_id comes from the path; the board is not required to exist."""
    return await board_service.create_postit(db, board_id, payload)
