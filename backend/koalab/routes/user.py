"""
Koalab Backend: Sign-in Route
==============================

What:  POST /api/user exchanges an identity assertion for a session cookie.

Request Flow:
    1. Body {assertion} is validated (missing/malformed → 400)
    2. IdentityVerifier confirms it with the remote service
       (rejected → 403, unreachable → 500)
    3. A signed `email` cookie is set and the identity document returned
"""

from fastapi import APIRouter, Depends, Response

from koalab.context import AppContext, get_context
from koalab.schemas.common import ErrorResponse
from koalab.schemas.user import AssertionRequest, Identity
from koalab.security import issue_session

router = APIRouter(prefix="/api", tags=["Session"])


@router.post(
    "/user",
    response_model=Identity,
    responses={
        200: {"description": "Signed in; session cookie set", "model": Identity},
        400: {"description": "Malformed request body", "model": ErrorResponse},
        403: {"description": "Assertion rejected", "model": ErrorResponse},
        500: {"description": "Identity verifier unavailable", "model": ErrorResponse},
    },
    summary="Sign in with an identity assertion",
)
async def sign_in(
    payload: AssertionRequest,
    response: Response,
    context: AppContext = Depends(get_context),
) -> Identity:
    identity = await context.verifier.verify(payload.assertion)
    issue_session(response, context, identity.email)
    return identity
