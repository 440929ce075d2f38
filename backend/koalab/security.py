"""
Koalab Backend: Session Gate
=============================

What:  Issues the session cookie after sign-in and guards every board
       endpoint behind it.
How:   require_session is a FastAPI dependency attached to the boards router.
       It raises AuthenticationError (→ 403) before the handler runs when the
       cookie is missing or does not decode. It never touches the handler's
       arguments or result.

Cookie:
    name  = SESSION_COOKIE_NAME (default "email")
    path  = "/"
    value = SessionCodec token carrying the verified email
"""

import logging

from fastapi import Depends, Request, Response

from koalab.context import AppContext, get_context
from koalab.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


async def require_session(
    request: Request,
    context: AppContext = Depends(get_context),
) -> str:
    """
    Return the authenticated email, or reject the request with 403.

    Usage:
        router = APIRouter(dependencies=[Depends(require_session)])
    """
    cookie_name = context.settings.session_cookie_name
    token = request.cookies.get(cookie_name)
    if not token:
        raise AuthenticationError(context={"reason": "missing_cookie"})

    return context.codec.decode(cookie_name, token)


def issue_session(response: Response, context: AppContext, email: str) -> None:
    """Attach a freshly minted session cookie for `email` to `response`."""
    cookie_name = context.settings.session_cookie_name
    token = context.codec.encode(cookie_name, email)
    response.set_cookie(key=cookie_name, value=token, path="/")
    logger.info("Session issued for %s", email)
