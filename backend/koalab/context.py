"""
Koalab Backend: Application Context
====================================

What:  The handles every request needs (settings, session codec, identity
       verifier, database engine and session factory), bundled in one
       immutable object.
How:   Built once by the lifespan and stored on `app.state.context`;
       handlers receive it through the get_context() dependency.
"""

from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from koalab.config import Settings
from koalab.services.identity_verifier import IdentityVerifier
from koalab.services.session_codec import SessionCodec


@dataclass(frozen=True)
class AppContext:
    settings: Settings
    codec: SessionCodec
    verifier: IdentityVerifier
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the context built at startup."""
    return request.app.state.context
