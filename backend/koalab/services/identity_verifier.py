"""
Koalab Backend: Identity Verifier
==================================

What:  Confirms a browser-supplied identity assertion with the remote verifier.
How:   Form-encoded POST of {assertion, audience} over HTTPS with httpx, then
       parses the JSON answer {status, email, audience, issuer, expires}.
Who:   Called by POST /api/user.

Outcome Mapping:
    status == "okay" and email present  → Identity returned
    any other parsed answer             → AuthenticationError (403)
    network error / timeout             → IdentityServiceError (500)
    HTTP 5xx from the verifier          → IdentityServiceError (500)
    body is not the expected JSON       → IdentityServiceError (500)

No retries: a failed round-trip fails the sign-in request immediately.
"""

import logging
import time
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from koalab.exceptions import AuthenticationError, IdentityServiceError
from koalab.schemas.user import Identity

logger = logging.getLogger(__name__)


class IdentityVerifier:
    """
    Client for the remote assertion verification endpoint.

    Owns one httpx.AsyncClient for the lifetime of the application; the
    lifespan calls aclose() on shutdown.

    Args:
        verifier_url: Verification endpoint (Persona by default)
        audience:     This service's public origin
        timeout:      Seconds allowed for the whole round-trip
        client:       Pre-built client (tests pass one with a MockTransport)
    """

    def __init__(
        self,
        verifier_url: str,
        audience: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.verifier_url = verifier_url
        self.audience = audience
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def verify(self, assertion: str) -> Identity:
        """
        Verify `assertion` for this service's audience.

        Returns:
            The verifier's identity document (status "okay").

        Raises:
            AuthenticationError:  verifier rejected the assertion
            IdentityServiceError: verifier unreachable or answered garbage
        """
        start_time = time.perf_counter()
        try:
            response = await self.client.post(
                self.verifier_url,
                data={"assertion": assertion, "audience": self.audience},
            )
        except httpx.HTTPError as e:
            logger.error(
                "Identity verifier request failed after %.0fms: %s",
                (time.perf_counter() - start_time) * 1000,
                str(e),
            )
            raise IdentityServiceError(
                context={"url": self.verifier_url, "error_type": type(e).__name__},
            ) from e

        if response.status_code >= 500:
            logger.error(
                "Identity verifier answered HTTP %d after %.0fms",
                response.status_code,
                (time.perf_counter() - start_time) * 1000,
            )
            raise IdentityServiceError(
                context={"url": self.verifier_url, "http_status": response.status_code},
            )

        try:
            identity = Identity.model_validate_json(response.content)
        except PydanticValidationError as e:
            logger.error(
                "Identity verifier returned an unreadable body (HTTP %d)",
                response.status_code,
            )
            raise IdentityServiceError(
                message="The identity verification service returned an invalid response.",
                context={"url": self.verifier_url, "http_status": response.status_code},
            ) from e

        if not identity.okay:
            logger.info("Assertion rejected by verifier (status=%r)", identity.status)
            raise AuthenticationError(
                message="Invalid authentication",
                context={"status": identity.status},
            )

        logger.info(
            "Verified %s in %.0fms",
            identity.email,
            (time.perf_counter() - start_time) * 1000,
        )
        return identity

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self.client.aclose()
