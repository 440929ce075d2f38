"""
Koalab Backend: Sign-in Schemas
================================

What:  Request body of POST /api/user and the verifier's identity document.
"""

from pydantic import BaseModel, Field, field_validator


class AssertionRequest(BaseModel):
    """Body of POST /api/user."""
    assertion: str = Field(
        min_length=1,
        description="Identity assertion obtained by the browser from the identity provider",
    )


class Identity(BaseModel):
    """
    JSON document returned by the remote verifier.

    Returned verbatim to the client after a successful sign-in. A failed
    verification also parses into this model, with status != "okay" and
    typically an empty email. Fields sent as null read as their zero value.
    """
    status: str = Field(default="", description='"okay" when the assertion was accepted')
    email: str = Field(default="", description="Verified email address")
    audience: str = Field(default="", description="Origin the assertion was issued for")
    issuer: str = Field(default="", description="Identity provider that signed the assertion")
    expires: int = Field(default=0, description="Assertion expiry (ms since epoch)")

    @field_validator("status", "email", "audience", "issuer", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return "" if v is None else v

    @field_validator("expires", mode="before")
    @classmethod
    def null_as_zero(cls, v):
        return 0 if v is None else v

    @property
    def okay(self) -> bool:
        return self.status == "okay" and bool(self.email)
