"""
Wire schemas for the signature endpoints.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class SignatureResponse(BaseModel):
    """Body returned by POST /sign."""

    model_config = ConfigDict(frozen=True)

    signature: str = Field(
        ...,
        description="Lowercase hexadecimal HMAC digest of the payload",
    )


class VerifyRequest(BaseModel):
    """
    Body accepted by POST /verify.

    ``signature`` must be a JSON string (no coercion from numbers) and
    ``data`` a JSON object. Emptiness of the signature is judged by the
    SignatureService, not here.
    """

    signature: StrictStr = Field(
        ...,
        description="Signature previously issued by POST /sign",
    )
    data: Dict[str, Any] = Field(
        ...,
        description="Payload the signature was issued for",
    )
