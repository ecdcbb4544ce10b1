"""
Encoding endpoints.

POST /encrypt   encode every value of a JSON object
POST /decrypt   decode every value of an encoded JSON object

The configured codec is a reversible encoding, not a cipher. The route
names are kept for client compatibility.
"""

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse

from sealbox.app.api.dependencies import (
    get_correlation_id,
    get_encoding_service,
    require_encoded_object_body,
    require_object_body,
)
from sealbox.app.core.errors import InvalidPayload
from sealbox.app.services.encryption import (
    DecryptedObject,
    EncodingService,
    EncryptedObject,
)

logger = logging.getLogger("sealbox.api.encryption")

router = APIRouter(tags=["Encoding"])


@router.post(
    "/encrypt",
    summary="Encode every value of a JSON object",
    responses={400: {"description": "Payload must be a non-empty object"}},
)
def encrypt(
    response: Response,
    payload: Annotated[Dict[str, Any], Depends(require_object_body)],
    service: Annotated[EncodingService, Depends(get_encoding_service)],
    correlation_id: Annotated[str, Depends(get_correlation_id)],
) -> EncryptedObject:
    response.headers["X-Correlation-ID"] = correlation_id

    try:
        encoded = service.encode_object(payload)
    except InvalidPayload as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
            headers={"X-Correlation-ID": correlation_id},
        ) from exc

    logger.info(
        "object_encoded",
        extra={
            "trace_id": correlation_id,
            "field_count": len(encoded),
        },
    )
    return encoded


@router.post(
    "/decrypt",
    summary="Decode every value of an encoded JSON object",
    # Decoded JSON may hold integers beyond 64 bits, which orjson rejects.
    response_class=JSONResponse,
    responses={400: {"description": "Payload must be a non-empty object of strings"}},
)
def decrypt(
    response: Response,
    payload: Annotated[Dict[str, str], Depends(require_encoded_object_body)],
    service: Annotated[EncodingService, Depends(get_encoding_service)],
    correlation_id: Annotated[str, Depends(get_correlation_id)],
) -> DecryptedObject:
    """
    Fields that fail to decode come back as plain strings rather than
    failing the request.
    """
    response.headers["X-Correlation-ID"] = correlation_id

    decoded = service.decode_object(payload)

    logger.info(
        "object_decoded",
        extra={
            "trace_id": correlation_id,
            "field_count": len(decoded),
        },
    )
    return decoded
