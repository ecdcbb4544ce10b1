"""
Signature endpoints.

POST /sign     issue an HMAC signature for the request body
POST /verify   check a {signature, data} pair (204 valid, 400 invalid)
"""

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import ValidationError

from sealbox.app.api.dependencies import (
    get_correlation_id,
    get_signature_service,
    require_object_body,
)
from sealbox.app.core.errors import InvalidPayload, InvalidSignature
from sealbox.app.schemas.signature import SignatureResponse, VerifyRequest
from sealbox.app.services.signature import SignatureService

logger = logging.getLogger("sealbox.api.signature")

router = APIRouter(tags=["Signatures"])


# =============================================================================
# POST /sign
# =============================================================================

@router.post(
    "/sign",
    summary="Generate an HMAC signature for a JSON object",
    response_model=SignatureResponse,
    responses={400: {"description": "Payload must be a non-empty object"}},
)
def sign(
    response: Response,
    payload: Annotated[Dict[str, Any], Depends(require_object_body)],
    service: Annotated[SignatureService, Depends(get_signature_service)],
    correlation_id: Annotated[str, Depends(get_correlation_id)],
) -> SignatureResponse:
    """
    Sign the request body as-is. Key order is significant.
    """
    response.headers["X-Correlation-ID"] = correlation_id

    try:
        signature = service.generate(payload)
    except InvalidPayload as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
            headers={"X-Correlation-ID": correlation_id},
        ) from exc

    logger.info(
        "signature_generated",
        extra={
            "trace_id": correlation_id,
            "field_count": len(payload),
        },
    )
    return SignatureResponse(signature=signature)


# =============================================================================
# POST /verify
# =============================================================================

@router.post(
    "/verify",
    summary="Verify an HMAC signature against a JSON object",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        204: {"description": "Signature is valid"},
        400: {"description": "Invalid request body or signature mismatch"},
    },
)
def verify(
    body: Annotated[Dict[str, Any], Depends(require_object_body)],
    service: Annotated[SignatureService, Depends(get_signature_service)],
    correlation_id: Annotated[str, Depends(get_correlation_id)],
) -> Response:
    try:
        request = VerifyRequest.model_validate(body)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=[
                {"loc": list(err["loc"]), "msg": err["msg"]}
                for err in exc.errors()
            ],
            headers={"X-Correlation-ID": correlation_id},
        ) from exc

    try:
        valid = service.verify(request.signature, request.data)
    except (InvalidSignature, InvalidPayload) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
            headers={"X-Correlation-ID": correlation_id},
        ) from exc

    logger.info(
        "signature_verified",
        extra={
            "trace_id": correlation_id,
            "valid": valid,
        },
    )

    if not valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Signature does not match payload",
            headers={"X-Correlation-ID": correlation_id},
        )

    return Response(
        status_code=status.HTTP_204_NO_CONTENT,
        headers={"X-Correlation-ID": correlation_id},
    )
