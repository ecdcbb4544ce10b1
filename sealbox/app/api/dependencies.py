import logging
import uuid
from typing import Annotated, Any, Dict, Optional

from fastapi import Body, Depends, Header, HTTPException, Request, status

from sealbox.app.services.encryption import EncodingService
from sealbox.app.services.signature import SignatureService

logger = logging.getLogger("sealbox.api")

# =============================================================================
# Dependency providers
# =============================================================================

def get_correlation_id(
    x_correlation_id: Annotated[
        Optional[str],
        Header(description="Audit trace ID"),
    ] = None,
) -> str:
    """Extract or generate a correlation ID for end-to-end traceability."""
    if x_correlation_id and len(x_correlation_id) > 128:
        return str(uuid.uuid4())
    return x_correlation_id or str(uuid.uuid4())


def get_signature_service(request: Request) -> SignatureService:
    """
    Return the process-wide SignatureService bound at startup.
    """
    service = getattr(request.app.state, "signature_service", None)
    if service is None:
        raise RuntimeError("signature service not initialized")
    return service


def get_encoding_service(request: Request) -> EncodingService:
    """
    Return the process-wide EncodingService bound at startup.
    """
    service = getattr(request.app.state, "encoding_service", None)
    if service is None:
        raise RuntimeError("encoding service not initialized")
    return service


# =============================================================================
# Request body guards
# =============================================================================

def require_object_body(
    payload: Annotated[Any, Body(description="Non-empty JSON object")],
    correlation_id: Annotated[str, Depends(get_correlation_id)],
) -> Dict[str, Any]:
    """
    Reject any body that is not a non-empty JSON object.
    """
    if not isinstance(payload, dict) or not payload:
        logger.warning(
            "rejected_request_body",
            extra={
                "trace_id": correlation_id,
                "body_type": type(payload).__name__,
            },
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Payload must be a non-empty object",
            headers={"X-Correlation-ID": correlation_id},
        )
    return payload


def require_encoded_object_body(
    payload: Annotated[Dict[str, Any], Depends(require_object_body)],
    correlation_id: Annotated[str, Depends(get_correlation_id)],
) -> Dict[str, str]:
    """
    Reject any object with a value that is not an encoded string.
    """
    invalid = [key for key, value in payload.items() if not isinstance(value, str)]
    if invalid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Encoded values must be strings: {invalid}",
            headers={"X-Correlation-ID": correlation_id},
        )
    return payload
