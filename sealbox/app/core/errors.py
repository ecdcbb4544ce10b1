"""
Error kinds raised by the signing and encoding services.

Propagation rules:
- InvalidPayload and InvalidSignature propagate to the caller
  (the HTTP layer maps them to client errors)
- InvalidEncoding is always recovered per field by the EncodingService
  and never surfaces from ``decode_object``
"""

from typing import Optional


class SealboxError(Exception):
    """Base class for all service-level failures."""


class InvalidPayload(SealboxError, ValueError):
    """
    Raised when a payload is absent or cannot be canonically serialized.
    """


class InvalidSignature(SealboxError, ValueError):
    """
    Raised when a signature argument is missing, empty, or not a string.
    """


class InvalidEncoding(SealboxError, ValueError):
    """
    Raised by a codec when an encoded value cannot be decoded cleanly.

    ``fallback`` carries a best-effort decoded string when the raw bytes
    could be recovered (e.g. valid base64 wrapping non-UTF-8 bytes).
    It is None when nothing could be decoded at all.
    """

    def __init__(self, message: str, fallback: Optional[str] = None):
        super().__init__(message)
        self.fallback = fallback
