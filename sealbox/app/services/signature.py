"""
HMAC signature generation and verification.

Validation policy:
- The service rejects a missing payload (InvalidPayload) and a missing,
  empty, or non-string signature (InvalidSignature) itself, regardless
  of any validation performed upstream by the HTTP layer.

Concurrency:
- The bound primitive is read exactly once per call. A concurrent
  ``set_primitive`` never mixes two primitives within a single
  generate/verify.
"""

import logging
from typing import Any, Mapping, Optional

from sealbox.app.core.errors import InvalidPayload, InvalidSignature
from sealbox.app.services.hashing import KeyedHashPrimitive

logger = logging.getLogger("sealbox.services.signature")


class SignatureService:
    """
    Generates and verifies signatures with a swappable keyed-hash primitive.
    """

    def __init__(self, primitive: KeyedHashPrimitive):
        self._primitive = self._check_primitive(primitive)

    @staticmethod
    def _check_primitive(primitive: Any) -> KeyedHashPrimitive:
        if not callable(getattr(primitive, "hash", None)):
            raise TypeError(
                "hash primitive must provide a callable 'hash' method, "
                f"got {type(primitive).__name__}"
            )
        return primitive

    @property
    def primitive(self) -> KeyedHashPrimitive:
        return self._primitive

    def set_primitive(self, primitive: KeyedHashPrimitive) -> None:
        """
        Replace the active hash primitive for all subsequent calls.

        Signatures already returned are unaffected.
        """
        self._primitive = self._check_primitive(primitive)
        logger.info(
            "hash_primitive_replaced",
            extra={"primitive": type(primitive).__name__},
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(
        self,
        payload: Optional[Mapping[str, Any]],
    ) -> str:
        """
        Generate the HMAC signature for a payload.

        Raises:
            InvalidPayload: payload is None, or cannot be serialized.
        """
        if payload is None:
            raise InvalidPayload("Payload cannot be null or undefined")

        primitive = self._primitive
        return primitive.hash(payload)

    def verify(
        self,
        signature: Optional[str],
        payload: Optional[Mapping[str, Any]],
    ) -> bool:
        """
        Check a signature against the expected signature for a payload.

        Comparison is exact string equality; a signature in a different
        letter case does not match.

        Raises:
            InvalidSignature: signature is None, empty, or not a string.
            InvalidPayload: payload is None, or cannot be serialized.
        """
        if not isinstance(signature, str) or not signature:
            raise InvalidSignature("Signature must be a non-empty string")

        expected = self.generate(payload)
        return expected == signature
