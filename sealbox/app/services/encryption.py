"""
Per-field encoding of flat objects.

Every value is serialized to canonical JSON text before it reaches the
codec, so non-string values (numbers, booleans, null, nested objects)
survive the round trip with their types intact.

Decoding is total over its input: a field that cannot be decoded or
parsed degrades to a plain string instead of failing the whole object.
"""

import json
import logging
import math
from typing import Any, Dict, Mapping

from sealbox.app.core.errors import InvalidEncoding
from sealbox.app.services.codec import ReversibleCodec
from sealbox.app.services.hashing import canonical_json

logger = logging.getLogger("sealbox.services.encryption")

EncryptedObject = Dict[str, str]
DecryptedObject = Dict[str, Any]


class EncodingService:
    """
    Applies a swappable reversible codec to every value of an object.
    """

    def __init__(self, codec: ReversibleCodec):
        self._codec = self._check_codec(codec)

    @staticmethod
    def _check_codec(codec: Any) -> ReversibleCodec:
        for method in ("encode", "decode"):
            if not callable(getattr(codec, method, None)):
                raise TypeError(
                    f"codec must provide a callable '{method}' method, "
                    f"got {type(codec).__name__}"
                )
        return codec

    @property
    def codec(self) -> ReversibleCodec:
        return self._codec

    def set_codec(self, codec: ReversibleCodec) -> None:
        """Replace the active codec for all subsequent calls."""
        self._codec = self._check_codec(codec)
        logger.info(
            "codec_replaced",
            extra={"codec": type(codec).__name__},
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def encode_object(self, obj: Mapping[str, Any]) -> EncryptedObject:
        """
        Encode every value of ``obj``.

        Result keys mirror the input iteration order. No field is
        skipped, ``None`` included.
        """
        codec = self._codec
        return {
            key: codec.encode(canonical_json(value))
            for key, value in obj.items()
        }

    def decode_object(self, obj: Mapping[str, str]) -> DecryptedObject:
        """
        Decode every value of ``obj``.

        Each field is decoded, then parsed as JSON. Content that is not
        valid JSON is kept as the decoded string.
        """
        codec = self._codec
        return {
            key: self._decode_field(codec, key, value)
            for key, value in obj.items()
        }

    @staticmethod
    def _decode_field(codec: ReversibleCodec, key: str, value: str) -> Any:
        try:
            decoded = codec.decode(value)
        except InvalidEncoding as exc:
            logger.warning(
                "field_decode_degraded",
                extra={
                    "field": key,
                    "reason": str(exc),
                },
            )
            return exc.fallback if exc.fallback is not None else value

        try:
            return json.loads(
                decoded,
                parse_constant=_reject_constant,
                parse_float=_finite_float,
            )
        except ValueError:
            return decoded


def _reject_constant(name: str) -> Any:
    # NaN/Infinity are not JSON; keep such fields as strings.
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(text: str) -> float:
    # Literals such as 1e400 overflow to inf, which no JSON encoder accepts.
    value = float(text)
    if math.isinf(value):
        raise ValueError(f"float literal out of range: {text}")
    return value
