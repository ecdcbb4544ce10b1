"""
Keyed-hash primitives for payload signing.

This module owns two things:
- the canonical serialization of a structured payload
- the HMAC primitive that digests those canonical bytes

IMPORTANT DESIGN RULE:
- Canonical form preserves the caller's key order. Keys are NOT sorted.
- Output is compact JSON, non-ASCII emitted verbatim, UTF-8 encoded.
- Numbers are rendered with the ECMAScript Number-to-String rules
  (``1.0`` -> ``1``, ``1e20`` -> ``100000000000000000000``,
  ``1.5e-05`` -> ``0.000015``). For JSON-representable payloads the
  output is byte-identical to ``JSON.stringify``, so signatures
  interoperate with clients computing HMACs in the browser or in Node.
"""

import hashlib
import hmac
import json
import math
from typing import Any, Protocol, runtime_checkable

from sealbox.app.core.errors import InvalidPayload

SUPPORTED_ALGORITHMS = ("sha256", "sha384", "sha512")


# ---------------------------------------------------------------------------
# Canonical serialization
# ---------------------------------------------------------------------------

def js_number(value: float) -> str:
    """
    Render a finite float the way ECMAScript's Number::toString does.

    ``repr`` already yields the shortest round-tripping digits; only the
    placement of the decimal point and the exponent thresholds differ.
    """
    if not math.isfinite(value):
        raise ValueError(f"Out of range float value {value!r}")
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    mantissa, _, exp = repr(abs(value)).partition("e")
    int_part, _, frac_part = mantissa.partition(".")

    raw = int_part + frac_part
    digits = raw.lstrip("0")
    # Decimal point position n, where value = 0.digits * 10**n
    n = len(int_part) + (int(exp) if exp else 0) - (len(raw) - len(digits))
    digits = digits.rstrip("0")
    k = len(digits)

    if k <= n <= 21:
        text = digits + "0" * (n - k)
    elif 0 < n <= 21:
        text = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        text = "0." + "0" * -n + digits
    else:
        e = n - 1
        e_sign = "+" if e >= 0 else "-"
        head = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{head}e{e_sign}{abs(e)}"

    return sign + text


def _write(value: Any, out: list) -> None:
    if value is None:
        out.append("null")
    elif value is True:
        out.append("true")
    elif value is False:
        out.append("false")
    elif isinstance(value, str):
        out.append(json.dumps(value, ensure_ascii=False))
    elif isinstance(value, int):
        out.append(int.__repr__(value))
    elif isinstance(value, float):
        out.append(js_number(float(value)))
    elif isinstance(value, dict):
        out.append("{")
        for index, (key, item) in enumerate(value.items()):
            if not isinstance(key, str):
                raise TypeError(
                    f"Object keys must be strings, got {type(key).__name__}"
                )
            if index:
                out.append(",")
            out.append(json.dumps(key, ensure_ascii=False))
            out.append(":")
            _write(item, out)
        out.append("}")
    elif isinstance(value, (list, tuple)):
        out.append("[")
        for index, item in enumerate(value):
            if index:
                out.append(",")
            _write(item, out)
        out.append("]")
    else:
        raise TypeError(
            f"Object of type {type(value).__name__} is not JSON serializable"
        )


def canonical_json(value: Any) -> str:
    """
    Serialize a JSON value to its canonical text form.

    Raises InvalidPayload for values JSON cannot represent
    (NaN/Infinity, bytes, sets, non-string keys, arbitrary objects).
    """
    out: list = []
    try:
        _write(value, out)
    except (TypeError, ValueError, RecursionError) as exc:
        raise InvalidPayload(
            f"Payload is not JSON-representable: {exc}"
        ) from exc
    return "".join(out)


def canonicalize_payload(payload: Any) -> bytes:
    text = canonical_json(payload)
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        # Lone surrogates cannot be UTF-8 encoded
        raise InvalidPayload(
            f"Payload is not JSON-representable: {exc}"
        ) from exc


# ---------------------------------------------------------------------------
# Primitive interface
# ---------------------------------------------------------------------------

@runtime_checkable
class KeyedHashPrimitive(Protocol):
    """
    Interface for keyed-hash primitives.

    Implementations must be deterministic: the same payload under the
    same key always yields the same digest string.
    """

    def hash(self, payload: Any) -> str:
        ...


# ---------------------------------------------------------------------------
# HMAC implementation
# ---------------------------------------------------------------------------

class HmacHashPrimitive:
    """
    HMAC over the canonical payload bytes, rendered as lowercase hex.

    The secret is held for the lifetime of the instance and is never
    exposed through ``repr``.
    """

    def __init__(self, secret: str, algorithm: str = "sha256"):
        if not secret:
            raise ValueError("HMAC secret must be a non-empty string")

        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(
                f"Unsupported HMAC algorithm '{algorithm}'. "
                f"Allowed values: {list(SUPPORTED_ALGORITHMS)}"
            )

        self._key = secret.encode("utf-8")
        self.algorithm = algorithm

    def hash(self, payload: Any) -> str:
        digest = hmac.new(
            self._key,
            canonicalize_payload(payload),
            getattr(hashlib, self.algorithm),
        )
        return digest.hexdigest()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(algorithm={self.algorithm!r})"


class HmacSha256(HmacHashPrimitive):
    def __init__(self, secret: str):
        super().__init__(secret, algorithm="sha256")
