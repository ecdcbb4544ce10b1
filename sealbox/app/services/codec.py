"""
Reversible string codecs.

Codecs are a placeholder encoding layer, NOT a security mechanism.
Every codec must satisfy ``decode(encode(s)) == s`` for all strings,
including the empty string and non-ASCII text.
"""

import base64
import binascii
from typing import Protocol, runtime_checkable

from sealbox.app.core.errors import InvalidEncoding


@runtime_checkable
class ReversibleCodec(Protocol):
    """
    Interface for lossless string <-> string transforms.

    ``decode`` raises InvalidEncoding for input it cannot decode.
    """

    def encode(self, data: str) -> str:
        ...

    def decode(self, data: str) -> str:
        ...


class Base64Codec:
    """
    Standard-alphabet base64 of the UTF-8 bytes, with padding.
    """

    name = "base64"

    def _b64encode(self, raw: bytes) -> bytes:
        return base64.b64encode(raw)

    def _b64decode(self, data: str) -> bytes:
        return base64.b64decode(data, validate=True)

    def encode(self, data: str) -> str:
        return self._b64encode(data.encode("utf-8")).decode("ascii")

    def decode(self, data: str) -> str:
        try:
            raw = self._b64decode(data)
        except (binascii.Error, ValueError) as exc:
            raise InvalidEncoding(f"Malformed {self.name} input") from exc

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidEncoding(
                f"{self.name} payload is not valid UTF-8",
                fallback=raw.decode("utf-8", errors="replace"),
            ) from exc


class Base64UrlCodec(Base64Codec):
    """
    URL-safe alphabet variant ('-' and '_' instead of '+' and '/').
    """

    name = "base64url"

    def _b64encode(self, raw: bytes) -> bytes:
        return base64.urlsafe_b64encode(raw)

    def _b64decode(self, data: str) -> bytes:
        # urlsafe_b64decode has no validate flag; map back to the
        # standard alphabet so malformed input is still rejected.
        if "+" in data or "/" in data:
            raise binascii.Error("standard-alphabet characters in base64url")
        return base64.b64decode(
            data.replace("-", "+").replace("_", "/"),
            validate=True,
        )


CODECS = {
    Base64Codec.name: Base64Codec,
    Base64UrlCodec.name: Base64UrlCodec,
}


def get_codec(name: str) -> ReversibleCodec:
    """Resolve a configured codec name to a fresh codec instance."""
    try:
        return CODECS[name]()
    except KeyError:
        raise ValueError(
            f"Unsupported codec '{name}'. Allowed values: {sorted(CODECS)}"
        ) from None
