from .codec import Base64Codec, Base64UrlCodec, ReversibleCodec, get_codec
from .encryption import DecryptedObject, EncodingService, EncryptedObject
from .hashing import (
    HmacHashPrimitive,
    HmacSha256,
    KeyedHashPrimitive,
    canonical_json,
    canonicalize_payload,
)
from .signature import SignatureService

__all__ = [
    "Base64Codec",
    "Base64UrlCodec",
    "ReversibleCodec",
    "get_codec",
    "DecryptedObject",
    "EncodingService",
    "EncryptedObject",
    "HmacHashPrimitive",
    "HmacSha256",
    "KeyedHashPrimitive",
    "canonical_json",
    "canonicalize_payload",
    "SignatureService",
]
