"""
Tests for EncodingService.

Fields are serialized to canonical JSON before encoding, so every JSON
type must come back from decode_object with its original type. Fields
that cannot be decoded or parsed degrade to plain strings.
"""

import base64
from unittest.mock import Mock

import pytest

from sealbox.app.services.codec import Base64Codec
from sealbox.app.services.encryption import EncodingService


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _strip_stub(data: str) -> str:
    return data.replace("stub-encode(", "", 1)[:-1]


@pytest.fixture
def base64_service():
    return EncodingService(Base64Codec())


@pytest.fixture
def stub_codec():
    return Mock(
        encode=Mock(side_effect=lambda data: f"stub-encode({data})"),
        decode=Mock(side_effect=_strip_stub),
    )


@pytest.fixture
def stub_service(stub_codec):
    return EncodingService(stub_codec)


# ---------------------------------------------------------------------------
# encode_object
# ---------------------------------------------------------------------------

def test_encode_every_value_with_base64(base64_service):
    obj = {"foo": "foobar", "bar": {"isBar": True}}

    encoded = base64_service.encode_object(obj)

    assert encoded == {
        "foo": _b64('"foobar"'),
        "bar": _b64('{"isBar":true}'),
    }


def test_encode_preserves_key_order(base64_service):
    obj = {"z": 1, "a": 2, "m": 3}

    assert list(base64_service.encode_object(obj)) == ["z", "a", "m"]


def test_encode_does_not_skip_null(base64_service):
    assert base64_service.encode_object({"x": None}) == {"x": _b64("null")}


def test_encode_empty_object(base64_service, stub_service, stub_codec):
    assert base64_service.encode_object({}) == {}
    assert stub_service.encode_object({}) == {}
    stub_codec.encode.assert_not_called()


def test_encode_passes_canonical_json_to_codec(stub_service, stub_codec):
    obj = {
        "foo": "bar",
        "baz": 123,
        "nested": {"nestedProp": "nestedValue"},
    }

    encoded = stub_service.encode_object(obj)

    assert encoded == {
        "foo": 'stub-encode("bar")',
        "baz": "stub-encode(123)",
        "nested": 'stub-encode({"nestedProp":"nestedValue"})',
    }
    assert stub_codec.encode.call_count == len(obj)


# ---------------------------------------------------------------------------
# decode_object
# ---------------------------------------------------------------------------

def test_decode_base64_fields(base64_service):
    obj = {
        "foo": "YmFy",  # bar (not JSON)
        "baz": "MTIz",  # 123
        "nested": "eyJuZXN0ZWRQcm9wIjoibmVzdGVkVmFsdWUifQ==",
    }

    decoded = base64_service.decode_object(obj)

    assert decoded == {
        "foo": "bar",
        "baz": 123,
        "nested": {"nestedProp": "nestedValue"},
    }


def test_decode_non_json_content_returns_raw_string(base64_service):
    assert base64_service.decode_object({"foo": _b64("foobar")}) == {
        "foo": "foobar"
    }


def test_decode_non_standard_json_constant_returns_raw_string(base64_service):
    assert base64_service.decode_object({"x": _b64("NaN")}) == {"x": "NaN"}


def test_decode_overflowing_float_returns_raw_string(base64_service):
    assert base64_service.decode_object({"x": _b64("1e400")}) == {"x": "1e400"}


def test_decode_keeps_integer_precision(base64_service):
    big = 123456789012345678901234567890
    assert base64_service.decode_object({"n": _b64(str(big))}) == {"n": big}


def test_decode_empty_object(base64_service, stub_service, stub_codec):
    assert base64_service.decode_object({}) == {}
    assert stub_service.decode_object({}) == {}
    stub_codec.decode.assert_not_called()


def test_decode_with_stub(stub_service, stub_codec):
    obj = {
        "foo": 'stub-encode("bar")',
        "baz": 'stub-encode("123")',
        "nested": 'stub-encode({"nestedProp":"nestedValue"})',
    }

    decoded = stub_service.decode_object(obj)

    assert decoded == {
        "foo": "bar",
        "baz": "123",
        "nested": {"nestedProp": "nestedValue"},
    }
    assert stub_codec.decode.call_count == len(obj)
    for value in obj.values():
        stub_codec.decode.assert_any_call(value)


def test_malformed_field_degrades_without_failing_object(base64_service):
    obj = {"ok": _b64('{"a":1}'), "bad": "%%% not base64 %%%"}

    decoded = base64_service.decode_object(obj)

    assert decoded == {"ok": {"a": 1}, "bad": "%%% not base64 %%%"}


def test_unpadded_field_comes_back_as_received(base64_service):
    assert base64_service.decode_object({"v": "Zm9vYg"}) == {"v": "Zm9vYg"}


def test_non_utf8_field_degrades_to_replacement_string(base64_service):
    encoded = base64.b64encode(b"\xff\xfe").decode("ascii")

    assert base64_service.decode_object({"raw": encoded}) == {
        "raw": "\ufffd\ufffd"
    }


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "value",
    [
        "foobar",
        "",
        "Spécial Ch@racter$ 日本語",
        0,
        -42,
        3.25,
        True,
        False,
        None,
        [],
        [1, "two", None, {"three": 3}],
        {"isBar": True, "deep": {"list": [1.5, False]}},
        '{"looks": "like json"}',
        "123",
    ],
)
def test_round_trip_preserves_value_and_type(base64_service, value):
    encoded = base64_service.encode_object({"k": value})
    decoded = base64_service.decode_object(encoded)

    assert decoded["k"] == value
    assert type(decoded["k"]) is type(value)


# ---------------------------------------------------------------------------
# set_codec
# ---------------------------------------------------------------------------

def test_set_codec_is_used_for_encode_and_decode(base64_service):
    mock_codec = Mock(
        encode=Mock(side_effect=lambda data: f"mock-encode({data})"),
        decode=Mock(
            side_effect=lambda data: data.replace("mock-encode(", "", 1)[:-1]
        ),
    )

    base64_service.set_codec(mock_codec)

    encoded = base64_service.encode_object({"foo": "bar"})
    decoded = base64_service.decode_object(encoded)

    assert base64_service.codec is mock_codec
    assert encoded == {"foo": 'mock-encode("bar")'}
    assert decoded == {"foo": "bar"}
    mock_codec.encode.assert_called_once_with('"bar"')
    mock_codec.decode.assert_called_once_with('mock-encode("bar")')


def test_set_codec_rejects_incomplete_codec(base64_service):
    with pytest.raises(TypeError):
        base64_service.set_codec(Mock(spec=["encode"]))

    assert isinstance(base64_service.codec, Base64Codec)
