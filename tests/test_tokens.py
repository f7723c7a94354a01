import re

import pytest

from arte.compression import compress
from arte.errors import (
    AuthenticationError,
    DecompressionError,
    FormatError,
    IntegrityError,
    SerializationError,
    TokenError,
)
from arte.fingerprint import fingerprint
from arte.tokens import (
    ENCRYPTED_HASH_PLACEHOLDER,
    assemble,
    canonicalize,
    decode_params,
    encode_params,
    get_token_type,
    is_encrypted_token,
    is_valid_format,
    parse,
)

PARAMS = {
    "color1": "#A8DADC",
    "color2": "#E63946",
    "initialRectMinSize": 0.7312,
    "minGridRows": 2,
    "isAnimating": True,
    "canvasWidth": 630,
    "token": "fx-abcDEF123",
}


def test_example_mosaic_token():
    params = {"canvasWidth": 630, "color1": "#A8DADC"}
    token = encode_params("mosaic", params)
    assert re.fullmatch(r"fx-mosaic-v2\.[a-f0-9]{16}\.[A-Za-z0-9_-]+", token)
    decoded = decode_params(token)
    assert decoded.params == params
    assert decoded.type == "mosaic"
    assert decoded.encrypted is False


def test_canonical_form_keeps_caller_order():
    assert canonicalize({"b": 1, "a": "é"}) == '{"b":1,"a":"é"}'


def test_canonicalize_rejects_unserializable_input():
    with pytest.raises(TypeError):
        canonicalize({"a": object()})


def test_hash_segment_is_fingerprint_of_canonical_json():
    token = encode_params("grid", PARAMS)
    assert parse(token).hash == fingerprint(canonicalize(PARAMS))


@pytest.mark.parametrize("artwork_type", ["flow", "grid", "mosaic", "rotated", "tree", "text"])
def test_round_trip_every_type(artwork_type):
    decoded = decode_params(encode_params(artwork_type, PARAMS))
    assert decoded.type == artwork_type
    assert decoded.params == PARAMS
    assert list(decoded.params) == list(PARAMS)


def test_encrypted_round_trip():
    token = encode_params("tree", PARAMS, passphrase="s3cret")
    assert token.startswith("fx-tree-v2e." + ENCRYPTED_HASH_PLACEHOLDER + ".")
    assert is_encrypted_token(token)
    payload = parse(token).payload
    assert not set(payload) & set("+/=")
    decoded = decode_params(token, passphrase="s3cret")
    assert decoded.params == PARAMS
    assert decoded.encrypted is True


def test_encrypted_wrong_passphrase_fails():
    token = encode_params("flow", PARAMS, passphrase="right")
    with pytest.raises(AuthenticationError):
        decode_params(token, passphrase="wrong")


def test_encrypted_without_passphrase_fails():
    token = encode_params("flow", PARAMS, passphrase="right")
    with pytest.raises(AuthenticationError):
        decode_params(token)


def test_encrypted_payload_tamper_fails():
    token = encode_params("flow", PARAMS, passphrase="k")
    head, payload = token.rsplit(".", 1)
    flipped = ("A" if payload[5] != "A" else "B")
    tampered = f"{head}.{payload[:5]}{flipped}{payload[6:]}"
    with pytest.raises(TokenError):
        decode_params(tampered, passphrase="k")


def test_flipping_hash_char_is_detected():
    token = encode_params("mosaic", PARAMS)
    p = parse(token)
    for i in range(len(p.hash)):
        c = p.hash[i]
        other = "0" if c != "0" else "1"
        bad_hash = p.hash[:i] + other + p.hash[i + 1:]
        with pytest.raises(IntegrityError):
            decode_params(assemble("mosaic", False, p.payload, bad_hash))


def test_payload_segment_is_url_safe():
    for t in ("flow", "text"):
        payload = parse(encode_params(t, {"s": "?>?>?>~~~" * 30, "n": 1})).payload
        assert not set(payload) & set("+/=")


@pytest.mark.parametrize(
    "token",
    [
        "not-a-token",
        "fx-bogus-v2.abc.xyz",
        "fx-mosaic-v3.abc.xyz",
        "fx-mosaic-v2.ABC.xyz",
        "fx-mosaic-v2.xyz.payload",
        "fx-mosaic-v2.abc.",
        "fx-mosaic-v2.abc",
        "fx-mosaic-v2.abc.pay\nload",
        "",
    ],
)
def test_grammar_rejections(token):
    with pytest.raises(FormatError):
        parse(token)
    assert not is_valid_format(token)


def test_undecompressable_payload():
    with pytest.raises(DecompressionError):
        decode_params("fx-grid-v2.0123456789abcdef.!!!!")


def test_non_json_payload():
    text = "definitely not json"
    token = assemble("grid", False, compress(text), fingerprint(text))
    with pytest.raises(SerializationError):
        decode_params(token)


def test_non_object_payload():
    text = "[1,2,3]"
    token = assemble("grid", False, compress(text), fingerprint(text))
    with pytest.raises(SerializationError):
        decode_params(token)


def _forged(text):
    # Plain fingerprints are unkeyed, so anyone can build a well-formed token
    return assemble("grid", False, compress(text), fingerprint(text))


@pytest.mark.parametrize("text", ['{"a":NaN}', '{"a":Infinity}', '{"a":[-Infinity]}'])
def test_non_standard_json_constants_rejected(text):
    with pytest.raises(SerializationError):
        decode_params(_forged(text))


def test_deeply_nested_payload_rejected():
    depth = 100000
    with pytest.raises(SerializationError):
        decode_params(_forged('{"a":' + "[" * depth + "]" * depth + "}"))


def test_corrupt_compressed_stream_is_a_decompression_error():
    with pytest.raises(DecompressionError):
        decode_params("fx-grid-v2.0123456789abcdef.2Ymk_yE9fz1WuvL4NUyv-D")


def test_assemble_rules():
    assert assemble("flow", False, "abc", "0123456789abcdef") == "fx-flow-v2.0123456789abcdef.abc"
    assert assemble("flow", True, "abc") == "fx-flow-v2e.0000000000000000.abc"
    with pytest.raises(ValueError):
        assemble("flow", False, "abc")
    with pytest.raises(ValueError):
        assemble("bogus", False, "abc", "00")


def test_token_type_helpers():
    assert get_token_type("fx-rotated-v2.00.x") == "rotated"
    assert get_token_type("garbage") is None
    assert not is_encrypted_token("fx-rotated-v2.00.x")
    assert is_encrypted_token("fx-rotated-v2e.0000000000000000.x")
    assert not is_encrypted_token("junk-v2e.zz")
    assert not is_encrypted_token("fx-bogus-v2e.00.x")


def test_errors_expose_kind():
    with pytest.raises(TokenError) as info:
        parse("nope")
    assert info.value.kind == "format"
    assert isinstance(info.value, ValueError)
