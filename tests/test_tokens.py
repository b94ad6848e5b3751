"""Tests for finch.auth.tokens — bearer extraction and JWT decoding."""

import time

import jwt

from finch.auth.tokens import (
    decode_unverified,
    encode_unsigned,
    extract_bearer,
    jwt_token_decoder,
    unverified_token_decoder,
)
from finch.http.headers import Headers

SECRET = "test-secret-key-with-at-least-32-bytes"


class TestExtractBearer:
    def test_extracts_token(self) -> None:
        headers = Headers.from_mapping({"Authorization": "Bearer abc.def.ghi"})
        assert extract_bearer(headers) == "abc.def.ghi"

    def test_missing_header(self) -> None:
        assert extract_bearer(Headers()) is None

    def test_other_scheme(self) -> None:
        assert extract_bearer(Headers.from_mapping({"Authorization": "Basic xyz"})) is None

    def test_empty_token(self) -> None:
        assert extract_bearer(Headers.from_mapping({"Authorization": "Bearer   "})) is None

    def test_custom_header_and_scheme(self) -> None:
        headers = Headers.from_mapping({"X-Api-Token": "Token t1"})
        assert extract_bearer(headers, header="X-Api-Token", scheme="Token") == "t1"


class TestDecodeUnverified:
    def test_decodes_payload(self) -> None:
        token = encode_unsigned({"sub": "u1", "role": "admin"})
        assert decode_unverified(token) == {"sub": "u1", "role": "admin"}

    def test_unsigned_token_shape(self) -> None:
        header, payload, signature = encode_unsigned({"sub": "u1"}).split(".")
        assert header and payload
        assert signature == ""

    def test_wrong_segment_count(self) -> None:
        assert decode_unverified("only.two") is None

    def test_garbage_payload(self) -> None:
        assert decode_unverified("a.!!!.c") is None

    def test_non_object_payload(self) -> None:
        header = encode_unsigned({"x": 1}).split(".")[0]
        # base64url of "[1]"
        assert decode_unverified(f"{header}.WzFd.") is None

    def test_expired(self) -> None:
        token = encode_unsigned({"sub": "u1", "exp": int(time.time()) - 60})
        assert decode_unverified(token) is None

    def test_issued_in_future(self) -> None:
        token = encode_unsigned({"sub": "u1", "iat": int(time.time()) + 3600})
        assert decode_unverified(token) is None

    def test_not_before_in_future(self) -> None:
        token = encode_unsigned({"sub": "u1", "nbf": int(time.time()) + 3600})
        assert decode_unverified(token) is None

    def test_valid_window(self) -> None:
        now = int(time.time())
        token = encode_unsigned({"sub": "u1", "iat": now - 60, "exp": now + 3600})
        assert decode_unverified(token) is not None

    def test_signed_token_read_without_key(self) -> None:
        token = jwt.encode({"sub": "u1"}, SECRET, algorithm="HS256")
        assert decode_unverified(token) == {"sub": "u1"}


class TestVerifyingDecoder:
    async def test_valid_signature(self) -> None:
        decode = jwt_token_decoder(SECRET)
        token = jwt.encode({"sub": "u1", "role": "user"}, SECRET, algorithm="HS256")
        assert await decode(token) == {"sub": "u1", "role": "user"}

    async def test_wrong_key(self) -> None:
        decode = jwt_token_decoder(SECRET)
        token = jwt.encode({"sub": "u1"}, "another-secret-of-enough-length!", algorithm="HS256")
        assert await decode(token) is None

    async def test_unsigned_token_rejected(self) -> None:
        decode = jwt_token_decoder(SECRET)
        assert await decode(encode_unsigned({"sub": "u1"})) is None

    async def test_expired(self) -> None:
        decode = jwt_token_decoder(SECRET)
        token = jwt.encode({"sub": "u1", "exp": int(time.time()) - 60}, SECRET, algorithm="HS256")
        assert await decode(token) is None

    async def test_audience(self) -> None:
        decode = jwt_token_decoder(SECRET, audience="finch-api")
        good = jwt.encode({"sub": "u1", "aud": "finch-api"}, SECRET, algorithm="HS256")
        bad = jwt.encode({"sub": "u1", "aud": "other"}, SECRET, algorithm="HS256")
        assert await decode(good) is not None
        assert await decode(bad) is None


class TestDecoderAdapter:
    async def test_adapter(self) -> None:
        token = encode_unsigned({"sub": "u1"})
        assert await unverified_token_decoder(token) == {"sub": "u1"}
        assert await unverified_token_decoder("bad") is None
