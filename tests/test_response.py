"""Tests for finch.http.response — chainable Response and Success."""

import pytest

from finch.http.response import JSON_CONTENT_TYPE, Response, Success


class TestResponse:
    def test_defaults(self) -> None:
        r = Response()
        assert r.status == 200
        assert r.content_type == JSON_CONTENT_TYPE
        assert r.headers == ()

    def test_with_status_returns_new(self) -> None:
        r = Response("x")
        r2 = r.with_status(201)
        assert r.status == 200
        assert r2.status == 201

    def test_with_header_appends(self) -> None:
        r = Response().with_header("X-A", "1").with_header("X-B", "2")
        assert r.headers == (("X-A", "1"), ("X-B", "2"))

    def test_with_headers_mapping_and_tuple(self) -> None:
        r = Response().with_headers({"X-A": "1"}).with_headers((("X-B", "2"),))
        assert r.headers == (("X-A", "1"), ("X-B", "2"))

    def test_with_content_type(self) -> None:
        assert Response().with_content_type("text/plain").content_type == "text/plain"

    def test_body_bytes_and_text(self) -> None:
        assert Response("héllo").body_bytes == "héllo".encode()
        assert Response(b"abc").text == "abc"

    def test_json(self) -> None:
        assert Response('{"a": 1}').json() == {"a": 1}

    def test_header_lookup_case_insensitive(self) -> None:
        r = Response().with_header("X-Request-ID", "abc")
        assert r.header("x-request-id") == "abc"
        assert r.header("missing") is None

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            Response().status = 500  # type: ignore[misc]


class TestSuccess:
    def test_defaults(self) -> None:
        s = Success({"id": 1})
        assert s.data == {"id": 1}
        assert s.status == 200
        assert s.headers == ()

    def test_custom_status(self) -> None:
        assert Success(None, status=201).status == 201
