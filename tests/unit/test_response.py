"""
Unit tests for HTTP response building.
"""

import pytest

from tinyhttpd.http.response import (
    HTTPResponse,
    ResponseBuilder,
    bad_request,
    created,
    empty,
    internal_error,
    not_found,
    ok,
    ok_binary,
    ok_text,
)
from tinyhttpd.http.status_codes import HTTPStatus, status_line


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        response = HTTPResponse(status=HTTPStatus.OK)
        assert response.status_line == "HTTP/1.1 200 OK"

        response = HTTPResponse(status=HTTPStatus.NOT_FOUND)
        assert response.status_line == "HTTP/1.1 404 Not Found"

    def test_empty_response_is_status_line_only(self):
        response = HTTPResponse(status=HTTPStatus.OK)

        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_to_bytes_includes_headers_in_order(self):
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"Content-Type": "text/plain", "Content-Encoding": "gzip"},
            body=b"test",
        )

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Encoding: gzip\r\n"
            b"Content-Length: 4\r\n"
            b"\r\n"
            b"test"
        )

    def test_to_bytes_sets_content_length(self):
        """Test that Content-Length is auto-set for a body."""
        result = HTTPResponse(body=b"hello world").to_bytes()

        assert b"Content-Length: 11\r\n" in result

    def test_explicit_zero_content_length_is_kept(self):
        response = HTTPResponse(headers={"Content-Length": "0"})

        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n"

    def test_stale_content_length_is_recomputed(self):
        response = HTTPResponse(
            headers={"Content-Length": "999", "Content-Type": "text/plain"},
            body=b"abc",
        )

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Length: 3\r\n"
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"abc"
        )

    def test_no_date_or_server_header(self):
        result = HTTPResponse(body=b"x").to_bytes()

        assert b"Date:" not in result
        assert b"Server:" not in result

    def test_set_header_chaining(self):
        """Test method chaining for headers."""
        response = (HTTPResponse()
            .set_header("X-One", "1")
            .set_header("X-Two", "2"))

        assert response.headers == {"X-One": "1", "X-Two": "2"}


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        response = ResponseBuilder().status(HTTPStatus.CREATED).build()
        assert response.status == HTTPStatus.CREATED

    def test_status_from_int(self):
        response = ResponseBuilder().status(404).build()
        assert response.status is HTTPStatus.NOT_FOUND

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            ResponseBuilder().status(418)

    def test_text_body(self):
        response = ResponseBuilder().text("abc").build()

        assert response.body == b"abc"
        assert response.headers == {"Content-Type": "text/plain", "Content-Length": "3"}

    def test_text_uses_byte_length(self):
        response = ResponseBuilder().text("héllo").build()

        assert response.headers["Content-Length"] == "6"
        assert response.body == "héllo".encode("utf-8")

    def test_empty_text_still_has_content_length(self):
        result = ResponseBuilder().text("").to_bytes()

        assert result == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 0\r\n"
            b"\r\n"
        )

    def test_binary_body(self):
        response = ResponseBuilder().binary(b"\x00\x01").build()

        assert response.headers["Content-Type"] == "application/octet-stream"
        assert response.headers["Content-Length"] == "2"
        assert response.body == b"\x00\x01"

    def test_method_chaining(self):
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type("text/plain")
            .header("Content-Encoding", "gzip")
            .body(b"zzz")
            .build())

        assert list(response.headers) == ["Content-Type", "Content-Encoding"]
        assert response.body == b"zzz"

    def test_build_copies_headers(self):
        builder = ResponseBuilder().header("A", "1")
        first = builder.build()
        builder.header("B", "2")

        assert first.headers == {"A": "1"}


class TestConvenienceFunctions:
    """Tests for convenience response functions."""

    @pytest.mark.parametrize("factory, expected", [
        (ok, b"HTTP/1.1 200 OK\r\n\r\n"),
        (created, b"HTTP/1.1 201 Created\r\n\r\n"),
        (bad_request, b"HTTP/1.1 400 Bad Request\r\n\r\n"),
        (not_found, b"HTTP/1.1 404 Not Found\r\n\r\n"),
        (internal_error, b"HTTP/1.1 500 Internal Server Error\r\n\r\n"),
    ])
    def test_empty_responses(self, factory, expected: bytes):
        assert factory().to_bytes() == expected

    def test_empty_with_status(self):
        assert empty(201).to_bytes() == b"HTTP/1.1 201 Created\r\n\r\n"

    def test_ok_text(self):
        response = ok_text("abc")

        assert response.status == 200
        assert response.body == b"abc"

    def test_ok_binary(self):
        response = ok_binary(b"hello")

        assert response.headers["Content-Type"] == "application/octet-stream"
        assert response.body == b"hello"


class TestHTTPStatus:
    """Tests for the status registry."""

    @pytest.mark.parametrize("code, line", [
        (200, "HTTP/1.1 200 OK"),
        (201, "HTTP/1.1 201 Created"),
        (400, "HTTP/1.1 400 Bad Request"),
        (404, "HTTP/1.1 404 Not Found"),
        (500, "HTTP/1.1 500 Internal Server Error"),
    ])
    def test_status_line(self, code: int, line: str):
        assert status_line(code) == line

    def test_unregistered_code(self):
        with pytest.raises(ValueError):
            status_line(405)

    def test_only_five_codes(self):
        assert sorted(int(s) for s in HTTPStatus) == [200, 201, 400, 404, 500]
