"""
Unit tests for the route handlers.
"""

import gzip
import logging
from pathlib import Path

import pytest

from tinyhttpd.handlers import FileHandler, handle_echo, handle_not_found, handle_root, handle_user_agent
from tinyhttpd.http.headers import Headers
from tinyhttpd.http.request import HTTPRequest


def make_request(method="GET", path="/", headers=None, body=b"", params=None, source=None) -> HTTPRequest:
    return HTTPRequest(
        method=method,
        path=path,
        headers=Headers(headers or []),
        body=body,
        path_params=params or {},
        body_source=source,
    )


class TestBasicHandlers:

    def test_root(self):
        assert handle_root(make_request()).to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_not_found(self):
        response = handle_not_found(make_request(path="/nope"))

        assert response.to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_echo_plain(self):
        response = handle_echo(make_request(params={"message": "abc"}))

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_echo_empty_message(self):
        response = handle_echo(make_request(params={"message": ""}))

        assert response.status == 200
        assert response.headers["Content-Length"] == "0"
        assert response.body == b""

    def test_echo_multibyte_uses_byte_length(self):
        response = handle_echo(make_request(params={"message": "ünïcödé"}))

        assert response.headers["Content-Length"] == str(len("ünïcödé".encode("utf-8")))

    def test_echo_gzip(self):
        response = handle_echo(make_request(
            headers=[("Accept-Encoding", "gzip")],
            params={"message": "abc"},
        ))

        assert list(response.headers) == ["Content-Type", "Content-Encoding", "Content-Length"]
        assert response.headers["Content-Encoding"] == "gzip"
        assert response.headers["Content-Length"] == str(len(response.body))
        assert gzip.decompress(response.body) == b"abc"

    def test_echo_unknown_encoding_is_plain(self):
        response = handle_echo(make_request(
            headers=[("Accept-Encoding", "invalid-encoding")],
            params={"message": "abc"},
        ))

        assert "Content-Encoding" not in response.headers
        assert response.body == b"abc"

    def test_user_agent(self):
        response = handle_user_agent(make_request(headers=[("User-Agent", "test-client/1.0")]))

        assert response.body == b"test-client/1.0"
        assert response.headers == {"Content-Type": "text/plain", "Content-Length": "15"}

    def test_user_agent_first_header_wins(self):
        response = handle_user_agent(make_request(headers=[
            ("user-agent", "first"),
            ("User-Agent", "second"),
        ]))

        assert response.body == b"first"

    def test_user_agent_missing(self):
        response = handle_user_agent(make_request())

        assert response.status == 200
        assert response.headers["Content-Length"] == "0"


class TestFileHandlerRead:

    def test_reads_file(self, files_dir: Path):
        (files_dir / "foo.txt").write_bytes(b"hello")
        handler = FileHandler(str(files_dir))

        response = handler.read(make_request(path="/files/foo.txt", params={"filename": "foo.txt"}))

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: application/octet-stream\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"hello"
        )

    def test_reads_empty_file(self, files_dir: Path):
        (files_dir / "empty").write_bytes(b"")
        handler = FileHandler(str(files_dir))

        response = handler.read(make_request(params={"filename": "empty"}))

        assert response.status == 200
        assert response.headers["Content-Length"] == "0"

    def test_reads_nested_file(self, files_dir: Path):
        (files_dir / "sub").mkdir()
        (files_dir / "sub" / "a.bin").write_bytes(b"\x00\xff")
        handler = FileHandler(str(files_dir))

        response = handler.read(make_request(params={"filename": "sub/a.bin"}))

        assert response.body == b"\x00\xff"

    def test_missing_file(self, files_dir: Path):
        response = FileHandler(str(files_dir)).read(make_request(params={"filename": "missing.txt"}))

        assert response.to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_directory_is_not_found(self, files_dir: Path):
        (files_dir / "sub").mkdir()

        response = FileHandler(str(files_dir)).read(make_request(params={"filename": "sub"}))

        assert response.status == 404

    def test_no_root_configured(self):
        response = FileHandler(None).read(make_request(params={"filename": "foo.txt"}))

        assert response.status == 404

    def test_traversal_is_not_found(self, tmp_path: Path, files_dir: Path, caplog):
        (tmp_path / "secret.txt").write_bytes(b"secret")
        handler = FileHandler(str(files_dir))

        with caplog.at_level(logging.WARNING, logger="tinyhttpd.handlers.files"):
            response = handler.read(make_request(params={"filename": "../secret.txt"}))

        assert response.status == 404
        assert response.body == b""
        assert "traversal" in caplog.text

    def test_embedded_nul_is_not_found(self, files_dir: Path):
        response = FileHandler(str(files_dir)).read(make_request(params={"filename": "a\x00b"}))

        assert response.to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_absolute_name_stays_inside_root(self, files_dir: Path):
        (files_dir / "etc").mkdir()
        (files_dir / "etc" / "passwd").write_bytes(b"inside")

        response = FileHandler(str(files_dir)).read(make_request(params={"filename": "/etc/passwd"}))

        assert response.body == b"inside"


class TestFileHandlerWrite:

    @staticmethod
    def _upload(name: str, body: bytes, declared=None, source=None) -> HTTPRequest:
        length = len(body) if declared is None else declared
        return make_request(
            method="POST",
            path=f"/files/{name}",
            headers=[("Content-Length", str(length))],
            body=body,
            params={"filename": name},
            source=source,
        )

    def test_writes_file(self, files_dir: Path):
        response = FileHandler(str(files_dir)).write(self._upload("foo.txt", b"hello"))

        assert response.to_bytes() == b"HTTP/1.1 201 Created\r\n\r\n"
        assert (files_dir / "foo.txt").read_bytes() == b"hello"

    def test_overwrites_existing(self, files_dir: Path):
        (files_dir / "foo.txt").write_bytes(b"old contents that are longer")
        handler = FileHandler(str(files_dir))

        handler.write(self._upload("foo.txt", b"new"))

        assert (files_dir / "foo.txt").read_bytes() == b"new"

    def test_repeated_upload_is_idempotent(self, files_dir: Path):
        handler = FileHandler(str(files_dir))

        assert handler.write(self._upload("foo.txt", b"hello")).status == 201
        assert handler.write(self._upload("foo.txt", b"hello")).status == 201
        assert (files_dir / "foo.txt").read_bytes() == b"hello"

    def test_missing_content_length_writes_empty_file(self, files_dir: Path):
        request = make_request(method="POST", params={"filename": "empty.txt"}, body=b"ignored")

        response = FileHandler(str(files_dir)).write(request)

        assert response.status == 201
        assert (files_dir / "empty.txt").read_bytes() == b""

    def test_body_from_source(self, files_dir: Path):
        chunks = [b"lo"]
        request = self._upload("foo.txt", b"hel", declared=5, source=lambda n: chunks.pop(0))

        response = FileHandler(str(files_dir)).write(request)

        assert response.status == 201
        assert (files_dir / "foo.txt").read_bytes() == b"hello"

    def test_short_body_is_bad_request(self, files_dir: Path):
        request = self._upload("foo.txt", b"hel", declared=10, source=lambda n: b"")

        response = FileHandler(str(files_dir)).write(request)

        assert response.to_bytes() == b"HTTP/1.1 400 Bad Request\r\n\r\n"

    def test_missing_parent_is_server_error(self, files_dir: Path):
        response = FileHandler(str(files_dir)).write(self._upload("nope/foo.txt", b"x"))

        assert response.status == 500
        assert not (files_dir / "nope").exists()

    def test_directory_target_is_server_error(self, files_dir: Path):
        (files_dir / "sub").mkdir()

        response = FileHandler(str(files_dir)).write(self._upload("sub", b"x"))

        assert response.status == 500

    def test_no_root_configured(self):
        response = FileHandler(None).write(self._upload("foo.txt", b"x"))

        assert response.status == 500

    def test_traversal_is_server_error(self, tmp_path: Path, files_dir: Path):
        response = FileHandler(str(files_dir)).write(self._upload("../escape.txt", b"x"))

        assert response.status == 500
        assert not (tmp_path / "escape.txt").exists()

    def test_embedded_nul_is_server_error(self, files_dir: Path):
        response = FileHandler(str(files_dir)).write(self._upload("a\x00b", b"x"))

        assert response.status == 500
