"""
Unit tests for HTTP response writing.
"""

import io
import os
import re
from datetime import datetime, timezone

import pytest

from sysprohttp import ServerConfig
from sysprohttp.errors import ResponseWriteError
from sysprohttp.handlers import FileInfo, get_fileinfo
from sysprohttp.http.mime_types import guess_by_extension
from sysprohttp.http.request import HTTPRequest
from sysprohttp.http.response import (
    HTTPResponse,
    ResponseWriter,
    format_http_date,
    html_page,
)
from sysprohttp.http.status_codes import HTTPStatus


DATE_PATTERN = re.compile(
    r"^(Mon|Tue|Wed|Thu|Fri|Sat|Sun), \d{2} "
    r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec) \d{4} "
    r"\d{2}:\d{2}:\d{2} GMT$"
)

GET = HTTPRequest(method="GET", path="/")
HEAD = HTTPRequest(method="HEAD", path="/")


class BrokenStream(io.RawIOBase):
    """Output stream whose peer has gone away."""

    def writable(self):
        return True

    def write(self, data):
        raise BrokenPipeError(32, "Broken pipe")


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        response = HTTPResponse(status=HTTPStatus.OK)
        assert response.status_line == "HTTP/1.0 200 OK"

        response = HTTPResponse(status=HTTPStatus.NOT_FOUND, version="HTTP/1.1")
        assert response.status_line == "HTTP/1.1 404 Not Found"

    def test_head_bytes(self):
        response = HTTPResponse(headers={"X-One": "1", "X-Two": "2"}, body=b"body")

        assert response.head_bytes() == b"HTTP/1.0 200 OK\r\nX-One: 1\r\nX-Two: 2\r\n\r\n"

    def test_to_bytes_without_body(self):
        response = HTTPResponse(body=b"body")

        assert response.to_bytes().endswith(b"\r\n\r\nbody")
        assert response.to_bytes(include_body=False).endswith(b"\r\n\r\n")

    def test_set_header_chaining(self):
        response = HTTPResponse().set_header("X-One", "1").set_header("X-Two", "2")
        assert response.headers == {"X-One": "1", "X-Two": "2"}


class TestCommonHeaders:
    """Tests for the header block shared by every response."""

    def test_order_and_values(self, writer: ResponseWriter):
        response = writer.common_headers(HTTPStatus.OK)

        assert list(response.headers) == ["Date", "Server", "Connection"]
        assert response.headers["Server"] == "sysproHTTP/1.0"
        assert response.headers["Connection"] == "close"
        assert DATE_PATTERN.match(response.headers["Date"])

    def test_status_line_uses_server_minor_version(self, output: io.BytesIO):
        writer = ResponseWriter(output, ServerConfig(http_minor_version=1))
        assert writer.common_headers(HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"

    def test_clock_is_used_for_date(self, output: io.BytesIO):
        fixed = datetime(2026, 10, 18, 9, 5, 3, tzinfo=timezone.utc)
        writer = ResponseWriter(output, clock=lambda: fixed)

        assert writer.common_headers(HTTPStatus.OK).headers["Date"] == (
            "Sun, 18 Oct 2026 09:05:03 GMT"
        )


class TestFileResponse:
    """Tests for 200 responses."""

    @pytest.mark.parametrize("name", ["empty.txt", "one.txt", "big.bin"])
    def test_get_body_matches_file(self, docroot, writer, output, parse_response, name):
        """Body length and Content-Length both equal the file size."""
        content = (docroot / name).read_bytes()
        info = get_fileinfo(str(docroot), "/" + name)

        assert writer.send_file(GET, info) == HTTPStatus.OK

        status_line, headers, body = parse_response(output.getvalue())
        assert status_line == "HTTP/1.0 200 OK"
        assert headers["Content-Length"] == str(len(content))
        assert headers["Content-Type"] == "text/plain"
        assert body == content
        assert writer.body_bytes == len(content)

    def test_big_file_spans_several_blocks(self, docroot):
        assert (docroot / "big.bin").stat().st_size > 1024

    def test_head_has_same_headers_no_body(self, docroot, config, parse_response):
        info = get_fileinfo(str(docroot), "/big.bin")
        fixed = datetime(2026, 1, 1, tzinfo=timezone.utc)

        get_out, head_out = io.BytesIO(), io.BytesIO()
        ResponseWriter(get_out, config, clock=lambda: fixed).send_file(GET, info)
        ResponseWriter(head_out, config, clock=lambda: fixed).send_file(HEAD, info)

        _, get_headers, get_body = parse_response(get_out.getvalue())
        _, head_headers, head_body = parse_response(head_out.getvalue())
        assert head_headers == get_headers
        assert head_body == b""
        assert len(get_body) == info.size

    def test_header_block_layout(self, docroot, writer, output):
        info = get_fileinfo(str(docroot), "/one.txt")
        writer.send_file(GET, info)

        lines = output.getvalue().split(b"\r\n")
        assert [line.split(b":")[0] for line in lines[1:6]] == [
            b"Date", b"Server", b"Connection", b"Content-Length", b"Content-Type",
        ]
        assert lines[6] == b""
        assert output.getvalue().count(b"\r\n\r\n") == 1

    def test_pluggable_content_type(self, docroot, config, output, parse_response):
        writer = ResponseWriter(output, config, content_type=guess_by_extension)
        writer.send_file(GET, get_fileinfo(str(docroot), "/index.html"))

        _, headers, _ = parse_response(output.getvalue())
        assert headers["Content-Type"] == "text/html"

    def test_custom_block_size(self, docroot, output, parse_response):
        writer = ResponseWriter(output, ServerConfig(docroot=str(docroot), block_size=7))
        writer.send_file(GET, get_fileinfo(str(docroot), "/hello.txt"))

        _, _, body = parse_response(output.getvalue())
        assert body == b"Hello, World!\n"

    @pytest.mark.skipif(not hasattr(os, "O_NOFOLLOW"), reason="needs O_NOFOLLOW")
    def test_file_swapped_for_symlink_is_refused(self, docroot, writer, output):
        """A regular file replaced by a symlink after resolution is not followed."""
        (docroot.parent / "secret.txt").write_bytes(b"secret")
        info = get_fileinfo(str(docroot), "/one.txt")
        assert info.ok

        os.remove(docroot / "one.txt")
        os.symlink(docroot.parent / "secret.txt", docroot / "one.txt")

        with pytest.raises(ResponseWriteError, match="failed to open"):
            writer.send_file(GET, info)
        assert output.getvalue() == b""

    def test_file_swapped_for_directory_is_refused(self, docroot, writer, output):
        info = get_fileinfo(str(docroot), "/one.txt")

        os.remove(docroot / "one.txt")
        os.mkdir(docroot / "one.txt")

        with pytest.raises(ResponseWriteError, match="failed to open"):
            writer.send_file(GET, info)
        assert output.getvalue() == b""

    def test_vanished_file(self, writer, output, tmp_path):
        info = FileInfo(path=str(tmp_path / "gone.txt"), size=3, ok=True)

        with pytest.raises(ResponseWriteError, match="failed to open"):
            writer.send_file(GET, info)
        assert output.getvalue() == b""

    def test_broken_pipe_is_fatal(self, docroot, config):
        writer = ResponseWriter(BrokenStream(), config)

        with pytest.raises(ResponseWriteError) as exc_info:
            writer.send_file(GET, get_fileinfo(str(docroot), "/hello.txt"))
        assert isinstance(exc_info.value.__cause__, BrokenPipeError)


class TestErrorResponses:
    """Tests for 404 / 405 / 501 responses."""

    @pytest.mark.parametrize("send, status", [
        ("send_not_found", "404 Not Found"),
        ("send_method_not_allowed", "405 Method Not Allowed"),
        ("send_not_implemented", "501 Not Implemented"),
    ])
    def test_html_body_for_get(self, writer, output, parse_response, send, status):
        getattr(writer, send)(HTTPRequest(method="GET", path="/"))

        status_line, headers, body = parse_response(output.getvalue())
        assert status_line == f"HTTP/1.0 {status}"
        assert headers["Content-Type"] == "text/html"
        assert headers["Connection"] == "close"
        assert headers["Content-Length"] == str(len(body))
        assert body.startswith(b"<html>")

    @pytest.mark.parametrize("send", [
        "send_not_found", "send_method_not_allowed", "send_not_implemented",
    ])
    def test_head_never_gets_a_body(self, writer, output, parse_response, send):
        getattr(writer, send)(HEAD)

        _, headers, body = parse_response(output.getvalue())
        assert body == b""
        assert int(headers["Content-Length"]) > 0

    def test_method_is_named_and_escaped(self, writer, output):
        writer.send_not_implemented(HTTPRequest(method="<SCRIPT>", path="/"))

        assert b"&lt;SCRIPT&gt;" in output.getvalue()
        assert b"<SCRIPT>" not in output.getvalue()

    def test_405_names_method(self, writer, output):
        writer.send_method_not_allowed(HTTPRequest(method="POST", path="/"))
        assert b"The request method POST is not allowed" in output.getvalue()

    def test_returns_status(self, writer):
        assert writer.send_not_found(GET) == HTTPStatus.NOT_FOUND
        assert writer.send_method_not_allowed(GET) == HTTPStatus.METHOD_NOT_ALLOWED
        assert writer.send_not_implemented(GET) == HTTPStatus.NOT_IMPLEMENTED

    def test_broken_pipe_is_fatal(self, config):
        with pytest.raises(ResponseWriteError):
            ResponseWriter(BrokenStream(), config).send_not_found(GET)


class TestUtilities:
    """Tests for module-level helpers."""

    def test_format_http_date(self):
        dt = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert format_http_date(dt) == "Thu, 01 Jan 2026 12:00:00 GMT"

    def test_format_http_date_converts_to_gmt(self):
        from datetime import timedelta

        dt = datetime(2026, 1, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_http_date(dt) == "Thu, 01 Jan 2026 12:00:00 GMT"

    def test_html_page(self):
        page = html_page("Not Found", "File not found")
        assert "<title>Not Found</title>" in page
        assert page.endswith("</html>\r\n")
