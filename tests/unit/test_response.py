"""
Unit tests for HTTP response writing.
"""

import io
from datetime import datetime, timezone, timedelta

import pytest

from webworker.http.resource import Found, NotFound
from webworker.http.response import (
    ResponseWriter,
    format_date,
    render_template,
    DATE_TOKEN,
    SERVER_TOKEN,
)
from webworker.http.status_codes import HTTPStatus


def split_response(raw: bytes):
    """Split raw response bytes into header lines and body."""
    head, sep, body = raw.partition(b"\n\n")
    assert sep, "no blank line after the header block"
    return head.decode("utf-8").split("\n"), body


def write(writer: ResponseWriter, resource) -> bytes:
    out = io.BytesIO()
    writer.write(out, resource)
    return out.getvalue()


class TestHeaderBlock:
    """Tests for the status line and headers."""

    def test_found_headers_in_order(self, writer, fixed_date, server_name):
        raw = write(writer, Found("text/html", "index.html"))
        lines, _ = split_response(raw)

        assert lines == [
            "HTTP/1.1 200",
            f"Date: {fixed_date}",
            f"Server: {server_name}",
            "Connection: close",
            "Content-Type: text/html",
        ]

    def test_not_found_headers(self, writer):
        raw = write(writer, NotFound("missing.html"))
        lines, _ = split_response(raw)

        assert lines[0] == "HTTP/1.1 404"
        assert lines[-1] == "Content-Type: text/html"

    @pytest.mark.parametrize("resource", [
        Found("text/html", "index.html"),
        Found("image/png", "logo.png"),
        NotFound(),
    ])
    def test_single_connection_close_and_blank_line(self, writer, resource):
        raw = write(writer, resource)
        head = raw.split(b"\n\n", 1)[0]

        assert head.split(b"\n").count(b"Connection: close") == 1
        assert b"\n\n" not in head
        assert b"\r" not in head

    def test_no_content_length(self, writer):
        raw = write(writer, Found("image/png", "logo.png"))
        head = raw.split(b"\n\n", 1)[0]

        assert b"Content-Length" not in head

    def test_header_block_helper(self, writer):
        block = writer.header_block(HTTPStatus.OK, "image/gif", "DATE")

        assert block.startswith(b"HTTP/1.1 200\n")
        assert block.endswith(b"Content-Type: image/gif\n\n")


class TestBody:
    """Tests for body emission."""

    def test_not_found_body(self, writer):
        _, body = split_response(write(writer, NotFound("missing.html")))

        assert body == b"404 Not Found"

    def test_html_is_templated(self, writer, fixed_date, server_name):
        _, body = split_response(write(writer, Found("text/html", "index.html")))

        assert body == f"Hello {server_name} on {fixed_date}".encode()

    def test_every_token_occurrence_is_replaced(self, writer, fixed_date, server_name):
        _, body = split_response(write(writer, Found("text/html", "sub/page.html")))
        text = body.decode()

        assert DATE_TOKEN not in text
        assert SERVER_TOKEN not in text
        assert text.count(fixed_date) == 2
        assert text.count(server_name) == 1

    @pytest.mark.parametrize("path, content_type", [
        ("logo.png", "image/png"),
        ("anim.gif", "image/gif"),
        ("photo.jpg", "image/jpeg"),
        ("photo.jpeg", "image/jpeg"),
        ("favicon.ico", "image/x-icon"),
    ])
    def test_binary_is_copied_verbatim(self, writer, docroot, path, content_type):
        lines, body = split_response(write(writer, Found(content_type, path)))

        assert body == (docroot / path).read_bytes()
        assert f"Content-Type: {content_type}" in lines

    def test_binary_with_blank_line_bytes(self, filesystem, docroot):
        """Image bytes containing \\n\\n must not be mistaken for headers."""
        data = b"\n\n\x00\xff\n\n"
        (docroot / "tricky.png").write_bytes(data)
        writer = ResponseWriter(filesystem, server_name="S")

        out = io.BytesIO()
        writer.write(out, Found("image/png", "tricky.png"))

        assert out.getvalue().endswith(data)

    def test_empty_html_file(self, filesystem, docroot):
        (docroot / "empty.html").write_text("")
        writer = ResponseWriter(filesystem, server_name="S")

        raw = write(writer, Found("text/html", "empty.html"))

        assert raw.endswith(b"Content-Type: text/html\n\n")

    def test_html_not_valid_in_charset(self, filesystem, docroot, server_name):
        """Undecodable bytes pass through and tokens are still replaced."""
        (docroot / "latin.html").write_bytes(b"caf\xe9 <cs371server>")
        writer = ResponseWriter(filesystem, server_name=server_name)

        raw = write(writer, Found("text/html", "latin.html"))

        assert raw.startswith(b"HTTP/1.1 200\n")
        assert raw.split(b"\n\n", 1)[1] == b"caf\xe9 " + server_name.encode()

    def test_returns_status(self, writer):
        assert writer.write(io.BytesIO(), Found("image/png", "logo.png")) == HTTPStatus.OK
        assert writer.write(io.BytesIO(), NotFound()) == HTTPStatus.NOT_FOUND

    def test_write_errors_propagate(self, writer):
        class BrokenStream(io.RawIOBase):
            def writable(self):
                return True

            def write(self, b):
                raise BrokenPipeError("client went away")

        with pytest.raises(BrokenPipeError):
            writer.write(BrokenStream(), Found("image/png", "logo.png"))


class TestFormatDate:
    """Tests for date formatting."""

    def test_format(self):
        dt = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)
        result = format_date(dt)

        assert "15 Jan 2026" in result
        assert result.endswith("12:30:45 GMT")

    def test_converted_to_gmt(self):
        dt = datetime(2026, 1, 15, 14, 30, 45, tzinfo=timezone(timedelta(hours=2)))

        assert format_date(dt).endswith("12:30:45 GMT")

    def test_naive_is_utc(self):
        assert format_date(datetime(2026, 1, 15, 12, 30, 45)).endswith("12:30:45 GMT")

    def test_custom_pattern(self):
        dt = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)

        assert format_date(dt, "%Y-%m-%d") == "2026-01-15"


class TestRenderTemplate:
    """Tests for token substitution."""

    def test_both_tokens(self):
        assert render_template("<cs371server>|<cs371date>", "D", "S") == "S|D"

    def test_no_tokens(self):
        assert render_template("<html></html>", "D", "S") == "<html></html>"

    def test_partial_token_untouched(self):
        assert render_template("<cs371date", "D", "S") == "<cs371date"
