"""
Unit tests for HTTP response building.
"""

from datetime import datetime, timezone

from previewserver.http.response import (
    HTTPResponse,
    ResponseBuilder,
    file_response,
    not_found,
    bad_request,
    format_http_date,
)
from previewserver.http.status_codes import HTTPStatus


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"
        assert HTTPResponse(status=HTTPStatus.BAD_REQUEST).status_line == "HTTP/1.1 400 Bad Request"

    def test_to_bytes_includes_headers(self):
        """Test that to_bytes includes all headers."""
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"Content-Type": "text/css"},
            body=b"test",
        )

        result = response.to_bytes()

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"Content-Type: text/css\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert b"Server: previewserver\r\n" in result
        assert b"Date: " in result
        assert result.endswith(b"\r\n\r\ntest")

    def test_body_bytes_are_sent_verbatim(self):
        body = bytes(range(256))
        result = HTTPResponse(body=body).to_bytes()
        assert result.endswith(b"\r\n\r\n" + body)


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_build_sets_connection_close(self):
        response = ResponseBuilder().build()
        assert response.headers["Connection"] == "close"

    def test_content_type_none_omits_header(self):
        response = ResponseBuilder().content_type(None).build()
        assert "Content-Type" not in response.headers

    def test_string_body_is_utf8(self):
        response = ResponseBuilder().body("héllo").build()
        assert response.body == "héllo".encode("utf-8")

    def test_method_chaining(self):
        """Test fluent API chaining."""
        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .header("X-Custom", "value")
            .build())

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.headers["X-Custom"] == "value"


class TestConvenienceFunctions:
    """Tests for convenience response functions."""

    def test_file_response(self):
        response = file_response(b"Hello", "text/html; charset=utf8")

        assert response.status == HTTPStatus.OK
        assert response.body == b"Hello"
        assert response.headers["Content-Type"] == "text/html; charset=utf8"

    def test_file_response_without_content_type(self):
        response = file_response(b"\x00\x01", None)

        assert "Content-Type" not in response.headers
        assert b"Content-Type" not in response.to_bytes()

    def test_not_found_has_empty_body(self):
        response = not_found()

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""
        assert b"Content-Length: 0\r\n" in response.to_bytes()

    def test_bad_request_has_empty_body(self):
        response = bad_request()

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body == b""


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.BAD_REQUEST.phrase == "Bad Request"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.NOT_FOUND == 404


class TestFormatHTTPDate:
    """Tests for HTTP date formatting."""

    def test_format(self):
        dt = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)
        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"
