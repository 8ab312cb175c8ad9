"""
Tests for request/response logging.
"""

import logging
from http import HTTPStatus

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from tests.conftest import API
from user_api.app.core.logging_config import REQUEST_CHANNEL
from user_api.app.core.request_logging import TOO_LARGE, RequestLogger, status_text


def make_request(method: str = "POST", path: str = "/api/users", headers=None) -> Request:
    """Helper to create a bare request for testing."""
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request(
        {
            "type": "http",
            "method": method,
            "scheme": "http",
            "server": ("testserver", 80),
            "client": ("10.0.0.1", 5000),
            "path": path,
            "root_path": "",
            "query_string": b"",
            "headers": raw_headers,
        }
    )


def channel_records(caplog, message: str):
    return [
        r.context for r in caplog.records
        if r.name == REQUEST_CHANNEL and r.getMessage().startswith(message)
    ]


@pytest.fixture
def request_logger() -> RequestLogger:
    return RequestLogger(logging.getLogger(REQUEST_CHANNEL))


class TestRequestLogger:
    """Unit tests for RequestLogger."""

    def test_request_record(self, caplog, request_logger):
        caplog.set_level(logging.INFO, logger=REQUEST_CHANNEL)
        request = make_request(headers={"User-Agent": "pytest", "X-Trace": "abc"})

        request_logger.log_request(
            request, {"name": "Ann", "password": "s3cret", "password_confirmation": "s3cret"}
        )

        [record] = channel_records(caplog, "Request")
        assert record["ip"] == "10.0.0.1"
        assert record["method"] == "POST"
        assert record["url"] == "http://testserver/api/users"
        assert record["user_agent"] == "pytest"
        assert record["headers"]["x-trace"] == "abc"
        assert record["body"] == {"name": "Ann"}
        assert "time" in record

    def test_get_request_has_no_body(self, caplog, request_logger):
        caplog.set_level(logging.INFO, logger=REQUEST_CHANNEL)

        request_logger.log_request(make_request("GET"), {"name": "Ann"})

        [record] = channel_records(caplog, "Request")
        assert "body" not in record

    def test_file_upload_has_no_body(self, caplog, request_logger):
        caplog.set_level(logging.INFO, logger=REQUEST_CHANNEL)
        request = make_request(headers={"Content-Type": "multipart/form-data; boundary=x"})

        request_logger.log_request(request, {})

        [record] = channel_records(caplog, "Request")
        assert "body" not in record

    def test_json_post_keeps_body(self, caplog, request_logger):
        caplog.set_level(logging.INFO, logger=REQUEST_CHANNEL)
        request = make_request(headers={"Content-Type": "application/json"})

        request_logger.log_request(request, {"name": "Ann"})

        [record] = channel_records(caplog, "Request")
        assert record["body"] == {"name": "Ann"}

    def test_response_record(self, caplog, request_logger):
        caplog.set_level(logging.INFO, logger=REQUEST_CHANNEL)

        request_logger.log_response(make_request(), 201, '{"id": 1}')

        [record] = channel_records(caplog, "Response")
        assert record["status"] == 201
        assert record["status_text"] == "Created"
        assert record["content"] == '{"id": 1}'
        assert record["url"] == "http://testserver/api/users"

    def test_large_content_is_replaced(self, caplog, request_logger):
        caplog.set_level(logging.INFO, logger=REQUEST_CHANNEL)

        request_logger.log_response(make_request(), 200, "x" * 10000)
        request_logger.log_response(make_request(), 200, "x" * 10001)

        first, second = channel_records(caplog, "Response")
        assert first["content"] == "x" * 10000
        assert second["content"] == TOO_LARGE

    def test_logging_failure_is_contained(self, monkeypatch, request_logger):
        def broken(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(request_logger.channel, "info", broken)

        request_logger.log_request(make_request(), {"name": "Ann"})
        request_logger.log_response(make_request(), 200, "[]")

    def test_status_text(self):
        assert status_text(404) == "Not Found"
        assert status_text(422) == HTTPStatus(422).phrase
        assert status_text(599) == ""


class TestPipelineLogging:
    """Every routed request is logged before and after handling."""

    def test_request_and_response_logged(self, client: TestClient, caplog):
        caplog.set_level(logging.INFO, logger=REQUEST_CHANNEL)

        client.post(API, json={"name": "Ann", "email": "ann@example.com", "age": 30, "password": "x"})

        [request] = channel_records(caplog, "Request")
        [response] = channel_records(caplog, "Response")
        assert request["method"] == "POST"
        assert "password" not in request["body"]
        assert response["status"] == 201

    def test_rejected_request_still_logged(self, client: TestClient, caplog):
        caplog.set_level(logging.INFO, logger=REQUEST_CHANNEL)

        client.post(API, json={})

        [response] = channel_records(caplog, "Response")
        assert response["status"] == 422
        assert response["status_text"] == HTTPStatus(422).phrase
        assert '"errors"' in response["content"]

    def test_broken_log_sink_does_not_fail_request(self, client: TestClient, monkeypatch):
        def broken(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(RequestLogger, "_emit", broken)

        response = client.post(API, json={"name": "Ann", "email": "ann@example.com", "age": 30})

        assert response.status_code == 201
