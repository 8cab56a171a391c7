"""Tests for src/middleware/access_log.py.

Exercised through a minimal FastAPI app wiring RequestIdMiddleware (outermost)
and AccessLogMiddleware together, matching ``create_app``.
"""

import json
import logging
import uuid

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from src.middleware.access_log import AccessLogMiddleware
from src.middleware.request_id import RequestIdMiddleware

_LOGGER = "src.middleware.access_log"


def _make_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"ok": "true"}

    @app.get("/unavailable")
    async def unavailable() -> dict[str, str]:  # type: ignore[return]
        raise HTTPException(status_code=503, detail="Service Unavailable")

    return app


@pytest.fixture(scope="module")
def client() -> TestClient:
    return TestClient(_make_app(), raise_server_exceptions=False)


def _access_records(caplog: pytest.LogCaptureFixture) -> list[dict[str, object]]:
    records = [json.loads(r.message) for r in caplog.records if r.name == _LOGGER]
    assert records, "No access log record found"
    return records


class TestAccessLogEmission:
    def test_one_info_record_per_request(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.clear()
        with caplog.at_level(logging.INFO, logger=_LOGGER):
            client.get("/ping")
        records = [r for r in caplog.records if r.name == _LOGGER]
        assert len(records) == 1
        assert records[0].levelno == logging.INFO

    def test_record_has_all_fields(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.clear()
        with caplog.at_level(logging.INFO, logger=_LOGGER):
            client.get("/ping", headers={"User-Agent": "probe/1.0"})
        record = _access_records(caplog)[0]
        assert set(record) == {
            "method",
            "path",
            "status",
            "duration_ms",
            "request_id",
            "client",
            "user_agent",
        }


class TestAccessLogValues:
    def test_request_line_and_status(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.clear()
        with caplog.at_level(logging.INFO, logger=_LOGGER):
            client.get("/ping")
        record = _access_records(caplog)[0]
        assert record["method"] == "GET"
        assert record["path"] == "/ping"
        assert record["status"] == 200

    def test_error_status_is_logged(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.clear()
        with caplog.at_level(logging.INFO, logger=_LOGGER):
            client.get("/unavailable")
        assert _access_records(caplog)[0]["status"] == 503

    def test_duration_is_non_negative_number(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.clear()
        with caplog.at_level(logging.INFO, logger=_LOGGER):
            client.get("/ping")
        duration = _access_records(caplog)[0]["duration_ms"]
        assert isinstance(duration, (int, float))
        assert duration >= 0

    def test_user_agent_is_logged(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.clear()
        with caplog.at_level(logging.INFO, logger=_LOGGER):
            client.get("/ping", headers={"User-Agent": "probe/1.0"})
        assert _access_records(caplog)[0]["user_agent"] == "probe/1.0"

    def test_request_id_matches_response_header(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.clear()
        with caplog.at_level(logging.INFO, logger=_LOGGER):
            res = client.get("/ping")
        record = _access_records(caplog)[0]
        uuid.UUID(str(record["request_id"]))
        assert record["request_id"] == res.headers["x-request-id"]
