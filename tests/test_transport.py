"""Tests for the HTTPS transport."""

import asyncio
import json
import logging
from unittest.mock import MagicMock

import aiohttp
import pytest

from pypimalink.exceptions import PimalinkTransportError
from pypimalink.transport import (
    HTTP_LOGGER_NAME,
    PimalinkTransport,
    TransportResponse,
    verify_tls_for,
)


class _FakeResponse:
    def __init__(self, status, body):
        self.status = status
        self._body = body

    async def text(self):
        return self._body


class _FakeRequest:
    """Async context manager returned by session.post()."""

    def __init__(self, resp=None, exc=None):
        self._resp = resp
        self._exc = exc

    async def __aenter__(self):
        if self._exc:
            raise self._exc
        return self._resp

    async def __aexit__(self, exc_type, exc, tb):
        return False


@pytest.fixture(autouse=True)
def no_http_log(monkeypatch):
    monkeypatch.delenv("PIMALINK_HTTP_LOG_FILE", raising=False)


def _session(resp=None, exc=None):
    session = MagicMock()
    session.post = MagicMock(return_value=_FakeRequest(resp, exc))
    return session


@pytest.mark.asyncio
async def test_post_returns_status_and_body():
    session = _session(_FakeResponse(200, '{"sessionToken": "t"}'))
    transport = PimalinkTransport(session)

    result = await transport.post("/api/Panel/Authenticate", {"data": "1234", "header": {}})

    assert result == TransportResponse(status=200, body='{"sessionToken": "t"}')
    assert not result.is_indeterminate

    url = session.post.call_args.args[0]
    kwargs = session.post.call_args.kwargs
    assert url == "https://application.pimalink.com:443/api/Panel/Authenticate"
    assert json.loads(kwargs["data"].decode("utf-8")) == {"data": "1234", "header": {}}
    assert kwargs["headers"]["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_pimalink_host_skips_certificate_verification():
    session = _session(_FakeResponse(204, ""))
    await PimalinkTransport(session).post("/api/WebUser/Pair", {})

    assert session.post.call_args.kwargs["ssl"] is False


@pytest.mark.asyncio
async def test_other_hosts_keep_default_verification():
    session = _session(_FakeResponse(204, ""))
    transport = PimalinkTransport(session, host="example.com")
    await transport.post("/api/WebUser/Pair", {})

    assert "ssl" not in session.post.call_args.kwargs
    assert verify_tls_for("example.com")
    assert not verify_tls_for("application.pimalink.com")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc",
    [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()],
)
async def test_connection_failure_returns_error(exc):
    transport = PimalinkTransport(_session(exc=exc))

    result = await transport.post("/api/WebUser/GetNotifications", {})

    assert result.status is None
    assert result.body is None
    assert result.error is exc
    assert result.is_indeterminate
    with pytest.raises(PimalinkTransportError) as err:
        result.raise_for_error()
    assert err.value.cause is exc


@pytest.mark.asyncio
async def test_unserializable_request_returns_error():
    session = _session(_FakeResponse(200, ""))
    transport = PimalinkTransport(session)

    result = await transport.post("/api/WebUser/Pair", {"data": object()})

    assert result.status is None
    assert isinstance(result.error, TypeError)
    session.post.assert_not_called()


def test_raise_for_error_passes_on_answer():
    TransportResponse(status=500, body="").raise_for_error()


@pytest.fixture
def http_log(monkeypatch, tmp_path):
    log_file = tmp_path / "http.log"
    monkeypatch.setenv("PIMALINK_HTTP_LOG_FILE", str(log_file))
    monkeypatch.delenv("PIMALINK_HTTP_LOG_BODY", raising=False)
    monkeypatch.delenv("PIMALINK_HTTP_LOG_HEADERS", raising=False)
    yield log_file

    logger = logging.getLogger(HTTP_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.mark.asyncio
async def test_http_log_file_records_request_and_response(http_log):
    transport = PimalinkTransport(_session(_FakeResponse(200, '{"sessionToken": "t"}')))

    result = await transport.post("/api/Panel/Authenticate", {"data": "1234", "header": {}})

    assert result.body == '{"sessionToken": "t"}'
    lines = http_log.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert 'REQUEST: POST https://application.pimalink.com:443/api/Panel/Authenticate body={"data": "1234"' in lines[0]
    assert "RESPONSE: POST https://application.pimalink.com:443/api/Panel/Authenticate status=200" in lines[1]
    assert 'body={"sessionToken": "t"}' in lines[1]


@pytest.mark.asyncio
async def test_http_log_can_hide_bodies(http_log, monkeypatch):
    monkeypatch.setenv("PIMALINK_HTTP_LOG_BODY", "false")
    transport = PimalinkTransport(_session(_FakeResponse(200, "x" * 2000)))

    result = await transport.post("/api/WebUser/GetNotifications", {})

    assert result.body == "x" * 2000
    text = http_log.read_text(encoding="utf-8")
    assert "body=None" in text
    assert "xxx" not in text


@pytest.mark.asyncio
async def test_http_log_records_failures(http_log):
    transport = PimalinkTransport(_session(exc=aiohttp.ClientConnectionError("refused")))

    result = await transport.post("/api/WebUser/Pair", {})

    assert result.is_indeterminate
    assert "FAILED: POST https://application.pimalink.com:443/api/WebUser/Pair" in http_log.read_text(
        encoding="utf-8"
    )


@pytest.mark.asyncio
async def test_http_log_reused_file_gets_one_handler(http_log):
    PimalinkTransport(_session())
    PimalinkTransport(_session())

    handlers = logging.getLogger(HTTP_LOGGER_NAME).handlers
    assert len([h for h in handlers if h.baseFilename == str(http_log)]) == 1


@pytest.mark.asyncio
async def test_http_log_cuts_long_bodies(http_log):
    transport = PimalinkTransport(_session(_FakeResponse(200, "x" * 2000)))

    await transport.post("/api/WebUser/GetNotifications", {})

    response_line = http_log.read_text(encoding="utf-8").splitlines()[1]
    assert response_line.endswith("body=" + "x" * 500 + "...")
