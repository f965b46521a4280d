"""
HTTPS transport for the PimaLink cloud API.

All calls are JSON POSTs to a single host. Network failures do not raise:
they come back as a ``TransportResponse`` with ``status is None`` so callers
can tell "no answer" apart from "the server said no".
"""
import asyncio
import json
import logging
import os
from dataclasses import dataclass

import aiohttp

from .constants import (
    DEFAULT_TIMEOUT,
    PIMALINK_HOST,
    PIMALINK_PORT,
    UNVERIFIED_TLS_HOSTS,
)
from .exceptions import PimalinkTransportError

_LOGGER = logging.getLogger(__name__)

HTTP_LOGGER_NAME = "pypimalink.http"
HTTP_LOG_BODY_LIMIT = 500


def _env_flag(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


class HttpTrafficLog:
    """
    Writes every PimaLink request and answer to a file.

    Enabled with PIMALINK_HTTP_LOG_FILE. PIMALINK_HTTP_LOG_BODY (default
    true) and PIMALINK_HTTP_LOG_HEADERS (default false) pick what is written.
    Bodies longer than HTTP_LOG_BODY_LIMIT characters are cut.
    """

    def __init__(self, log_file: str):
        self.log_file = os.path.abspath(log_file)
        self.log_body = _env_flag("PIMALINK_HTTP_LOG_BODY", True)
        self.log_headers = _env_flag("PIMALINK_HTTP_LOG_HEADERS", False)

        self._logger = logging.getLogger(HTTP_LOGGER_NAME)
        self._logger.setLevel(logging.INFO)
        if not any(getattr(h, "baseFilename", None) == self.log_file for h in self._logger.handlers):
            handler = logging.FileHandler(self.log_file, encoding="utf-8")
            handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
            self._logger.addHandler(handler)

    @classmethod
    def from_env(cls) -> "HttpTrafficLog | None":
        log_file = os.getenv("PIMALINK_HTTP_LOG_FILE")
        return cls(log_file) if log_file else None

    def _clip(self, text: str | None) -> str | None:
        if not self.log_body or text is None:
            return None
        if len(text) > HTTP_LOG_BODY_LIMIT:
            return text[:HTTP_LOG_BODY_LIMIT] + "..."
        return text

    def request(self, url: str, payload: bytes, headers: dict) -> None:
        body = self._clip(payload.decode("utf-8", errors="replace"))
        if self.log_headers:
            self._logger.info("REQUEST: POST %s headers=%s body=%s", url, headers, body)
        else:
            self._logger.info("REQUEST: POST %s body=%s", url, body)

    def response(self, url: str, status: int, body: str, headers=None) -> None:
        if self.log_headers:
            self._logger.info(
                "RESPONSE: POST %s status=%d headers=%s body=%s",
                url, status, dict(headers or {}), self._clip(body),
            )
        else:
            self._logger.info("RESPONSE: POST %s status=%d body=%s", url, status, self._clip(body))

    def failure(self, url: str, error: BaseException) -> None:
        self._logger.info("FAILED: POST %s error=%r", url, error)


@dataclass
class TransportResponse:
    """Result of one POST. ``status is None`` means no server-confirmed outcome."""
    status: int | None
    body: str | None
    error: BaseException | None = None

    @property
    def is_indeterminate(self) -> bool:
        return self.status is None

    def raise_for_error(self) -> None:
        """Raise PimalinkTransportError when the request never got an answer"""
        if self.status is None:
            raise PimalinkTransportError(
                f"No response from server: {self.error}", cause=self.error
            )


def verify_tls_for(host: str) -> bool:
    """Certificate verification is on for every host except the PimaLink cloud"""
    return host not in UNVERIFIED_TLS_HOSTS


class PimalinkTransport:
    def __init__(
        self,
        session: aiohttp.ClientSession,
        host: str = PIMALINK_HOST,
        port: int = PIMALINK_PORT,
        timeout: float | None = DEFAULT_TIMEOUT,
    ):
        self._session = session
        self._traffic = HttpTrafficLog.from_env()

        self.host = host
        self.port = port
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._ssl = None if verify_tls_for(host) else False

    def url(self, path: str) -> str:
        return f"https://{self.host}:{self.port}{path}"

    async def post(self, path: str, envelope: dict) -> TransportResponse:
        """
        POST a JSON envelope.

        Returns the status code and raw text body, or a response carrying the
        underlying error when the request could not be built or completed.
        """
        url = self.url(path)
        try:
            payload = json.dumps(envelope).encode("utf-8")
        except (TypeError, ValueError) as e:
            _LOGGER.warning("Cannot serialize request for %s: %s", path, e)
            return TransportResponse(status=None, body=None, error=e)

        kwargs = {
            "data": payload,
            "headers": {"Content-Type": "application/json"},
            "timeout": self._timeout,
        }
        if self._ssl is not None:
            kwargs["ssl"] = self._ssl
        if self._traffic:
            self._traffic.request(url, payload, kwargs["headers"])

        try:
            async with self._session.post(url, **kwargs) as resp:
                body = await resp.text()
                _LOGGER.debug("POST %s -> %s", path, resp.status)
                if self._traffic:
                    self._traffic.response(
                        url, resp.status, body, resp.headers if self._traffic.log_headers else None
                    )
                return TransportResponse(status=resp.status, body=body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            _LOGGER.warning("HTTPS request error on %s: %s", path, e)
            if self._traffic:
                self._traffic.failure(url, e)
            return TransportResponse(status=None, body=None, error=e)
