"""Reliable writing of line protocol batches with retrying."""

from __future__ import annotations

import http
import json
import threading
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from . import log
from .gzip_stream import compress_with_gzip
from .log import LogLevel
from .options import Options, user_agent
from .point import Point, Tag, to_line_protocol
from .retry_queue import RetryQueue
from .write_options import WriteOptions


@dataclass
class Batch:
    """Line protocol data to send, with its retry state. Delay is in ms."""

    data: str
    retry_delay: int
    retry_attempts: int = 0
    evicted: bool = False


class HTTPError(Exception):
    """Failure of an HTTP request.

    ``status_code`` is zero when no response was received; ``err`` then holds
    the underlying error. ``retry_after`` is in seconds.
    """

    def __init__(
        self,
        status_code: int = 0,
        code: str = "",
        message: str = "",
        err: BaseException | None = None,
        retry_after: int = 0,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        self.err = err
        self.retry_after = retry_after
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.err is not None:
            return str(self.err)
        if self.code and self.message:
            return f"{self.code}: {self.message}"
        if self.message:
            return self.message
        return f"Unexpected status code {self.status_code}"


class WriteCancelledError(Exception):
    """Raised when a write is cancelled before it starts."""


class HTTPService:
    """Sends requests to an InfluxDB server's API."""

    def __init__(self, server_url: str, token: str = "", options: Options | None = None) -> None:
        self.server_url = server_url
        self.options = options if options is not None else Options()
        self.authorization = f"Token {token}" if token else ""
        base = server_url if server_url.endswith("/") else server_url + "/"
        self._api_url = base + "api/v2/"

    def server_api_url(self) -> str:
        """Return the API base URL, ending with a slash."""
        return self._api_url

    def do_post_request(self, url: str, body: Any, headers: Mapping[str, str] | None = None) -> None:
        """POST ``body`` to ``url``; raise :class:`HTTPError` on failure."""
        data = body.read() if hasattr(body, "read") else body
        if isinstance(data, str):
            data = data.encode("utf-8")
        request = urllib.request.Request(url, data=data, method="POST")
        request.add_header("User-Agent", user_agent())
        if self.authorization:
            request.add_header("Authorization", self.authorization)
        for key, value in (headers or {}).items():
            request.add_header(key, value)
        try:
            with self.options.http_client.open(
                request, timeout=self.options.http_request_timeout
            ) as response:
                response.read()
        except urllib.error.HTTPError as exc:
            raise _error_from_response(exc.code, exc.headers, exc.read()) from exc
        except (urllib.error.URLError, OSError) as exc:
            raise HTTPError(err=exc) from exc


def _status_text(status: int) -> str:
    try:
        return f"{status} {http.HTTPStatus(status).phrase}"
    except ValueError:
        return str(status)


def _parse_retry_after(value: str | None) -> int:
    try:
        return max(int(value), 0) if value else 0
    except ValueError:
        return 0


def _error_from_response(status: int, headers: Any, body: bytes) -> HTTPError:
    retry_after = _parse_retry_after(headers.get("Retry-After") if headers else None)
    text = body.decode("utf-8", errors="replace") if body else ""
    influx_error = headers.get("X-Influxdb-Error") if headers else None
    if influx_error:
        return HTTPError(status, _status_text(status), influx_error, retry_after=retry_after)
    content_type = (headers.get("Content-Type") or "") if headers else ""
    if text and "application/json" in content_type:
        try:
            payload = json.loads(text)
        except ValueError:
            payload = None
        if isinstance(payload, dict) and ("code" in payload or "message" in payload):
            return HTTPError(
                status,
                str(payload.get("code", "")),
                str(payload.get("message", "")),
                retry_after=retry_after,
            )
    if text:
        return HTTPError(status, _status_text(status), text, retry_after=retry_after)
    return HTTPError(status, retry_after=retry_after)


class WriteService:
    """Writes batches to a bucket and retries failed ones with exponential backoff."""

    retry_exponential_base = 5

    def __init__(
        self,
        org: str,
        bucket: str,
        http_service: HTTPService,
        options: WriteOptions,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.org = org
        self.bucket = bucket
        self._http_service = http_service
        self._options = options
        self._clock = clock
        self._lock = threading.Lock()
        self._last_write_attempt: float | None = None
        self.retry_queue = RetryQueue(max(options.retry_buffer_limit // options.batch_size, 1))
        self._url = self._build_url(http_service.server_api_url())

    def _build_url(self, api_url: str) -> str:
        parts = urllib.parse.urlsplit(urllib.parse.urljoin(api_url, "write"))
        params = dict(urllib.parse.parse_qsl(parts.query))
        params.update(org=self.org, bucket=self.bucket, precision=self._options.precision.unit)
        query = urllib.parse.urlencode(sorted(params.items()))
        return urllib.parse.urlunsplit(parts._replace(query=query))

    def write_url(self) -> str:
        """Return the URL batches are posted to."""
        return self._url

    def _can_write(self, batch: Batch) -> bool:
        with self._lock:
            last = self._last_write_attempt
        return last is None or self._clock() > last + batch.retry_delay / 1000

    def _push(self, batch: Batch | None, message: str) -> None:
        if batch is not None and self.retry_queue.push(batch):
            log.warn(message)

    def handle_write(self, batch: Batch | None, cancel: threading.Event | None = None) -> None:
        """Write ``batch``, first retrying queued batches when their delay is over.

        Failed batches are kept for retrying when retrying is enabled and the
        error is a connection error or a status of 429 or above. Raises
        :class:`HTTPError` on failure and :class:`WriteCancelledError` if
        ``cancel`` is set.
        """
        log.debug("Write proc: received write request")
        to_write = batch
        retrying = False
        while True:
            if cancel is not None and cancel.is_set():
                log.debug("Write proc: ctx cancelled req")
                raise WriteCancelledError("write cancelled")
            if self.retry_queue:
                log.debug("Write proc: taking batch from retry queue")
                if not retrying:
                    if self._can_write(self.retry_queue.first()):
                        retrying = True
                    else:
                        log.warn("Write proc: cannot write yet, storing batch to queue")
                        self._push(batch, "Write proc: Retry buffer full, discarding oldest batch")
                        to_write = None
                if retrying:
                    to_write = self.retry_queue.first()
                    to_write.retry_attempts += 1
                    if batch is not None:
                        self._push(batch, "Write proc: Retry buffer full, discarding oldest batch")
                        batch = None
            if to_write is None:
                return
            try:
                self.write_batch(to_write)
            except HTTPError as exc:
                self._handle_failure(to_write, batch, exc)
                raise
            if retrying and not to_write.evicted:
                self.retry_queue.pop()
            to_write = None

    def _handle_failure(self, failed: Batch, batch: Batch | None, exc: HTTPError) -> None:
        retryable = exc.status_code == 0 or exc.status_code >= http.HTTPStatus.TOO_MANY_REQUESTS
        if self._options.max_retries == 0 or not retryable:
            log.error("Write error: %s\n", str(exc))
            return
        log.error("Write error: %s\nBatch kept for retrying\n", str(exc))
        if exc.retry_after > 0:
            failed.retry_delay = exc.retry_after * 1000
        else:
            growth = self.retry_exponential_base**failed.retry_attempts
            failed.retry_delay = min(
                self._options.retry_interval * growth, self._options.max_retry_interval
            )
        if failed.retry_attempts == 0:
            self._push(batch, "Retry buffer full, discarding oldest batch")
        elif failed.retry_attempts == self._options.max_retries:
            log.warn("Reached maximum number of retries, discarding batch")
            if not failed.evicted:
                self.retry_queue.pop()

    def write_batch(self, batch: Batch) -> None:
        """Send one batch to the server without retrying."""
        if log.level() >= LogLevel.DEBUG:
            log.debug("Writing batch: %s", batch.data)
        body: Any = batch.data.encode("utf-8")
        headers = {"Content-Type": "text/plain; charset=utf-8"}
        if self._options.use_gzip:
            body = compress_with_gzip(body)
            headers["Content-Encoding"] = "gzip"
        with self._lock:
            self._last_write_attempt = self._clock()
        self._http_service.do_post_request(self._url, body, headers)

    def encode_points(self, *points: Point) -> str:
        """Encode points as line protocol, adding default tags.

        Raises ValueError for a point without fields or with a NaN or
        infinite float field.
        """
        return "".join(
            to_line_protocol(self._with_default_tags(point), self._options.precision)
            for point in points
        )

    def _with_default_tags(self, point: Point) -> Point:
        if not point.fields:
            raise ValueError(f"point {point.measurement!r} has no fields")
        for item in point.fields:
            if isinstance(item.value, float) and (item.value != item.value or abs(item.value) == float("inf")):
                raise ValueError(f"invalid value of field {item.key!r}: {item.value}")
        defaults = self._options.default_tags
        if not defaults:
            return point
        present = {tag.key for tag in point.tags}
        tags = list(point.tags) + [
            Tag(key, value) for key, value in defaults.items() if key not in present
        ]
        tags.sort(key=lambda tag: tag.key)
        return Point(point.measurement, tags, point.fields, point.time)