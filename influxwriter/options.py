"""Client configuration combining write and HTTP options."""

from __future__ import annotations

import platform
import ssl
import sys
import urllib.request
from typing import Any, Callable

from .log import LogLevel
from .point import Precision
from .write_options import WriteOptions

VERSION = "2.4.0"


def user_agent() -> str:
    """Return the User-Agent header value sent with requests."""
    return f"influxwriter/{VERSION} ({sys.platform}; {platform.machine() or 'unknown'})"


class _WriteOption:
    """Attribute forwarded to the wrapped :class:`WriteOptions`."""

    def __init__(self, convert: Callable[[Any], Any] | None = None) -> None:
        self._convert = convert

    def __set_name__(self, owner: type, name: str) -> None:
        self._name = name

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return getattr(obj.write_options, self._name)

    def __set__(self, obj: Any, value: Any) -> None:
        if self._convert is not None:
            value = self._convert(value)
        setattr(obj.write_options, self._name, value)


class Options:
    """Configuration for communicating with an InfluxDB server.

    Write-related attributes are forwarded to :attr:`write_options`. The HTTP
    request timeout is in seconds. ``http_client`` is a urllib opener; when not
    set explicitly, one using ``tls_config`` is built.
    """

    batch_size = _WriteOption()
    flush_interval = _WriteOption()
    retry_interval = _WriteOption()
    max_retries = _WriteOption()
    retry_buffer_limit = _WriteOption()
    max_retry_interval = _WriteOption()
    precision = _WriteOption(Precision)
    use_gzip = _WriteOption(bool)
    default_tags = _WriteOption()

    def __init__(
        self,
        *,
        log_level: int = LogLevel.ERROR,
        write_options: WriteOptions | None = None,
        tls_config: ssl.SSLContext | None = None,
        http_request_timeout: float = 20,
        http_client: urllib.request.OpenerDirector | None = None,
    ) -> None:
        self.log_level = log_level
        self.write_options = write_options if write_options is not None else WriteOptions()
        self.http_request_timeout = http_request_timeout
        self._tls_config = tls_config
        self._http_client = http_client
        self._default_client: urllib.request.OpenerDirector | None = None

    @property
    def tls_config(self) -> ssl.SSLContext | None:
        """TLS context used for secure connections."""
        return self._tls_config

    @tls_config.setter
    def tls_config(self, value: ssl.SSLContext | None) -> None:
        self._tls_config = value
        self._default_client = None

    @property
    def http_client(self) -> urllib.request.OpenerDirector:
        """The opener used for HTTP requests."""
        if self._http_client is not None:
            return self._http_client
        if self._default_client is None:
            self._default_client = urllib.request.build_opener(
                urllib.request.HTTPSHandler(context=self._tls_config)
            )
        return self._default_client

    @http_client.setter
    def http_client(self, value: urllib.request.OpenerDirector | None) -> None:
        self._http_client = value

    def add_default_tag(self, key: str, value: str) -> "Options":
        """Add or overwrite a tag added to each written point."""
        self.write_options.add_default_tag(key, value)
        return self