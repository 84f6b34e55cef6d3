import ssl
import urllib.request

from influxwriter.options import Options, user_agent
from influxwriter.point import Precision
from influxwriter.write_options import WriteOptions


def test_default_options():
    opts = Options()
    assert opts.batch_size == 5000
    assert opts.use_gzip is False
    assert opts.flush_interval == 1000
    assert opts.precision == Precision.NANOSECOND
    assert opts.retry_buffer_limit == 50000
    assert opts.retry_interval == 5000
    assert opts.max_retries == 3
    assert opts.max_retry_interval == 300000
    assert opts.tls_config is None
    assert opts.http_request_timeout == 20
    assert opts.log_level == 0


def test_settings_options():
    tls_config = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    opts = Options()
    opts.batch_size = 5
    opts.use_gzip = True
    opts.flush_interval = 5000
    opts.precision = Precision.MILLISECOND
    opts.retry_buffer_limit = 5
    opts.retry_interval = 1000
    opts.max_retry_interval = 10000
    opts.max_retries = 7
    opts.tls_config = tls_config
    opts.http_request_timeout = 50
    opts.log_level = 3
    assert opts.add_default_tag("t", "a") is opts

    assert opts.batch_size == 5
    assert opts.use_gzip is True
    assert opts.flush_interval == 5000
    assert opts.precision == Precision.MILLISECOND
    assert opts.retry_buffer_limit == 5
    assert opts.retry_interval == 1000
    assert opts.max_retry_interval == 10000
    assert opts.max_retries == 7
    assert opts.tls_config is tls_config
    assert opts.http_request_timeout == 50
    assert opts.log_level == 3
    assert opts.write_options.default_tags == {"t": "a"}

    client = urllib.request.build_opener()
    opts.http_client = client
    assert opts.http_client is client


def test_write_attributes_are_forwarded():
    write_options = WriteOptions()
    opts = Options(write_options=write_options)
    opts.batch_size = 42
    opts.precision = 1_000
    assert write_options.batch_size == 42
    assert write_options.precision is Precision.MICROSECOND


def test_default_http_client_is_cached_until_tls_changes():
    opts = Options()
    first = opts.http_client
    assert opts.http_client is first
    opts.tls_config = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    assert opts.http_client is not first


def test_user_agent():
    assert user_agent().startswith("influxwriter/2.4.0 (")
    assert user_agent().endswith(")")