# influxwriter

Build InfluxDB time-series points, encode them as line protocol, and write
them to an InfluxDB 2 server over HTTP. Failed writes can be kept and
retried with exponential back-off.

The package needs nothing outside the Python standard library. It supports
Python 3.10 and later.

## Points and line protocol

`influxwriter.point` holds `Point`, `Tag`, `Field`, `Precision` and
`Unsigned`.

```python
from datetime import datetime, timezone
from influxwriter.point import Point, Precision, Unsigned, new_point

p = new_point(
    "system",
    {"host": "host_1", "vendor": "AWS"},
    {"temperature": 21.5, "disk_total": 1000000, "mem_free": Unsigned(42)},
    datetime(2020, 3, 20, 10, 30, tzinfo=timezone.utc),
)
print(p.to_line_protocol(Precision.SECOND), end="")
```

`new_point` sorts the tags and fields by key and skips fields whose value is
`None`. You can also build a point step by step. Every method returns the
point, so calls chain:

```python
p = (
    Point("stat")
    .add_tag("id", "rack_1")
    .add_field("level", 2)
    .set_time(datetime.now(timezone.utc))
    .sort_tags()
    .sort_fields()
)
```

`add_tag` and `add_field` replace the value of an existing key. A timestamp
is a `datetime` (naive values are taken as UTC), an integer number of
nanoseconds since the Unix epoch, or `None` for no timestamp.

`convert_field` turns field values into types the line protocol supports:

- booleans, strings, floats, integers and `Unsigned` values keep their type;
- bytes are decoded as UTF-8;
- datetimes become RFC 3339 strings such as `2020-03-20T10:30:23.123456Z`;
- timedeltas become duration strings such as `4h24m3s`;
- anything else becomes its `str()`.

`to_line_protocol(point, precision)` (or `Point.to_line_protocol`) writes
integers with an `i` suffix and `Unsigned` values with a `u` suffix, quotes
and escapes strings, escapes spaces, commas and `=` in keys and tag values,
and scales the timestamp to the chosen `Precision`. The line ends with a
newline.

## Write options

`influxwriter.write_options.WriteOptions` is a dataclass. Intervals are in
milliseconds.

| Attribute            | Default        |
|----------------------|----------------|
| `batch_size`         | 5000           |
| `flush_interval`     | 1000           |
| `precision`          | `NANOSECOND`   |
| `use_gzip`           | `False`        |
| `default_tags`       | `{}`           |
| `retry_interval`     | 5000           |
| `max_retries`        | 3 (0 disables retrying) |
| `retry_buffer_limit` | 50000 points   |
| `max_retry_interval` | 300000         |

`add_default_tag(key, value)` adds a tag written on every point that does not
already have a tag with that key.

## Writing

`influxwriter.write_service.HTTPService(server_url, token, options)` posts
requests to `<server_url>/api/v2/...`, with a `Token` authorization header
when a token is given and the `User-Agent` from `user_agent()`. A failed
request raises `HTTPError`, carrying `status_code` (0 when no response came
back), `code`, `message`, `retry_after` (seconds) and `err`.

`WriteApiBlocking` in `influxwriter.blocking` sends each call as one request,
with no implicit batching:

```python
from influxwriter.blocking import WriteApiBlocking
from influxwriter.write_options import WriteOptions
from influxwriter.write_service import HTTPService

service = HTTPService("http://localhost:8086", "token")
api = WriteApiBlocking("my-org", "my-bucket", service, WriteOptions())
api.write_record("weather,city=x temperature=20.5")
api.write_point(p)
```

`WriteService` in `influxwriter.write_service` does the work underneath:

- `write_url()` gives the write endpoint with `bucket`, `org` and `precision`
  query parameters;
- `encode_points(*points)` encodes points with the default tags added, and
  raises `ValueError` for a point without fields or with a NaN or infinite
  float;
- `write_batch(batch)` sends one `Batch`, gzip-compressed when `use_gzip` is
  set;
- `handle_write(batch, cancel=None)` first retries queued batches whose delay
  is over. When a write fails with a connection error or a status of 429 or
  above, and retrying is enabled, the batch is kept in a bounded `RetryQueue`
  (from `influxwriter.retry_queue`), and the delay grows by a factor of five
  per attempt up to `max_retry_interval`, or follows the server's
  `Retry-After`. The error is still raised. If the `cancel` event is set,
  `WriteCancelledError` is raised.

`compress_with_gzip(data)` in `influxwriter.gzip_stream` returns a
`GzipCompressingReader` that compresses bytes, text or a readable stream on
demand.

## Client options

`influxwriter.options.Options` holds:

- `write_options`, with all of its attributes also readable and settable on
  `Options` itself;
- `http_request_timeout` in seconds (default 20);
- `tls_config`, an `ssl.SSLContext`;
- `http_client`, a urllib opener, built from `tls_config` when not set;
- `log_level`, a stored value.

`user_agent()` returns the User-Agent string the package sends.

## Logging

`influxwriter.log` has a default `Logger` (prefix `influxdb2client`, level
`LogLevel.ERROR`, writing to standard error). Set `log_level` on it to see
more. `set_logger` installs another logger with `debug`, `info`, `warn` and
`error` methods, or `None` to turn logging off, and returns the previous
one. `Options.log_level` does not change the logger's level by itself.

## What this package does not do

It only writes. There is no query interface, no non-blocking write API that
batches points in the background (`flush_interval` is stored but nothing
uses it), and no management of buckets, organizations, users, labels or
tasks. There is no command-line tool.