import pytest

from influxwriter.point import Precision
from influxwriter.write_options import WriteOptions


def test_default_options():
    opts = WriteOptions()
    assert opts.batch_size == 5000
    assert opts.use_gzip is False
    assert opts.flush_interval == 1000
    assert opts.precision == Precision.NANOSECOND
    assert opts.retry_buffer_limit == 50000
    assert opts.retry_interval == 5000
    assert opts.max_retries == 3
    assert opts.max_retry_interval == 300000
    assert len(opts.default_tags) == 0


def test_settings_options():
    opts = (
        WriteOptions(
            batch_size=5,
            use_gzip=True,
            flush_interval=5000,
            precision=Precision.MILLISECOND,
            retry_buffer_limit=5,
            retry_interval=1000,
            max_retries=7,
            max_retry_interval=150000,
        )
        .add_default_tag("a", "1")
        .add_default_tag("b", "2")
    )
    assert opts.batch_size == 5
    assert opts.use_gzip is True
    assert opts.flush_interval == 5000
    assert opts.precision == Precision.MILLISECOND
    assert opts.retry_buffer_limit == 5
    assert opts.retry_interval == 1000
    assert opts.max_retries == 7
    assert opts.max_retry_interval == 150000
    assert opts.default_tags == {"a": "1", "b": "2"}


def test_default_tag_overwrite():
    opts = WriteOptions().add_default_tag("a", "1").add_default_tag("a", "3")
    assert opts.default_tags == {"a": "3"}


def test_default_tags_not_shared():
    first = WriteOptions().add_default_tag("a", "1")
    second = WriteOptions()
    assert first.default_tags == {"a": "1"}
    assert second.default_tags == {}


def test_precision_coerced_from_int():
    assert WriteOptions(precision=1_000_000_000).precision is Precision.SECOND
    with pytest.raises(ValueError):
        WriteOptions(precision=7)