"""Synchronous writing without implicit batching."""

from __future__ import annotations

from .point import Point
from .write_options import WriteOptions
from .write_service import Batch, HTTPService, WriteService


class WriteApiBlocking:
    """Writes records or points to a bucket synchronously.

    Each call sends one request made of exactly the given data; errors are
    raised as :class:`~influxwriter.write_service.HTTPError`. Safe to share
    between threads.
    """

    def __init__(
        self, org: str, bucket: str, service: HTTPService, write_options: WriteOptions
    ) -> None:
        self._service = WriteService(org, bucket, service, write_options)
        self._write_options = write_options

    def _write(self, data: str) -> None:
        self._service.write_batch(Batch(data, self._write_options.retry_interval))

    def write_record(self, *lines: str) -> None:
        """Write line protocol records; does nothing when none are given."""
        if lines:
            self._write("".join(line + "\n" for line in lines))

    def write_point(self, *points: Point) -> None:
        """Write points, adding the configured default tags."""
        self._write(self._service.encode_points(*points))