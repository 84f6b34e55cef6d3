"""Configuration for writing points."""

from __future__ import annotations

from dataclasses import dataclass, field

from .point import Precision


@dataclass
class WriteOptions:
    """Write configuration.

    Intervals are in milliseconds. ``max_retries`` of zero disables retrying;
    ``retry_buffer_limit`` is a number of points and should be a multiple of
    ``batch_size``. Default tags are added to each written point unless the
    point already has a tag with the same key.
    """

    batch_size: int = 5000
    flush_interval: int = 1000
    precision: Precision = Precision.NANOSECOND
    use_gzip: bool = False
    default_tags: dict[str, str] = field(default_factory=dict)
    retry_interval: int = 5000
    max_retries: int = 3
    retry_buffer_limit: int = 50000
    max_retry_interval: int = 300000

    def __post_init__(self) -> None:
        self.precision = Precision(self.precision)

    def add_default_tag(self, key: str, value: str) -> "WriteOptions":
        """Add or overwrite a default tag."""
        self.default_tags[key] = value
        return self