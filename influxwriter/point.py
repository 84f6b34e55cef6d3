"""Time series points and their InfluxDB line protocol form."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Mapping

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Precision(enum.IntEnum):
    """Timestamp precision; values are the unit's length in nanoseconds."""

    NANOSECOND = 1
    MICROSECOND = 1_000
    MILLISECOND = 1_000_000
    SECOND = 1_000_000_000

    @property
    def unit(self) -> str:
        """Short unit name as used by the write endpoint."""
        return {
            Precision.NANOSECOND: "ns",
            Precision.MICROSECOND: "us",
            Precision.MILLISECOND: "ms",
            Precision.SECOND: "s",
        }[self]


class Unsigned(int):
    """Integer field value written as an unsigned 64-bit integer."""

    def __new__(cls, value: Any = 0) -> "Unsigned":
        obj = super().__new__(cls, value)
        if not 0 <= obj < 2**64:
            raise ValueError(f"value {int(obj)} out of unsigned 64-bit range")
        return obj

    def __repr__(self) -> str:
        return f"Unsigned({int(self)})"


@dataclass
class Tag:
    """A tag key and value."""

    key: str
    value: str


@dataclass
class Field:
    """A field key and its line-protocol-compatible value."""

    key: str
    value: Any


@dataclass
class Point:
    """An InfluxDB time series point holding tags, fields and a timestamp.

    The timestamp is a ``datetime`` (naive values are taken as UTC), an
    integer count of nanoseconds since the Unix epoch, or ``None``.
    """

    measurement: str
    tags: list[Tag] = field(default_factory=list)
    fields: list[Field] = field(default_factory=list)
    time: datetime | int | None = None

    def add_tag(self, key: str, value: str) -> "Point":
        """Add a tag, replacing the value of an existing tag with the same key."""
        for tag in self.tags:
            if tag.key == key:
                tag.value = value
                return self
        self.tags.append(Tag(key, value))
        return self

    def add_field(self, key: str, value: Any) -> "Point":
        """Add a field, replacing an existing one with the same key.

        ``None`` values are ignored.
        """
        converted = convert_field(value)
        if converted is None:
            return self
        for existing in self.fields:
            if existing.key == key:
                existing.value = converted
                return self
        self.fields.append(Field(key, converted))
        return self

    def set_time(self, timestamp: datetime | int | None) -> "Point":
        """Set the point's timestamp."""
        if timestamp is not None:
            _timestamp_ns(timestamp)
        self.time = timestamp
        return self

    def sort_tags(self) -> "Point":
        """Order tags by key."""
        self.tags.sort(key=lambda tag: tag.key)
        return self

    def sort_fields(self) -> "Point":
        """Order fields by key."""
        self.fields.sort(key=lambda item: item.key)
        return self

    def to_line_protocol(self, precision: Precision = Precision.NANOSECOND) -> str:
        """Return the point as a line protocol line ending with a newline."""
        return to_line_protocol(self, precision)


def new_point(
    measurement: str,
    tags: Mapping[str, str] | None = None,
    fields: Mapping[str, Any] | None = None,
    timestamp: datetime | int | None = None,
) -> Point:
    """Create a point with tags and fields sorted by key; ``None`` fields are skipped."""
    point = Point(measurement)
    point.tags = [Tag(key, value) for key, value in (tags or {}).items()]
    for key, value in (fields or {}).items():
        converted = convert_field(value)
        if converted is not None:
            point.fields.append(Field(key, converted))
    point.sort_fields().sort_tags()
    return point.set_time(timestamp)


def convert_field(value: Any) -> Any:
    """Convert a value to a type the line protocol supports.

    Booleans, strings, floats, integers and :class:`Unsigned` pass through;
    bytes are decoded, datetimes become RFC 3339 strings, timedeltas become
    duration strings such as ``4h24m3s``, anything else its ``str()``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, Unsigned):
        return value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    if isinstance(value, str):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, datetime):
        return _format_rfc3339(value)
    if isinstance(value, timedelta):
        return _format_duration(value)
    return str(value)


def to_line_protocol(point: Point, precision: Precision = Precision.NANOSECOND) -> str:
    """Return the point as a line protocol line, timestamp scaled to ``precision``."""
    parts = [_escape_key(point.measurement, escape_equal=False)]
    for tag in point.tags:
        parts.append(f",{_escape_key(tag.key)}={_escape_key(tag.value)}")
    parts.append(" ")
    parts.append(
        ",".join(f"{_escape_key(item.key)}={_format_value(item.value)}" for item in point.fields)
    )
    if point.time is not None:
        parts.append(" ")
        parts.append(str(_scale(_timestamp_ns(point.time), Precision(precision))))
    parts.append("\n")
    return "".join(parts)


_KEY_ESCAPES = {
    ord("\n"): r"\\n",
    ord("\r"): r"\\r",
    ord("\t"): r"\\t",
    ord(" "): r"\ ",
    ord(","): r"\,",
}
_KEY_ESCAPES_WITH_EQUAL = {**_KEY_ESCAPES, ord("="): r"\="}
_VALUE_ESCAPES = {ord("\\"): "\\\\", ord('"'): '\\"'}


def _escape_key(text: str, escape_equal: bool = True) -> str:
    return text.translate(_KEY_ESCAPES_WITH_EQUAL if escape_equal else _KEY_ESCAPES)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Unsigned):
        return f"{int(value)}u"
    if isinstance(value, int):
        return f"{value}i"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return '"' + value.translate(_VALUE_ESCAPES) + '"'
    raise TypeError(f"unsupported field value type: {type(value).__name__}")


def _format_float(value: float) -> str:
    """Shortest representation, exponent form only for exponents < -4 or >= 21."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    number = Decimal(repr(value)).normalize()
    sign, digits, exponent = number.as_tuple()
    if value == 0:
        return "-0" if sign else "0"
    decimal_exponent = len(digits) + exponent - 1
    if -4 <= decimal_exponent < 21:
        return format(number, "f")
    mantissa = str(digits[0])
    if len(digits) > 1:
        mantissa += "." + "".join(map(str, digits[1:]))
    exp_sign = "-" if decimal_exponent < 0 else "+"
    return f"{'-' if sign else ''}{mantissa}e{exp_sign}{abs(decimal_exponent):02d}"


def _as_aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def _timestamp_ns(timestamp: datetime | int) -> int:
    if isinstance(timestamp, datetime):
        delta = _as_aware(timestamp) - _EPOCH
        return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000
    if isinstance(timestamp, int) and not isinstance(timestamp, bool):
        return int(timestamp)
    raise TypeError(f"unsupported timestamp type: {type(timestamp).__name__}")


def _scale(nanoseconds: int, precision: Precision) -> int:
    if precision is Precision.SECOND:
        return nanoseconds // Precision.SECOND
    quotient = abs(nanoseconds) // precision
    return -quotient if nanoseconds < 0 else quotient


def _format_rfc3339(moment: datetime) -> str:
    moment = _as_aware(moment)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    fraction = f"{moment.microsecond:06d}".rstrip("0")
    if fraction:
        text += "." + fraction
    offset = moment.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _with_fraction(value: int, scale: int) -> str:
    whole, fraction = divmod(value, scale)
    width = len(str(scale)) - 1
    digits = f"{fraction:0{width}d}".rstrip("0") if width else ""
    return f"{whole}.{digits}" if digits else str(whole)


def _format_duration(delta: timedelta) -> str:
    nanoseconds = (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    magnitude = abs(nanoseconds)
    if magnitude < 1_000:
        return f"{sign}{magnitude}ns"
    if magnitude < 1_000_000:
        return f"{sign}{_with_fraction(magnitude, 1_000)}µs"
    if magnitude < 1_000_000_000:
        return f"{sign}{_with_fraction(magnitude, 1_000_000)}ms"
    seconds, fraction = divmod(magnitude, 1_000_000_000)
    hours, remainder = divmod(seconds, 3_600)
    minutes, seconds = divmod(remainder, 60)
    text = sign
    if hours:
        text += f"{hours}h"
    if hours or minutes:
        text += f"{minutes}m"
    return text + _with_fraction(seconds * 1_000_000_000 + fraction, 1_000_000_000) + "s"