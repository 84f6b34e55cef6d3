import gzip
import io

import pytest

from influxwriter.gzip_stream import GzipCompressingReader, compress_with_gzip

TEXT = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua. Ut enim ad minim veniam, quis nostrud "
    "exercitation ullamco laboris nisi ut aliquip ex ea commodo consequat. Duis aute irure "
    "dolor in reprehenderit in voluptate velit esse cillum dolore eu fugiat nulla pariatur. "
    "Excepteur sint occaecat cupidatat non proident, sunt in culpa qui officia deserunt "
    "mollit anim id est laborum."
)


def test_gzip_round_trip():
    reader = compress_with_gzip(io.BytesIO(TEXT.encode()))
    with gzip.GzipFile(fileobj=reader) as unpacked:
        assert unpacked.read().decode() == TEXT


def test_read_all_has_gzip_magic():
    data = compress_with_gzip(TEXT.encode()).read()
    assert data[:2] == b"\x1f\x8b"
    assert gzip.decompress(data).decode() == TEXT


def test_chunked_reads():
    reader = compress_with_gzip(TEXT)
    chunks = []
    while chunk := reader.read(7):
        assert len(chunk) <= 7
        chunks.append(chunk)
    assert gzip.decompress(b"".join(chunks)).decode() == TEXT


def test_large_input_spanning_chunks():
    payload = ("line of data %d\n" % 1).encode() * 20000
    reader = compress_with_gzip(io.BytesIO(payload))
    assert gzip.decompress(reader.read()) == payload


def test_empty_input():
    assert gzip.decompress(compress_with_gzip(b"").read()) == b""


def test_text_stream_source():
    reader = compress_with_gzip(io.StringIO(TEXT))
    assert gzip.decompress(reader.read()).decode() == TEXT


def test_read_after_close_raises():
    reader = compress_with_gzip(TEXT)
    reader.close()
    assert reader.closed
    with pytest.raises(ValueError):
        reader.read()


def test_context_manager_closes_but_keeps_source_open():
    source = io.BytesIO(TEXT.encode())
    with GzipCompressingReader(source) as reader:
        assert reader.read(2) == b"\x1f\x8b"
    assert reader.closed
    assert not source.closed


def test_unreadable_source():
    with pytest.raises(TypeError):
        compress_with_gzip(42)