"""Tests for generic and PDF compression."""

import os
from io import BytesIO

import pytest
import zstandard as zstd
from pypdf import PdfReader

from fms.core.compression import GenericCompressor
from fms.core.types import CompressionMethod
from tests.conftest import make_pdf


@pytest.fixture
def compressor():
    return GenericCompressor()


def test_text_is_compressed(compressor, text_10kb):
    outcome = compressor.compress(text_10kb, "text/plain", "notes.txt")
    assert outcome.applied is True
    assert outcome.method == CompressionMethod.GENERIC
    assert outcome.original_size == 10240
    assert outcome.compressed_size == len(outcome.data)
    assert outcome.savings_ratio >= 0.15
    assert outcome.saved_bytes == 10240 - outcome.compressed_size
    assert outcome.metadata["algorithm"] == "zstd"
    assert compressor.decompress(outcome.data, outcome.method) == text_10kb


def test_jpeg_is_never_compressed(compressor, noisy_jpeg):
    outcome = compressor.compress(noisy_jpeg, "image/jpeg")
    assert outcome.applied is False
    assert outcome.reason == "file type already compressed"
    assert outcome.data == noisy_jpeg
    assert outcome.saved_bytes == 0


def test_oversized_input_skipped_without_compressing(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("compressor must not run")

    monkeypatch.setattr(zstd, "ZstdCompressor", fail)
    compressor = GenericCompressor(max_file_size=1024)
    data = b"a" * 2048
    outcome = compressor.compress(data, "text/plain")
    assert outcome.applied is False
    assert outcome.reason == "file too large"
    assert outcome.data == data


def test_empty_input(compressor):
    outcome = compressor.compress(b"", "text/plain")
    assert outcome.applied is False
    assert outcome.reason == "empty file"
    assert outcome.data == b""
    assert outcome.original_size == 0


def test_incompressible_data_not_applied(compressor):
    data = os.urandom(4096)
    outcome = compressor.compress(data, "application/octet-stream")
    assert outcome.applied is False
    assert outcome.reason == "compression not beneficial"
    assert outcome.data == data
    assert outcome.compressed_size == outcome.original_size


def test_unexpected_failure_is_reported(monkeypatch, compressor, text_10kb):
    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(zstd, "ZstdCompressor", boom)
    outcome = compressor.compress(text_10kb, "text/plain")
    assert outcome.applied is False
    assert outcome.reason == "compression failed: boom"
    assert outcome.data == text_10kb


def test_pdf_container_optimization(compressor):
    data = make_pdf(pages=2, metadata={"/Author": "A" * 4000, "/Keywords": "k" * 4000, "/Title": "Report"})
    outcome = compressor.compress(data, "application/pdf", "report.pdf")

    assert outcome.applied is True
    assert outcome.method == CompressionMethod.CONTAINER_OPTIMIZATION
    assert outcome.metadata["pages"] == "2"
    assert outcome.compressed_size < outcome.original_size

    reader = PdfReader(BytesIO(outcome.data))
    assert len(reader.pages) == 2
    assert reader.metadata.get("/Author") is None
    assert reader.metadata.get("/Keywords") is None
    assert reader.metadata.get("/Title") == "Report"

    # optimized PDFs are stored as-is
    assert compressor.decompress(outcome.data, outcome.method) == outcome.data


def test_unparseable_pdf_falls_back_to_generic(compressor):
    data = b"hello world, this is not a pdf document. " * 200
    outcome = compressor.compress(data, "application/pdf")
    assert outcome.applied is True
    assert outcome.method == CompressionMethod.GENERIC
    assert compressor.decompress(outcome.data, "GENERIC") == data


def test_is_worthwhile(compressor):
    assert compressor.is_worthwhile(100, 85)
    assert not compressor.is_worthwhile(100, 86)
    assert not compressor.is_worthwhile(100, 100)
    assert not compressor.is_worthwhile(100, 120)


@pytest.mark.parametrize("method", ["NONE", "CONTAINER_OPTIMIZATION", CompressionMethod.NONE, None])
def test_decompress_passthrough(compressor, method):
    assert compressor.decompress(b"payload", method) == b"payload"


def test_decompress_unknown_method_returns_input(compressor):
    assert compressor.decompress(b"payload", "BROTLI") == b"payload"


def test_decompress_accepts_lowercase_tag(compressor, text_10kb):
    compressed = compressor.compress(text_10kb, "text/plain").data
    assert compressor.decompress(compressed, "generic") == text_10kb


def test_decompress_corrupt_payload_returns_input(compressor):
    assert compressor.decompress(b"not zstd", CompressionMethod.GENERIC) == b"not zstd"
