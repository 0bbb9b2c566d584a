import struct
import zlib
from io import BytesIO

import pytest
from PIL import Image
from pypdf import PdfWriter

from fms.config import LocalSettings, MetadataSettings, Settings
from fms.core.pipeline import ProcessingPipeline


def encode(im: Image.Image, fmt: str, **kwargs) -> bytes:
    buf = BytesIO()
    im.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


def decode_size(data: bytes):
    with Image.open(BytesIO(data)) as im:
        return im.size


def png_header(width: int, height: int) -> bytes:
    """A PNG whose header declares the given size but carries no real pixels."""

    def chunk(tag: bytes, payload: bytes) -> bytes:
        crc = zlib.crc32(tag + payload) & 0xFFFFFFFF
        return struct.pack(">I", len(payload)) + tag + payload + struct.pack(">I", crc)

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", ihdr)
        + chunk(b"IDAT", zlib.compress(b"\x00" * 16))
        + chunk(b"IEND", b"")
    )


def make_pdf(pages: int = 2, metadata=None) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    if metadata:
        writer.add_metadata(metadata)
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        local=LocalSettings(base_path=str(tmp_path / "uploads")),
        metadata=MetadataSettings(backend="memory", db_path=str(tmp_path / "fms.db")),
    )


@pytest.fixture
def pipeline(settings) -> ProcessingPipeline:
    return ProcessingPipeline(settings)


@pytest.fixture
def noisy_jpeg() -> bytes:
    """High-quality JPEG of noise; re-encoding at quality 80 shrinks it a lot."""
    im = Image.effect_noise((256, 256), 64).convert("RGB")
    return encode(im, "JPEG", quality=100)


@pytest.fixture
def uncompressed_png() -> bytes:
    """Gradient PNG stored without deflate compression."""
    return encode(Image.linear_gradient("L").convert("RGB"), "PNG", compress_level=0)


@pytest.fixture
def optimized_png() -> bytes:
    """Noise PNG already saved with optimization; cannot be made meaningfully smaller."""
    return encode(Image.effect_noise((64, 64), 100), "PNG", optimize=True)


@pytest.fixture
def square_png() -> bytes:
    return encode(Image.new("RGB", (500, 500), (200, 30, 30)), "PNG")


@pytest.fixture
def text_10kb() -> bytes:
    line = b"The quick brown fox jumps over the lazy dog. 0123456789\n"
    return (line * (10240 // len(line) + 1))[:10240]
