"""Tests for image compression, thumbnails and metadata."""

from io import BytesIO

import pytest
from PIL import Image

from fms.core.image import ImageProcessor, fit_within, output_format
from tests.conftest import decode_size, encode, png_header


@pytest.fixture
def processor():
    return ImageProcessor()


@pytest.mark.parametrize(
    "content_type, expected",
    [("image/jpeg", "jpg"), ("image/JPEG", "jpg"), ("image/svg+xml", "png"), ("image/png", "png"), ("image/webp", "webp")],
)
def test_output_format(content_type, expected):
    assert output_format(content_type) == expected


@pytest.mark.parametrize(
    "src, box, expected",
    [
        ((500, 500), (200, 200), (200, 200)),
        ((400, 200), (200, 200), (200, 100)),
        ((200, 400), (200, 200), (100, 200)),
        ((1000, 3), (200, 200), (200, 1)),
        # smaller than the box: scaled up to fit
        ((50, 100), (200, 200), (100, 200)),
    ],
)
def test_fit_within(src, box, expected):
    assert fit_within(src, box) == expected


def test_jpeg_recompression_saves_space(processor, noisy_jpeg):
    result = processor.compress(noisy_jpeg, "image/jpeg")
    assert len(result) <= len(noisy_jpeg) * 0.9
    with Image.open(BytesIO(result)) as im:
        assert im.format == "JPEG"
        assert im.size == (256, 256)


def test_lower_quality_override_gives_smaller_output(processor, noisy_jpeg):
    default = processor.compress(noisy_jpeg, "image/jpeg")
    low = processor.compress(noisy_jpeg, "image/jpeg", quality=0.3)
    assert len(low) < len(default)


def test_png_recompression_is_lossless(processor, uncompressed_png):
    result = processor.compress(uncompressed_png, "image/png")
    assert len(result) < len(uncompressed_png)
    with Image.open(BytesIO(result)) as out, Image.open(BytesIO(uncompressed_png)) as src:
        assert out.format == "PNG"
        assert out.convert("RGB").tobytes() == src.convert("RGB").tobytes()


def test_already_optimized_png_returned_unchanged(processor, optimized_png):
    assert processor.compress(optimized_png, "image/png") == optimized_png


def test_min_savings_threshold_respected(uncompressed_png):
    strict = ImageProcessor(min_savings=0.9999)
    assert strict.compress(uncompressed_png, "image/png") == uncompressed_png


def test_undecodable_bytes_are_left_alone(processor):
    data = b"definitely not an image"
    assert processor.compress(data, "image/png") == data
    assert processor.thumbnail(data, "image/png") is None
    assert processor.metadata(data) is None


def test_empty_input(processor):
    assert processor.compress(b"", "image/png") == b""
    assert processor.thumbnail(b"", "image/png") is None


def test_square_thumbnail(processor, square_png):
    thumb = processor.thumbnail(square_png, "image/png", 200, 200)
    assert thumb is not None
    assert decode_size(thumb) == (200, 200)


def test_thumbnail_keeps_aspect_ratio(processor):
    data = encode(Image.new("RGB", (400, 200), (10, 120, 10)), "PNG")
    thumb = processor.thumbnail(data, "image/png", 200, 200)
    assert decode_size(thumb) == (200, 100)


def test_thumbnail_uses_default_box():
    processor = ImageProcessor(thumbnail_size=(64, 64))
    data = encode(Image.new("RGB", (300, 150), (0, 0, 0)), "PNG")
    assert decode_size(processor.thumbnail(data, "image/png")) == (64, 32)


def test_thumbnail_of_transparent_image_as_jpeg(processor):
    data = encode(Image.new("RGBA", (100, 100), (255, 0, 0, 128)), "PNG")
    thumb = processor.thumbnail(data, "image/jpeg", 50, 50)
    with Image.open(BytesIO(thumb)) as im:
        assert im.format == "JPEG"
        assert im.mode == "RGB"
        assert im.size == (50, 50)


def test_multiple_thumbnail_sizes(processor):
    data = encode(Image.new("RGB", (400, 200), (1, 2, 3)), "PNG")
    thumbs = processor.thumbnails(data, "image/png", [64, 128])
    assert [decode_size(t) for t in thumbs] == [(64, 32), (128, 64)]


def test_multiple_thumbnails_empty_cases(processor, square_png):
    assert processor.thumbnails(square_png, "image/png", []) == []
    assert processor.thumbnails(b"junk", "image/png", [64]) == []


def test_oversized_image_rejected_before_decoding(processor):
    data = png_header(12000, 100)
    assert processor.compress(data, "image/png") == data
    assert processor.thumbnail(data, "image/png") is None
    assert processor.metadata(data) is None


def test_decompression_bomb_rejected(processor):
    data = png_header(20000, 20000)
    assert processor.compress(data, "image/png") == data
    assert processor.thumbnail(data, "image/png") is None


def test_custom_dimension_limits(square_png):
    small = ImageProcessor(max_width=100, max_height=100)
    assert small.thumbnail(square_png, "image/png") is None
    assert small.metadata(square_png) is None


def test_metadata(processor):
    data = encode(Image.new("RGB", (320, 160), (5, 5, 5)), "PNG")
    meta = processor.metadata(data)
    assert (meta.width, meta.height) == (320, 160)
    assert meta.size_in_bytes == len(data)
    assert meta.has_alpha is False
    assert meta.aspect_ratio == pytest.approx(2.0)
    assert meta.pixel_count == 320 * 160


def test_metadata_detects_alpha(processor):
    data = encode(Image.new("RGBA", (10, 10), (0, 0, 0, 0)), "PNG")
    assert processor.metadata(data).has_alpha is True


def animated_gif(frames: int = 6, size: int = 120) -> bytes:
    images = [Image.effect_noise((size, size), 80 + i).convert("P") for i in range(frames)]
    buf = BytesIO()
    images[0].save(buf, format="GIF", save_all=True, append_images=images[1:], duration=100, loop=0)
    return buf.getvalue()


def test_animated_image_is_not_flattened(processor):
    data = animated_gif()
    with Image.open(BytesIO(data)) as im:
        assert im.n_frames == 6

    assert processor.compress(data, "image/gif") == data


def test_animated_image_still_gets_thumbnail(processor):
    thumb = processor.thumbnail(animated_gif(), "image/gif", 60, 60)
    assert decode_size(thumb) == (60, 60)


def test_failed_size_dropped_from_batch(processor):
    data = encode(Image.new("RGB", (400, 200), (1, 2, 3)), "PNG")
    thumbs = processor.thumbnails(data, "image/png", [-5, 64])
    assert len(thumbs) == 1
    assert decode_size(thumbs[0]) == (64, 32)


def test_metadata_reads_header_only(processor):
    # header declares 100x80 but the pixel stream is truncated
    data = png_header(100, 80)
    meta = processor.metadata(data)
    assert (meta.width, meta.height) == (100, 80)
    assert meta.size_in_bytes == len(data)
    # full decode still fails, so compression leaves the bytes alone
    assert processor.compress(data, "image/png") == data
