"""
Image compression, thumbnail generation and metadata extraction using Pillow.

Every public method degrades instead of raising: undecodable or oversized
images leave compression as a no-op (original bytes back) and make thumbnail
generation return None.
"""
import logging
from io import BytesIO
from typing import Iterable, List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from fms.core.classifier import extract_format
from fms.core.types import ImageMetadata

logger = logging.getLogger(__name__)

# Limits checked against the image header before any pixel data is decoded
MAX_IMAGE_WIDTH = 10000
MAX_IMAGE_HEIGHT = 10000

# Re-encoded images are kept only if they are at least this much smaller
MIN_IMAGE_COMPRESSION_SAVINGS = 0.10

DEFAULT_QUALITY = 0.8
THUMBNAIL_QUALITY = 0.85

LOSSY_FORMATS = frozenset({"jpg", "jpeg", "webp"})

# Normalized format name -> Pillow encoder
PIL_FORMATS = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "gif": "GIF",
    "bmp": "BMP",
    "webp": "WEBP",
}

_DECODE_ERRORS = (UnidentifiedImageError, OSError, ValueError, SyntaxError, Image.DecompressionBombError)


def output_format(content_type: Optional[str]) -> str:
    """Normalized output format for a content type: jpeg->jpg, svg+xml->png."""
    fmt = extract_format(content_type)
    if fmt == "jpeg":
        return "jpg"
    if fmt == "svg+xml":
        return "png"
    return fmt


def fit_within(src_size: Tuple[int, int], box: Tuple[int, int]) -> Tuple[int, int]:
    """
    Fit ``src_size`` into ``box`` keeping the aspect ratio.

    The scale factor is min(box_w / src_w, box_h / src_h); the result never
    exceeds the box in either dimension.
    """
    src_w, src_h = src_size
    box_w, box_h = box
    scale = min(box_w / src_w, box_h / src_h)
    new_w = min(box_w, max(1, round(src_w * scale)))
    new_h = min(box_h, max(1, round(src_h * scale)))
    return new_w, new_h


def _has_alpha(im: Image.Image) -> bool:
    if im.mode in ("RGBA", "LA", "PA", "RGBa", "La"):
        return True
    if im.mode == "P" and "transparency" in im.info:
        return True
    return False


def _flatten_alpha(im: Image.Image, background_rgb: Tuple[int, int, int] = (255, 255, 255)) -> Image.Image:
    rgba = im.convert("RGBA")
    bg = Image.new("RGBA", rgba.size, background_rgb + (255,))
    return Image.alpha_composite(bg, rgba).convert("RGB")


class ImageProcessor:
    """
    Decode -> validate -> transform -> encode, per call.

    Args:
        quality: Default quality (0.0-1.0) for lossy re-encoding
        thumbnail_size: Default (width, height) thumbnail bounding box
        max_width: Largest accepted image width in pixels
        max_height: Largest accepted image height in pixels
        min_savings: Fractional savings needed to accept a compressed image
    """

    def __init__(
        self,
        quality: float = DEFAULT_QUALITY,
        thumbnail_size: Tuple[int, int] = (200, 200),
        max_width: int = MAX_IMAGE_WIDTH,
        max_height: int = MAX_IMAGE_HEIGHT,
        min_savings: float = MIN_IMAGE_COMPRESSION_SAVINGS,
    ):
        self.quality = quality
        self.thumbnail_size = thumbnail_size
        self.max_width = max_width
        self.max_height = max_height
        self.min_savings = min_savings

    # Decode / validate

    def _open(self, data: bytes, load: bool = True) -> Optional[Image.Image]:
        """
        Decode and validate image bytes; None if unusable.

        With ``load=False`` only the header is parsed, which is enough for
        size, mode and transparency.
        """
        if not data:
            return None

        try:
            im = Image.open(BytesIO(data))
        except _DECODE_ERRORS as e:
            logger.warning(f"Could not read image data - unsupported format or corrupted data: {e}")
            return None

        width, height = im.size
        if width > self.max_width or height > self.max_height:
            logger.warning(
                f"Image dimensions too large: {width}x{height} "
                f"(max: {self.max_width}x{self.max_height})"
            )
            im.close()
            return None

        if not load:
            return im

        try:
            im.load()
        except _DECODE_ERRORS as e:
            logger.warning(f"Could not decode image pixels: {e}")
            im.close()
            return None

        return im

    # Encode

    def _quality_for(self, fmt: str, quality: float) -> float:
        if fmt in ("jpg", "jpeg"):
            return quality
        if fmt == "webp":
            return min(quality + 0.1, 1.0)
        return 1.0

    def _encode(self, im: Image.Image, fmt: str, quality: Optional[float]) -> bytes:
        """
        Encode an image to ``fmt``.

        ``quality`` only applies to lossy formats; lossless formats are saved at
        full fidelity with the encoder's size optimizations turned on.
        """
        pil_format = PIL_FORMATS.get(fmt, fmt.upper())
        kwargs: dict = {}

        if pil_format == "JPEG":
            if _has_alpha(im) or im.mode not in ("RGB", "L", "CMYK"):
                im = _flatten_alpha(im) if _has_alpha(im) else im.convert("RGB")
            kwargs["quality"] = int(round((quality if quality is not None else 1.0) * 100))
            kwargs["optimize"] = True
        elif pil_format == "WEBP":
            kwargs["quality"] = int(round((quality if quality is not None else 1.0) * 100))
        elif pil_format in ("PNG", "GIF"):
            kwargs["optimize"] = True

        out = BytesIO()
        im.save(out, format=pil_format, **kwargs)
        return out.getvalue()

    def _is_worthwhile(self, original_size: int, compressed_size: int) -> bool:
        if compressed_size >= original_size:
            return False
        savings = 1.0 - compressed_size / original_size
        return savings >= self.min_savings

    # Public operations

    def compress(self, data: bytes, content_type: str, quality: Optional[float] = None) -> bytes:
        """
        Re-encode an image at full scale.

        Args:
            data: Original image bytes
            content_type: Declared MIME type, used to pick the output format
            quality: Lossy quality override (defaults to the processor's)

        Returns:
            The compressed bytes if they save at least ``min_savings``,
            otherwise ``data`` unchanged. Animated images are always
            returned unchanged.
        """
        im = self._open(data)
        if im is None:
            return data

        if getattr(im, "n_frames", 1) > 1:
            # Only the first frame would survive re-encoding
            logger.debug(f"Skipping compression of animated image ({im.n_frames} frames)")
            im.close()
            return data

        fmt = output_format(content_type)
        base_quality = self.quality if quality is None else quality
        try:
            with im:
                lossy_quality = self._quality_for(fmt, base_quality) if fmt in LOSSY_FORMATS else None
                compressed = self._encode(im, fmt, lossy_quality)
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Error compressing image: {e}")
            return data

        if self._is_worthwhile(len(data), len(compressed)):
            logger.debug(
                f"Image compressed from {len(data)} bytes to {len(compressed)} bytes "
                f"({(1.0 - len(compressed) / len(data)) * 100:.1f}% reduction)"
            )
            return compressed

        logger.debug("Image compression not worthwhile, returning original image")
        return data

    def _thumbnail_from(self, im: Image.Image, fmt: str, box: Tuple[int, int]) -> Optional[bytes]:
        try:
            size = fit_within(im.size, box)
            thumb = im.resize(size, Image.Resampling.LANCZOS) if size != im.size else im.copy()
            quality = THUMBNAIL_QUALITY if fmt in LOSSY_FORMATS else None
            data = self._encode(thumb, fmt, quality)
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Error generating thumbnail of size {box[0]}x{box[1]}: {e}")
            return None

        logger.debug(f"Thumbnail generated: {len(data)} bytes ({im.width}x{im.height} -> {size[0]}x{size[1]})")
        return data

    def thumbnail(
        self,
        data: bytes,
        content_type: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> Optional[bytes]:
        """
        Build a thumbnail that fits the bounding box, preserving aspect ratio.

        Returns:
            Encoded thumbnail bytes, or None if the image could not be used
        """
        im = self._open(data)
        if im is None:
            return None

        box = (width or self.thumbnail_size[0], height or self.thumbnail_size[1])
        with im:
            return self._thumbnail_from(im, output_format(content_type), box)

    def thumbnails(self, data: bytes, content_type: str, sizes: Iterable[int]) -> List[bytes]:
        """
        Build one square-box thumbnail per size.

        Sizes that fail are dropped from the result rather than failing the batch.
        """
        sizes = list(sizes)
        if not sizes:
            return []

        im = self._open(data)
        if im is None:
            return []

        fmt = output_format(content_type)
        results = []
        with im:
            for size in sizes:
                thumb = self._thumbnail_from(im, fmt, (size, size))
                if thumb is not None:
                    results.append(thumb)
        return results

    def metadata(self, data: bytes) -> Optional[ImageMetadata]:
        """Width, height, byte size and alpha flag from the image header; None if unreadable."""
        im = self._open(data, load=False)
        if im is None:
            return None

        with im:
            return ImageMetadata(
                width=im.width,
                height=im.height,
                size_in_bytes=len(data),
                has_alpha=_has_alpha(im),
            )
