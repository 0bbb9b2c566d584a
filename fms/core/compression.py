"""
Generic and container-aware compression for non-image uploads.

Arbitrary bytes are compressed with Zstandard at its highest level. PDF
documents are first optimized structurally with pypdf (metadata stripped,
content streams packed); if the document can't be parsed, the generic path is
used on the original bytes instead.
"""
import logging
from io import BytesIO
from typing import Optional

import zstandard as zstd
from pypdf import PdfReader, PdfWriter

from fms.core.advisor import NON_COMPRESSIBLE_TYPES, PDF_CONTENT_TYPE
from fms.core.types import CompressionMethod, CompressionOutcome

logger = logging.getLogger(__name__)

MIN_COMPRESSION_SAVINGS = 0.15
MAX_COMPRESSION_SIZE = 100 * 1024 * 1024
COMPRESSION_LEVEL = zstd.MAX_COMPRESSION_LEVEL

# Document info entries dropped during container optimization
STRIPPED_PDF_FIELDS = ("/Author", "/Creator", "/Producer", "/Subject", "/Keywords")


class GenericCompressor:
    """
    Args:
        min_savings: Fractional savings needed to accept a compressed result
        max_file_size: Inputs larger than this are never compressed
        level: Zstandard compression level
    """

    def __init__(
        self,
        min_savings: float = MIN_COMPRESSION_SAVINGS,
        max_file_size: int = MAX_COMPRESSION_SIZE,
        level: int = COMPRESSION_LEVEL,
    ):
        self.min_savings = min_savings
        self.max_file_size = max_file_size
        self.level = level

    def is_worthwhile(self, original_size: int, compressed_size: int) -> bool:
        if compressed_size >= original_size:
            return False
        savings = 1.0 - compressed_size / original_size
        return savings >= self.min_savings

    def compress(self, data: bytes, content_type: Optional[str], file_name: str = "") -> CompressionOutcome:
        """
        Compress a payload according to its content type.

        Args:
            data: Raw file bytes
            content_type: Declared MIME type
            file_name: Used for log messages only

        Returns:
            CompressionOutcome; when not applied, ``data`` is returned as-is
        """
        if not data:
            return CompressionOutcome.not_applied(b"", "empty file")

        # Size bound is enforced before any work is done
        if len(data) > self.max_file_size:
            return CompressionOutcome.not_applied(data, "file too large")

        if content_type in NON_COMPRESSIBLE_TYPES:
            return CompressionOutcome.not_applied(data, "file type already compressed")

        try:
            if content_type == PDF_CONTENT_TYPE:
                return self._compress_pdf(data, file_name)
            return self._compress_generic(data)
        except Exception as e:
            logger.error(f"Error compressing file {file_name}: {e}", exc_info=True)
            return CompressionOutcome.not_applied(data, f"compression failed: {e}")

    def _compress_generic(self, data: bytes) -> CompressionOutcome:
        try:
            cctx = zstd.ZstdCompressor(level=self.level)
            compressed = cctx.compress(data)
        except zstd.ZstdError as e:
            logger.error(f"Error applying zstd compression: {e}")
            return CompressionOutcome.not_applied(data, "compression failed")

        if not self.is_worthwhile(len(data), len(compressed)):
            return CompressionOutcome.not_applied(data, "compression not beneficial")

        logger.debug(f"Generic compression: {len(data)} -> {len(compressed)} bytes")
        return CompressionOutcome(
            data=compressed,
            original_size=len(data),
            compressed_size=len(compressed),
            applied=True,
            method=CompressionMethod.GENERIC,
            metadata={"algorithm": "zstd", "level": str(self.level)},
        )

    def _optimize_pdf(self, data: bytes) -> tuple:
        reader = PdfReader(BytesIO(data))
        writer = PdfWriter()
        for page in reader.pages:
            writer.add_page(page)
        for page in writer.pages:
            page.compress_content_streams()

        # Pages are copied into a fresh document, so the catalog's XMP
        # metadata block is left behind; only descriptive info is rewritten.
        info = reader.metadata or {}
        kept = {key: value for key, value in info.items() if key not in STRIPPED_PDF_FIELDS}
        writer.metadata = kept if kept else None

        out = BytesIO()
        writer.write(out)
        return out.getvalue(), len(reader.pages)

    def _compress_pdf(self, data: bytes, file_name: str) -> CompressionOutcome:
        try:
            optimized, pages = self._optimize_pdf(data)
        except Exception as e:
            # Unparseable document: fall back to byte-level compression
            logger.error(f"Error compressing PDF {file_name}: {e}")
            return self._compress_generic(data)

        if not self.is_worthwhile(len(data), len(optimized)):
            return CompressionOutcome.not_applied(data, "container optimization not beneficial")

        return CompressionOutcome(
            data=optimized,
            original_size=len(data),
            compressed_size=len(optimized),
            applied=True,
            method=CompressionMethod.CONTAINER_OPTIMIZATION,
            metadata={"pages": str(pages), "technique": "pypdf optimization"},
        )

    def decompress(self, data: bytes, method: Optional[str]) -> bytes:
        """
        Reverse a compression step.

        Args:
            data: Stored payload
            method: Method tag recorded when the payload was compressed

        Returns:
            Original bytes for GENERIC payloads; CONTAINER_OPTIMIZATION and NONE
            payloads are already usable and come back unchanged, as does
            anything with an unknown tag
        """
        if data is None or method is None:
            return data

        tag = method.value if isinstance(method, CompressionMethod) else str(method).upper()

        if tag == CompressionMethod.GENERIC.value:
            try:
                return zstd.ZstdDecompressor().decompress(data)
            except zstd.ZstdError as e:
                logger.error(f"Error decompressing file with method {tag}: {e}")
                return data

        if tag in (CompressionMethod.CONTAINER_OPTIMIZATION.value, CompressionMethod.NONE.value):
            return data

        logger.warning(f"Unknown compression method: {method}")
        return data
