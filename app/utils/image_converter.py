"""
Image conversion utility for converting gallery images to WebP before upload.
Cloudinary still applies its own resize/quality transforms; this only trims the bytes sent.
"""
import io
import logging
from dataclasses import dataclass
from typing import Optional
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_WEBP_QUALITY = 85
DEFAULT_WEBP_METHOD = 6    # Compression method (0-6, higher = better compression but slower)
MAX_DIMENSION = 2400       # Twice the 1200px delivery width


@dataclass
class ConversionResult:
    content: bytes
    content_type: str
    converted: bool


def convert_to_webp(
    image_bytes: bytes,
    content_type: str,
    quality: int = DEFAULT_WEBP_QUALITY,
    max_dimension: Optional[int] = MAX_DIMENSION,
) -> ConversionResult:
    """
    Convert image bytes to WebP when that makes them smaller.

    The original bytes are kept when the image is already WebP, is animated,
    cannot be decoded, or when the WebP output would not be smaller.
    """
    original = ConversionResult(image_bytes, content_type, False)
    try:
        image = Image.open(io.BytesIO(image_bytes))

        if image.format == 'WEBP':
            logger.debug("Image is already WebP format, skipping conversion")
            return original
        if getattr(image, "is_animated", False):
            logger.debug(f"Animated {image.format} image, skipping conversion")
            return original

        # WebP keeps alpha, everything else goes to RGB
        if image.mode == 'P':
            image = image.convert('RGBA')
        elif image.mode not in ('RGB', 'RGBA', 'LA'):
            image = image.convert('RGB')

        if max_dimension:
            width, height = image.size
            if width > max_dimension or height > max_dimension:
                image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
                logger.info(f"Downscaled image from {width}x{height} to {image.size[0]}x{image.size[1]}")

        buffer = io.BytesIO()
        image.save(buffer, format='WEBP', quality=quality, method=DEFAULT_WEBP_METHOD)
        webp_bytes = buffer.getvalue()

    except UnidentifiedImageError as e:
        logger.warning(f"Cannot identify image format: {str(e)}")
        return original
    except OSError as e:
        logger.error(f"Error converting image to WebP: {str(e)}", exc_info=True)
        return original

    if len(webp_bytes) >= len(image_bytes):
        logger.debug("WebP conversion did not reduce size, using original")
        return original

    logger.info(f"Converted image to WebP: {len(image_bytes):,} bytes → {len(webp_bytes):,} bytes")
    return ConversionResult(webp_bytes, "image/webp", True)
