"""Downsample oversized raster images before they are embedded in a PDF.

Public functions:
    read_image_info(path) -> (width, height, mime_type)
    optimize_image_for_pdf(path, mime_type, width, height) -> OptimizedImage
"""
import base64
import io
import logging
import threading
import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from document_pdf_gallery.services.errors import ConversionMethodFailed

logger = logging.getLogger(__name__)

MAX_WIDTH = 2000
MAX_HEIGHT = 2000
# Pixel ceiling for a full decode; an 8-bit grey image this size needs about 500 MB
MAX_DECODE_PIXELS = 500_000_000

# Pillow checks image size against a module-level limit inside Image.open
_PIXEL_LIMIT_LOCK = threading.Lock()

# mime type -> (Pillow format, save options)
_ENCODERS = {
    'image/jpeg': ('JPEG', {'quality': 90}),
    'image/png': ('PNG', {'compress_level': 8}),
    'image/gif': ('GIF', {}),
    'image/webp': ('WEBP', {'quality': 90}),
    'image/bmp': ('BMP', {}),
    'image/x-ms-bmp': ('BMP', {}),
}
_ALPHA_MIME_TYPES = {'image/png', 'image/gif', 'image/webp'}


@dataclass
class OptimizedImage:
    data: str
    mime_type: str
    width: int
    height: int
    resampled: bool = False

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


def _open_image(path: str, max_pixels: Optional[int] = MAX_DECODE_PIXELS) -> Image.Image:
    """Image.open with our own size ceiling instead of Pillow's default (None disables it).

    Pillow rejects images above twice its limit, so the limit is set to half the ceiling.
    """
    with _PIXEL_LIMIT_LOCK, warnings.catch_warnings():
        warnings.simplefilter('ignore', Image.DecompressionBombWarning)
        previous = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = max_pixels // 2 if max_pixels else None
        try:
            return Image.open(path)
        finally:
            Image.MAX_IMAGE_PIXELS = previous


def read_image_info(path: str) -> Tuple[int, int, str]:
    """Read dimensions and MIME type from the image header without decoding pixels."""
    try:
        with _open_image(path, max_pixels=None) as img:
            width, height = img.size
            mime_type = Image.MIME.get(img.format or '', 'application/octet-stream')
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise ConversionMethodFailed(f"Invalid image file: {e}") from e
    return width, height, mime_type


def fit_within(width: int, height: int, max_width: int = MAX_WIDTH, max_height: int = MAX_HEIGHT) -> Tuple[int, int]:
    ratio = min(max_width / width, max_height / height)
    return max(1, int(width * ratio)), max(1, int(height * ratio))


def _encode_original(path: str, mime_type: str, width: int, height: int) -> OptimizedImage:
    with open(path, 'rb') as f:
        raw = f.read()
    return OptimizedImage(base64.b64encode(raw).decode('ascii'), mime_type, width, height, resampled=False)


def _prepare_mode(img: Image.Image, mime_type: str) -> Image.Image:
    has_alpha = img.mode in ('RGBA', 'LA', 'PA') or (img.mode == 'P' and 'transparency' in img.info)
    if mime_type in _ALPHA_MIME_TYPES and has_alpha:
        return img.convert('RGBA')
    if img.mode == '1':
        return img.convert('L')
    if img.mode not in ('RGB', 'L'):
        return img.convert('RGB')
    return img


def optimize_image_for_pdf(path: str, mime_type: str, width: int, height: int,
                           max_width: int = MAX_WIDTH, max_height: int = MAX_HEIGHT) -> OptimizedImage:
    """Return the image base64-encoded, resampled to fit max_width x max_height when larger."""
    if width <= max_width and height <= max_height:
        return _encode_original(path, mime_type, width, height)

    new_width, new_height = fit_within(width, height, max_width, max_height)
    fmt, save_options = _ENCODERS.get(mime_type, ('JPEG', {'quality': 90}))
    out_mime = mime_type if mime_type in _ENCODERS else 'image/jpeg'

    try:
        with _open_image(path) as img:
            if img.format == 'JPEG':
                # Let the decoder scale down while reading to bound memory
                img.draft('RGB', (new_width, new_height))
            img = _prepare_mode(img, out_mime)
            # reducing_gap box-reduces first so Lanczos runs on a smaller image
            resized = img.resize((new_width, new_height), Image.Resampling.LANCZOS, reducing_gap=3.0)
            buffer = io.BytesIO()
            resized.save(buffer, format=fmt, **save_options)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        logger.warning("Could not resample %s (%s); embedding original bytes", path, e)
        return _encode_original(path, mime_type, width, height)

    logger.debug("Resampled %s from %sx%s to %sx%s", path, width, height, new_width, new_height)
    return OptimizedImage(base64.b64encode(buffer.getvalue()).decode('ascii'), out_mime,
                          new_width, new_height, resampled=True)
