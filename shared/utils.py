"""Shared utility functions for the Participant Intake application.

This module contains utility functions used across both backend and client
components of the Participant Intake application.
"""

import base64
import hashlib
import io
import logging
import mimetypes
from functools import wraps
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


class CorruptedImageError(Exception):
    """Raised when image data is corrupted and cannot be processed."""
    pass


def handle_image_errors(func):
    """Decorator to handle image processing errors consistently.

    Converts decoding failures to CorruptedImageError. Handles logging automatically.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        image_data = kwargs.get('image_data')
        if image_data is None and args:
            image_data = args[0]

        try:
            return func(*args, **kwargs)
        except UnidentifiedImageError as e:
            logger.warning(f"Corrupted or unsupported image format ({len(image_data or b'')} bytes): {e}")
            raise CorruptedImageError(f"Corrupted or unsupported image format: {e}") from e
        except (OSError, ValueError) as e:
            logger.warning(f"Error processing image ({len(image_data or b'')} bytes): {e}")
            raise CorruptedImageError(f"Error processing image: {e}") from e

    return wrapper


# Image hash algorithm constant - always SHA256
IMAGE_HASH_ALGO = 'sha256'


def compute_image_hash(image_data):
    """Compute SHA256 hash of image data for integrity verification.

    Args:
        image_data: Raw bytes or a file-like object

    Returns:
        str: Hexadecimal hash string (64 characters)

    Raises:
        TypeError: If input type is invalid
    """
    hasher = hashlib.new(IMAGE_HASH_ALGO)

    if isinstance(image_data, (bytes, bytearray, memoryview)):
        hasher.update(image_data)
    elif hasattr(image_data, 'read'):
        while chunk := image_data.read(8192):
            hasher.update(chunk)
    else:
        raise TypeError(f"compute_image_hash expected bytes or file-like object, got {type(image_data).__name__}")

    return hasher.hexdigest()


THUMBNAIL_MIME_TYPES = {'JPEG': 'image/jpeg', 'PNG': 'image/png', 'WEBP': 'image/webp'}


@handle_image_errors
def generate_thumbnail(image_data, max_size=200):
    """Generate a thumbnail from image data while maintaining aspect ratio.

    Preserves original format for PNG/WEBP to maintain transparency, otherwise uses JPEG.

    Args:
        image_data (bytes): Raw image data bytes
        max_size (int, optional): Maximum dimension for thumbnail. Defaults to 200

    Returns:
        tuple: (thumbnail bytes, MIME type of the thumbnail)

    Raises:
        CorruptedImageError: When image data is corrupted and cannot be processed.
    """
    img = Image.open(io.BytesIO(image_data))
    original_format = img.format

    img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

    save_format = original_format if original_format in ('PNG', 'WEBP') else 'JPEG'

    # Handle Alpha channel for JPEG
    if save_format == 'JPEG' and img.mode not in ('RGB', 'L'):
        img = img.convert('RGB')

    thumb_buffer = io.BytesIO()
    img.save(thumb_buffer, format=save_format, quality=85)
    return thumb_buffer.getvalue(), THUMBNAIL_MIME_TYPES[save_format]


def to_data_uri(data, content_type):
    """Encode bytes as an inline data: URI."""
    encoded = base64.b64encode(data).decode('ascii')
    return f"data:{content_type};base64,{encoded}"


def build_preview(image_data, content_type, max_size=200):
    """Build an inline preview for an image.

    Returns a data: URI of a thumbnail, or of the raw bytes when the
    image cannot be decoded.
    """
    try:
        thumb_data, thumb_type = generate_thumbnail(image_data, max_size=max_size)
        return to_data_uri(thumb_data, thumb_type)
    except CorruptedImageError:
        return to_data_uri(image_data, content_type or 'application/octet-stream')


def guess_content_type(filename, default='application/octet-stream'):
    """Guess a MIME type from a filename."""
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or default


def is_filled(value):
    """A form value counts as filled iff it is non-empty after trimming."""
    if value is None:
        return False
    return str(value).strip() != ''
