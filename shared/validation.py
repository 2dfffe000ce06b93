"""Input validation utilities."""
import html
import re
import bleach
from shared.enums import ImageSlot

# Per-file ceiling for uploaded photographs
MAX_IMAGE_BYTES = 10 * 1024 * 1024


class ValidationError(Exception):
    """Raised when input validation fails."""
    pass


class Validator:
    """Input validation utilities."""

    # Image types that can carry script; never accepted as photographs
    BLOCKED_IMAGE_TYPES = frozenset({'image/svg+xml'})

    # Storage keys are built from uuid/slot/filename parts only
    STORAGE_KEY_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._-]*(/[A-Za-z0-9][A-Za-z0-9._-]*)*$')

    @staticmethod
    def validate_slot_key(key):
        """Validate an image slot key and return it as an ImageSlot."""
        if isinstance(key, ImageSlot):
            return key
        try:
            return ImageSlot(key)
        except ValueError:
            raise ValidationError(f"Unknown image slot '{key}'. Expected one of: {', '.join(ImageSlot.keys())}")

    @staticmethod
    def is_image_content_type(content_type):
        """Return True for image/* content types other than SVG."""
        if not content_type:
            return False
        content_type = content_type.split(';')[0].strip().lower()
        return content_type.startswith('image/') and content_type not in Validator.BLOCKED_IMAGE_TYPES

    @staticmethod
    def validate_image_upload(filename, content_type, size_bytes, max_bytes=MAX_IMAGE_BYTES):
        """Validate an uploaded photograph's declared type and size."""
        if not Validator.is_image_content_type(content_type):
            raise ValidationError(f"Only image files are allowed: '{filename}' has content type '{content_type}'")
        if size_bytes > max_bytes:
            raise ValidationError(f"File too large: '{filename}' exceeds {max_bytes // (1024 * 1024)}MB")
        return True

    @staticmethod
    def validate_storage_key(key):
        """Reject storage keys that could escape the storage root."""
        if not key or '..' in key or not Validator.STORAGE_KEY_PATTERN.match(key):
            raise ValidationError(f"Invalid storage key: {key!r}")
        return key

    @staticmethod
    def sanitize_html(text):
        """Secure HTML sanitization using bleach library.

        Free-text answers never need markup, so every tag is stripped. The
        result is plain text: entities bleach escapes are decoded again, so
        "Trinidad & Tobago" is stored as typed.
        """
        if not text or '<' not in text:
            return text

        return html.unescape(bleach.clean(text, tags=[], attributes={}, strip=True))


def sanitize_html(text: str) -> str:
    """Module-level shortcut for Validator.sanitize_html."""
    return Validator.sanitize_html(text)
