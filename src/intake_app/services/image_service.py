"""Image service for reading photographs and building slot previews."""
import logging
import os
from dataclasses import dataclass, field
from functools import cached_property

from shared.utils import build_preview, guess_content_type
from shared.validation import MAX_IMAGE_BYTES, Validator


@dataclass
class SlotImage:
    """An image bound to an upload slot: raw bytes plus a lazily rendered preview."""
    filename: str
    data: bytes = field(repr=False)
    content_type: str
    preview_max_size: int = 200

    @property
    def size(self):
        return len(self.data)

    @cached_property
    def preview(self):
        """Inline data: URI used to render the slot."""
        return build_preview(self.data, self.content_type, max_size=self.preview_max_size)


class ImageService:
    """Service for handling photo file I/O and client-side checks."""

    def __init__(self, max_image_bytes=MAX_IMAGE_BYTES, preview_max_size=200):
        self.max_image_bytes = max_image_bytes
        self.preview_max_size = preview_max_size
        self.logger = logging.getLogger(self.__class__.__name__)

    def load_image(self, path, content_type=None):
        """Read an image file from disk into a SlotImage."""
        path = os.fspath(path)
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as e:
            self.logger.error(f"Failed to read image file {path}: {e}")
            raise

        filename = os.path.basename(path)
        return SlotImage(
            filename=filename,
            data=data,
            content_type=content_type or guess_content_type(filename),
            preview_max_size=self.preview_max_size,
        )

    def check_image(self, image):
        """Apply the same type and size rules the intake endpoint enforces."""
        return Validator.validate_image_upload(image.filename, image.content_type, image.size, self.max_image_bytes)
