"""Session state for one intake submission.

Slots and metadata live here until submission; nothing is shared between
sessions.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from shared.enums import ImageSlot
from shared.schemas import METADATA_FIELDS
from shared.validation import Validator, ValidationError
from .services.completeness import evaluate_completeness
from .services.image_service import ImageService, SlotImage

logger = logging.getLogger(__name__)


class UploadSlotTracker:
    """Holds at most one image per required slot."""

    def __init__(self, image_service=None):
        self.image_service = image_service or ImageService()
        self._slots = {slot: None for slot in ImageSlot}

    def set_slot(self, key, file):
        """Bind a file to a slot, replacing any previous image.

        ``file`` may be a SlotImage or a path; ``None`` is ignored.
        """
        slot = Validator.validate_slot_key(key)
        if file is None:
            return

        image = file if isinstance(file, SlotImage) else self.image_service.load_image(file)
        self.image_service.check_image(image)

        # The slot only counts as filled once its preview exists
        preview = image.preview
        logger.debug(f"Preview ready for {slot.value} ({len(preview)} chars)")
        self._slots[slot] = image
        logger.info(f"Image uploaded for {slot.value}: {image.filename}")

    def clear_slot(self, key):
        slot = Validator.validate_slot_key(key)
        self._slots[slot] = None
        logger.info(f"Image removed for {slot.value}")

    def get(self, key):
        return self._slots[Validator.validate_slot_key(key)]

    def is_filled(self, key):
        return self.get(key) is not None

    def filled_slots(self):
        """Filled slots keyed by slot value, in slot order."""
        return {slot.value: image for slot, image in self._slots.items() if image is not None}

    def as_dict(self):
        return {slot.value: image for slot, image in self._slots.items()}

    def reset(self):
        for slot in self._slots:
            self._slots[slot] = None


class ParticipantMetadataForm:
    """Partial participant record keyed by wire field name."""

    def __init__(self, data=None):
        self._data = {}
        for name, value in (data or {}).items():
            self.update_field(name, value)

    def update_field(self, name, value):
        if name not in METADATA_FIELDS:
            raise ValidationError(f"Unknown participant field '{name}'")
        self._data[name] = '' if value is None else str(value)
        logger.debug(f"Updated {name}")

    def get(self, name, default=None):
        return self._data.get(name, default)

    def as_payload(self):
        return dict(self._data)

    def reset(self):
        self._data.clear()


@dataclass
class SessionState:
    """State of one submission session."""
    slots: UploadSlotTracker = field(default_factory=UploadSlotTracker)
    metadata: ParticipantMetadataForm = field(default_factory=ParticipantMetadataForm)

    # Submission state
    is_submitting: bool = False
    submitted: bool = False
    participant_id: Optional[str] = None
    images_count: int = 0
    last_error: Optional[str] = None

    def completion(self):
        return evaluate_completeness(self.slots, self.metadata)

    def reset(self):
        """Start a new submission after a successful one."""
        self.slots.reset()
        self.metadata.reset()
        self.is_submitting = False
        self.submitted = False
        self.participant_id = None
        self.images_count = 0
        self.last_error = None
