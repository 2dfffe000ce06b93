"""Completeness evaluation for an intake session.

Pure functions of (slots, metadata); safe to call on every state change.
"""
from dataclasses import dataclass
from typing import Tuple

from shared.enums import CompletionStatus, ImageSlot
from shared.schemas import required_fields_for
from shared.utils import is_filled


@dataclass(frozen=True)
class CompletionState:
    images_filled: int
    images_total: int
    fields_filled: int
    fields_total: int
    missing_slots: Tuple[str, ...] = ()
    missing_fields: Tuple[str, ...] = ()

    @property
    def submit_ready(self):
        return self.images_filled == self.images_total and self.fields_filled == self.fields_total

    @property
    def image_status(self):
        return step_status(self.images_filled, self.images_total)

    @property
    def metadata_status(self):
        return step_status(self.fields_filled, self.fields_total)

    @property
    def completed_tasks(self):
        return self.images_filled + self.fields_filled

    @property
    def total_tasks(self):
        return self.images_total + self.fields_total

    @property
    def progress_percentage(self):
        if not self.total_tasks:
            return 100.0
        return self.completed_tasks / self.total_tasks * 100


def step_status(completed, total):
    if completed == total:
        return CompletionStatus.COMPLETE
    if completed > 0:
        return CompletionStatus.PARTIAL
    return CompletionStatus.PENDING


def _as_mapping(value, method):
    # Accept either the session objects or plain dicts
    return getattr(value, method)() if hasattr(value, method) else dict(value or {})


def evaluate_completeness(slots, metadata):
    """Compute how much of the submission is filled in.

    Args:
        slots: UploadSlotTracker or mapping of slot key -> image (or None)
        metadata: ParticipantMetadataForm or mapping of field name -> value

    Returns:
        CompletionState
    """
    slot_map = _as_mapping(slots, 'as_dict')
    field_map = _as_mapping(metadata, 'as_payload')

    missing_slots = tuple(key for key in ImageSlot.keys() if not slot_map.get(key))
    required = required_fields_for(field_map)
    missing_fields = tuple(name for name in required if not is_filled(field_map.get(name)))

    return CompletionState(
        images_filled=len(ImageSlot) - len(missing_slots),
        images_total=len(ImageSlot),
        fields_filled=len(required) - len(missing_fields),
        fields_total=len(required),
        missing_slots=missing_slots,
        missing_fields=missing_fields,
    )
