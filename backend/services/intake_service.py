"""Intake service: validates a submission and persists the participant and its images."""

import json
import logging
import mimetypes
import re
import secrets
import time
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import List
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.utils import secure_filename
from shared.enums import ImageSlot
from shared.schemas import ParticipantCreate, ParticipantImageCreate
from shared.utils import compute_image_hash
from shared.validation import MAX_IMAGE_BYTES, Validator, ValidationError
from ..exceptions import FileTooLarge, InternalError, MalformedInput, StorageFailure, UnsupportedFileType, ValidationFailed
from ..models import db, Participant, ParticipantImage
from ..utils import participant_exists, pydantic_errors_to_fields


logger = logging.getLogger(__name__)

INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')
READ_CHUNK_SIZE = 8192


@dataclass
class UploadedImage:
    """One accepted file part, read fully into memory."""
    slot: ImageSlot
    original_name: str
    content_type: str
    data: bytes

    @property
    def size(self):
        return len(self.data)


@dataclass
class IntakeResult:
    participant: Participant
    images: List[ParticipantImage] = field(default_factory=list)
    failed_images: List[str] = field(default_factory=list)


class IntakeService:
    """Runs one submission: file checks, metadata validation, then persistence.

    The participant row is committed before any image is stored. Each image is
    stored and recorded on its own; a failure for one image is logged and
    reported in ``failed_images`` without rolling back the participant or the
    images already recorded.
    """

    def __init__(self, storage, max_image_bytes=MAX_IMAGE_BYTES):
        self.storage = storage
        self.max_image_bytes = max_image_bytes

    # -- step 0: file parts -------------------------------------------------

    def collect_uploads(self, files):
        """Check every file part and read it, in attachment order.

        Args:
            files: werkzeug MultiDict of FileStorage objects (``request.files``)

        Returns:
            list[UploadedImage]

        Raises:
            MalformedInput: unknown or repeated slot field, or empty file
            UnsupportedFileType: non-image content type
            FileTooLarge: file larger than the per-file ceiling
        """
        uploads = []
        seen = set()
        for field_name, file_storage in files.items(multi=True):
            try:
                slot = Validator.validate_slot_key(field_name)
            except ValidationError as e:
                raise MalformedInput(f"Unexpected file field '{field_name}'") from e
            if slot in seen:
                raise MalformedInput(f"Only one file is allowed for '{slot.value}'")
            seen.add(slot)

            original_name = file_storage.filename or ''
            if not original_name:
                # Browsers send an empty part for an untouched file input
                continue

            content_type = file_storage.mimetype or ''
            if not Validator.is_image_content_type(content_type):
                raise UnsupportedFileType(
                    f"Only image files are allowed: '{original_name}' has content type '{content_type or 'unknown'}'"
                )

            data = self._read_limited(file_storage, original_name)
            if not data:
                raise MalformedInput(f"Empty image file for '{slot.value}'")

            uploads.append(UploadedImage(slot=slot, original_name=original_name,
                                         content_type=content_type, data=data))
        return uploads

    def _read_limited(self, file_storage, original_name):
        chunks = []
        total = 0
        while True:
            chunk = file_storage.stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if total > self.max_image_bytes:
                raise FileTooLarge(
                    f"File too large: '{original_name}'. Maximum size: {self.max_image_bytes // (1024 * 1024)}MB"
                )
            chunks.append(chunk)
        return b''.join(chunks)

    # -- steps 1-3: metadata ------------------------------------------------

    @staticmethod
    def parse_metadata(raw):
        """Parse the participantData JSON blob into a dict."""
        if raw is None or raw == '':
            raw = '{}'
        try:
            metadata = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise MalformedInput('participantData is not valid JSON') from e
        if not isinstance(metadata, dict):
            raise MalformedInput('participantData must be a JSON object')
        return metadata

    @staticmethod
    def coerce_age(metadata):
        """Convert a numeric age string to int; anything else is left for schema validation."""
        age = metadata.get('age')
        if isinstance(age, str) and INTEGER_PATTERN.match(age.strip()):
            metadata['age'] = int(age.strip())
        return metadata

    @staticmethod
    def validate_metadata(metadata):
        try:
            return ParticipantCreate.model_validate(metadata)
        except PydanticValidationError as e:
            errors = pydantic_errors_to_fields(e)
            raise ValidationFailed('Invalid data provided', errors=errors) from e

    # -- steps 4-5: persistence ---------------------------------------------

    def create_participant(self, validated):
        participant = Participant(**validated.model_dump())
        try:
            db.session.add(participant)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to create participant: {e}", exc_info=True)
            raise InternalError('Failed to save participant') from e
        logger.info(f"Created participant {participant.id}",
                    extra={'extra_fields': {'participant_id': participant.id}})
        return participant

    @staticmethod
    def build_storage_key(participant_id, upload):
        """Key images as ``<participant-id>/<image-type>/<generated filename>``."""
        extension = PurePosixPath(secure_filename(upload.original_name)).suffix.lower()
        if not extension:
            extension = mimetypes.guess_extension(upload.content_type) or ''
        unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}"
        filename = f"{upload.slot.value}-{unique_suffix}{extension}"
        return f"{participant_id}/{upload.slot.value}/{filename}"

    def store_image(self, participant, upload):
        """Store one image's bytes, then record its ParticipantImage row."""
        key = self.build_storage_key(participant.id, upload)
        reference = self.storage.save(key, upload.data, upload.content_type)

        row_data = ParticipantImageCreate(
            participant_id=participant.id,
            image_type=upload.slot,
            filename=reference,
            original_name=upload.original_name,
            mime_type=upload.content_type,
            file_size=upload.size,
            hash_value=compute_image_hash(upload.data),
        )
        image = ParticipantImage(**row_data.model_dump())
        try:
            db.session.add(image)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Stored {reference} but failed to record it: {e}")
            raise StorageFailure(f"Failed to record image {upload.slot.value}") from e
        return image

    def submit(self, raw_metadata, uploads):
        """Validate metadata, create the participant and store each upload in order.

        Args:
            raw_metadata (str): participantData JSON string
            uploads (list[UploadedImage]): output of collect_uploads

        Returns:
            IntakeResult
        """
        metadata = self.coerce_age(self.parse_metadata(raw_metadata))
        validated = self.validate_metadata(metadata)
        participant = self.create_participant(validated)

        result = IntakeResult(participant=participant)
        if uploads and not participant_exists(participant.id):
            raise InternalError(f"Participant {participant.id} missing after commit")

        for upload in uploads:
            logger.info(f"Processing image {upload.slot.value} for participant {participant.id}", extra={
                'extra_fields': {'participant_id': participant.id, 'image_type': upload.slot.value,
                                 'file_size': upload.size},
            })
            try:
                result.images.append(self.store_image(participant, upload))
            except (StorageFailure, PydanticValidationError) as e:
                logger.error(f"Image {upload.slot.value} for participant {participant.id} failed: {e}", exc_info=True)
                result.failed_images.append(upload.slot.value)

        logger.info(f"Saved {len(result.images)} images for participant {participant.id}"
                    + (f", {len(result.failed_images)} failed" if result.failed_images else ""))
        return result
