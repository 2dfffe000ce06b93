"""Submission handling for an intake session."""
import json
import logging
import threading
from dataclasses import dataclass
from typing import Tuple

import requests
from pydantic import ValidationError as PydanticValidationError

from shared.schemas import SubmitResponse
from ..services.completeness import evaluate_completeness


class SubmissionError(Exception):
    """A submission attempt failed; ``message`` is shown to the user as-is."""

    def __init__(self, message, status_code=None, errors=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors


class SubmissionNotReady(SubmissionError):
    """Raised instead of sending a request while slots or fields are missing."""


class SubmissionInProgress(SubmissionError):
    """Raised when submit is called while an earlier call is still running."""


@dataclass(frozen=True)
class SubmissionOutcome:
    participant_id: str
    images_count: int
    message: str = ''
    failed_images: Tuple[str, ...] = ()


class SubmissionCoordinator:
    """Packages slots and metadata, sends them once, and maps the result onto session state.

    At most one submission runs at a time per coordinator; there is no retry.
    """

    def __init__(self, api_service, session=None):
        self.api_service = api_service
        self.session = session
        self.logger = logging.getLogger(self.__class__.__name__)
        self._in_flight = threading.Lock()

    @property
    def is_submitting(self):
        return self._in_flight.locked()

    def submit_session(self):
        """Submit the slots and metadata held by the attached session."""
        return self.submit(self.session.slots, self.session.metadata)

    def submit(self, slots, metadata):
        """Send one submission to the intake endpoint.

        Args:
            slots: UploadSlotTracker or mapping of slot key -> SlotImage
            metadata: ParticipantMetadataForm or mapping of field name -> value

        Returns:
            SubmissionOutcome

        Raises:
            SubmissionNotReady: completeness check failed, nothing was sent
            SubmissionInProgress: another submission is still running
            SubmissionError: network failure, non-2xx status or success=false
        """
        completion = evaluate_completeness(slots, metadata)
        if not completion.submit_ready:
            missing = list(completion.missing_slots) + list(completion.missing_fields)
            raise SubmissionNotReady(f"Complete all sections to submit. Missing: {', '.join(missing)}")

        if not self._in_flight.acquire(blocking=False):
            raise SubmissionInProgress('A submission is already in progress')

        self._set_state(is_submitting=True, last_error=None)
        try:
            outcome = self._send(slots, metadata)
        except SubmissionError as e:
            self.logger.error(f"Submission failed: {e.message}")
            self._set_state(last_error=e.message)
            raise
        else:
            self.logger.info(f"Submission completed: participant {outcome.participant_id}, {outcome.images_count} images")
            self._set_state(submitted=True, participant_id=outcome.participant_id, images_count=outcome.images_count)
            return outcome
        finally:
            self._set_state(is_submitting=False)
            self._in_flight.release()

    def _send(self, slots, metadata):
        payload = metadata.as_payload() if hasattr(metadata, 'as_payload') else dict(metadata)
        images = slots.filled_slots() if hasattr(slots, 'filled_slots') else {k: v for k, v in slots.items() if v}
        files = {key: (image.filename, image.data, image.content_type) for key, image in images.items()}

        try:
            response = self.api_service.submit_participant(json.dumps(payload), files)
        except requests.exceptions.RequestException as e:
            raise SubmissionError(f"Submission failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            raise SubmissionError(f"Submission failed: unexpected response ({response.status_code})",
                                  status_code=response.status_code)

        if not response.ok or not body.get('success'):
            message = body.get('message') or f"Submission failed ({response.status_code})"
            raise SubmissionError(message, status_code=response.status_code, errors=body.get('errors'))

        try:
            result = SubmitResponse.model_validate(body)
        except PydanticValidationError as e:
            raise SubmissionError('Submission failed: malformed response from server',
                                  status_code=response.status_code) from e
        if not result.participant_id:
            raise SubmissionError('Submission failed: server did not return a participant id',
                                  status_code=response.status_code)

        return SubmissionOutcome(
            participant_id=result.participant_id,
            images_count=result.images_count,
            message=result.message,
            failed_images=tuple(result.failed_images),
        )

    def _set_state(self, **changes):
        if self.session is None:
            return
        for name, value in changes.items():
            setattr(self.session, name, value)
