"""Headless intake client.

Wires configuration, session state, the API service and the submission
coordinator together, and provides a command line driver for submitting a
participant from files on disk.
"""
import argparse
import json
import logging
import sys

from shared.enums import ImageSlot
from shared.validation import ValidationError
from .config_manager import ConfigManager
from .handlers.submission_handler import SubmissionCoordinator, SubmissionError
from .logging_config import setup_logging
from .services.api_service import APIService
from .services.image_service import ImageService
from .state import ParticipantMetadataForm, SessionState, UploadSlotTracker

logger = logging.getLogger(__name__)


class IntakeApp:
    """One intake session bound to a backend."""

    def __init__(self, config=None, api_service=None):
        self.config = config or ConfigManager()
        self.image_service = ImageService(
            max_image_bytes=self.config.max_image_bytes,
            preview_max_size=self.config.preview_max_size,
        )
        self.state = SessionState(
            slots=UploadSlotTracker(self.image_service),
            metadata=ParticipantMetadataForm(),
        )
        self.api_service = api_service or APIService(self.config.api_base_url, timeout=self.config.api_timeout)
        self.submission = SubmissionCoordinator(self.api_service, self.state)
        logger.info(f"Intake session ready (backend: {self.config.api_base_url})")

    def add_image(self, slot, path):
        self.state.slots.set_slot(slot, path)

    def remove_image(self, slot):
        self.state.slots.clear_slot(slot)

    def update_field(self, name, value):
        self.state.metadata.update_field(name, value)

    def progress(self):
        return self.state.completion()

    def submit(self):
        return self.submission.submit_session()

    def start_over(self):
        self.state.reset()


def format_progress(completion):
    """Render a CompletionState as a short multi-line summary."""
    lines = [
        f"Overall progress: {completion.completed_tasks}/{completion.total_tasks} tasks "
        f"({round(completion.progress_percentage)}% complete)",
        f"Photos: {completion.images_filled}/{completion.images_total} uploaded ({completion.image_status.value})",
        f"Information: {completion.fields_filled}/{completion.fields_total} fields completed ({completion.metadata_status.value})",
    ]
    if completion.missing_slots:
        labels = [ImageSlot(key).label for key in completion.missing_slots]
        lines.append(f"Missing photos: {', '.join(labels)}")
    if completion.missing_fields:
        lines.append(f"Missing fields: {', '.join(completion.missing_fields)}")
    lines.append('Ready to submit' if completion.submit_ready else 'Complete all sections to submit')
    return '\n'.join(lines)


def parse_image_argument(value):
    slot, sep, path = value.partition('=')
    if not sep or not path:
        raise argparse.ArgumentTypeError(f"Expected SLOT=PATH, got '{value}'")
    return slot.strip(), path.strip()


def main(argv=None):
    parser = argparse.ArgumentParser(description='Submit a research participant to the intake backend')
    parser.add_argument('--metadata', required=True, help='JSON file with participant fields (camelCase names)')
    parser.add_argument('--image', action='append', default=[], type=parse_image_argument,
                        metavar='SLOT=PATH', help=f"Photo for a slot ({', '.join(ImageSlot.keys())}); repeat per slot")
    parser.add_argument('--api-url', help='Backend base URL (default: INTAKE_CLIENT_API_BASE_URL)')
    parser.add_argument('--dry-run', action='store_true', help='Only report progress, do not submit')
    args = parser.parse_args(argv)

    setup_logging()
    config = ConfigManager(api_base_url=args.api_url) if args.api_url else ConfigManager()
    app = IntakeApp(config)

    try:
        with open(args.metadata, 'r') as f:
            metadata = json.load(f)
        if not isinstance(metadata, dict):
            raise ValidationError('metadata file must contain a JSON object')
        for name, value in metadata.items():
            app.update_field(name, value)
        for slot, path in args.image:
            app.add_image(slot, path)
    except (OSError, ValueError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    completion = app.progress()
    print(format_progress(completion))
    if args.dry_run:
        return 0 if completion.submit_ready else 1
    if not completion.submit_ready:
        return 1

    try:
        outcome = app.submit()
    except SubmissionError as e:
        print(f"Submission failed: {e.message}", file=sys.stderr)
        return 1

    print(f"Submission successful. Participant ID: {outcome.participant_id} ({outcome.images_count} images)")
    if outcome.failed_images:
        print(f"Images not stored: {', '.join(outcome.failed_images)}", file=sys.stderr)
    return 0
