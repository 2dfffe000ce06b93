"""On-demand integrity checks for stored participant images."""

import logging
from shared.schemas import ImageIntegrityReport
from shared.utils import compute_image_hash
from ..exceptions import StorageFailure
from ..models import ParticipantImage


logger = logging.getLogger(__name__)


def check_image(image, storage):
    """Re-read one stored image and compare it against its recorded size and hash."""
    report = ImageIntegrityReport(
        image_id=image.id,
        participant_id=image.participant_id,
        image_type=image.image_type,
        filename=image.filename,
        exists=False,
    )
    if not storage.exists(image.filename):
        report.error = 'Stored image not found'
        return report

    report.exists = True
    try:
        data = storage.read(image.filename)
    except StorageFailure as e:
        report.error = str(e)
        return report

    report.size_matches = len(data) == image.file_size
    # Rows without a recorded hash only get the size check
    report.hash_matches = not image.hash_value or compute_image_hash(data) == image.hash_value
    return report


def check_images(storage, participant_id=None):
    """Check every stored image, or only those of one participant.

    Returns:
        list[ImageIntegrityReport]
    """
    query = ParticipantImage.query
    if participant_id:
        query = query.filter_by(participant_id=participant_id)
    images = query.order_by(ParticipantImage.uploaded_at).all()
    logger.info(f"Checking integrity for {len(images)} images")

    reports = [check_image(image, storage) for image in images]
    issues = [r for r in reports if not (r.exists and r.size_matches and r.hash_matches)]
    if issues:
        logger.warning(f"Image integrity check found {len(issues)} issues")
    else:
        logger.info("Image integrity check completed: all images passed")
    return reports
