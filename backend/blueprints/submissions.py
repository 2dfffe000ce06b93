"""Submission blueprint: the intake endpoint."""
from flask import Blueprint, current_app, jsonify, request
import logging
from werkzeug.exceptions import HTTPException
from shared.schemas import SubmitResponse
from shared.validation import MAX_IMAGE_BYTES
from ..exceptions import IntakeError
from ..models import db
from ..services.image_storage import get_image_storage
from ..services.intake_service import IntakeService
from ..utils import handle_api_exception

logger = logging.getLogger(__name__)

bp = Blueprint('submissions', __name__, url_prefix='/api')


@bp.route('/submit', methods=['POST'])
def submit_participant():
    """Accept participantData plus up to five slot-named image parts."""
    logger.info("Received submission request")
    try:
        service = IntakeService(
            get_image_storage(),
            max_image_bytes=current_app.config.get('MAX_IMAGE_BYTES', MAX_IMAGE_BYTES),
        )
        # File parts are checked before the metadata is looked at
        uploads = service.collect_uploads(request.files)
        result = service.submit(request.form.get('participantData'), uploads)
    except (IntakeError, HTTPException):
        # Rendered by the app-level handlers (RequestEntityTooLarge becomes FileTooLarge)
        raise
    except Exception as e:
        db.session.rollback()
        return handle_api_exception(e, "submit participant data")

    response = SubmitResponse(
        success=True,
        participant_id=result.participant.id,
        message='Data submitted successfully',
        images_count=len(result.images),
        failed_images=result.failed_images,
    )
    body = response.model_dump(mode='json', by_alias=True)
    if not result.failed_images:
        body.pop('failedImages')
    return jsonify(body)
