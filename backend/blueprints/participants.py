"""Participants blueprint: read-only access to submissions."""
from flask import Blueprint, jsonify
import logging
from sqlalchemy.exc import SQLAlchemyError
from shared.schemas import (
    ParticipantResponse, ParticipantImageResponse,
    ParticipantListResponse, ParticipantDetailResponse
)
from ..exceptions import NotFound
from ..models import db, Participant, ParticipantImage
from ..utils import handle_api_exception

logger = logging.getLogger(__name__)

bp = Blueprint('participants', __name__, url_prefix='/api')


@bp.route('/participants', methods=['GET'])
def get_participants():
    """Get all participants (for admin/research purposes)."""
    try:
        participants = Participant.query.order_by(Participant.submitted_at).all()
    except SQLAlchemyError as e:
        return handle_api_exception(e, "fetch participants")

    response = ParticipantListResponse(
        count=len(participants),
        participants=[ParticipantResponse.model_validate(p) for p in participants],
    )
    return jsonify(response.model_dump(mode='json', by_alias=True))


@bp.route('/participants/<participant_id>', methods=['GET'])
def get_participant(participant_id):
    """Get one participant with its images."""
    try:
        participant = db.session.get(Participant, participant_id)
        if participant is None:
            raise NotFound('Participant not found')
        images = (ParticipantImage.query
                  .filter_by(participant_id=participant_id)
                  .order_by(ParticipantImage.uploaded_at)
                  .all())
    except SQLAlchemyError as e:
        return handle_api_exception(e, "fetch participant data")

    response = ParticipantDetailResponse(
        participant=ParticipantResponse.model_validate(participant),
        images=[ParticipantImageResponse.model_validate(i) for i in images],
    )
    return jsonify(response.model_dump(mode='json', by_alias=True))
