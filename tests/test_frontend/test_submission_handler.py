"""Tests for the submission coordinator."""
import json
import pytest
import requests
from unittest.mock import Mock
from shared.enums import ImageSlot
from src.intake_app.handlers.submission_handler import (
    SubmissionCoordinator, SubmissionError, SubmissionInProgress, SubmissionNotReady
)
from src.intake_app.services.image_service import SlotImage
from src.intake_app.state import SessionState


def mock_response(status_code=200, body=None):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session(valid_metadata, png_bytes):
    session = SessionState()
    for key in ImageSlot.keys():
        session.slots.set_slot(key, SlotImage(f'{key}.png', png_bytes, 'image/png'))
    for name, value in valid_metadata.items():
        session.metadata.update_field(name, value)
    return session


@pytest.fixture
def api_service():
    service = Mock()
    service.submit_participant.return_value = mock_response(200, {
        'success': True, 'participantId': 'pid-1', 'message': 'Data submitted successfully', 'imagesCount': 5,
    })
    return service


def test_successful_submission(session, api_service, png_bytes):
    coordinator = SubmissionCoordinator(api_service, session)
    outcome = coordinator.submit_session()

    assert outcome.participant_id == 'pid-1'
    assert outcome.images_count == 5
    assert outcome.failed_images == ()
    assert session.submitted
    assert session.participant_id == 'pid-1'
    assert session.images_count == 5
    assert not session.is_submitting
    assert not coordinator.is_submitting

    participant_json, files = api_service.submit_participant.call_args.args
    payload = json.loads(participant_json)
    assert payload['age'] == '28'
    assert payload['hairType'] == 'curly'
    assert list(files) == ImageSlot.keys()
    assert files['skin1'] == ('skin1.png', png_bytes, 'image/png')


def test_not_ready_makes_no_request(session, api_service):
    session.slots.clear_slot('hair2')
    session.metadata.update_field('country', '  ')
    coordinator = SubmissionCoordinator(api_service, session)

    with pytest.raises(SubmissionNotReady) as exc_info:
        coordinator.submit_session()
    assert 'hair2' in exc_info.value.message
    assert 'country' in exc_info.value.message
    api_service.submit_participant.assert_not_called()
    assert not session.submitted


def test_submission_in_progress(session, api_service):
    coordinator = SubmissionCoordinator(api_service, session)
    coordinator._in_flight.acquire()
    try:
        with pytest.raises(SubmissionInProgress):
            coordinator.submit_session()
    finally:
        coordinator._in_flight.release()
    api_service.submit_participant.assert_not_called()


def test_validation_error_from_server(session, api_service):
    api_service.submit_participant.return_value = mock_response(400, {
        'success': False, 'message': 'Invalid data provided',
        'errors': [{'field': 'age', 'message': 'Input should be a valid integer'}],
    })
    coordinator = SubmissionCoordinator(api_service, session)

    with pytest.raises(SubmissionError) as exc_info:
        coordinator.submit_session()
    assert exc_info.value.message == 'Invalid data provided'
    assert exc_info.value.status_code == 400
    assert exc_info.value.errors[0]['field'] == 'age'
    assert session.last_error == 'Invalid data provided'
    assert not session.submitted
    assert not session.is_submitting


def test_network_failure(session, api_service):
    api_service.submit_participant.side_effect = requests.exceptions.ConnectionError('refused')
    coordinator = SubmissionCoordinator(api_service, session)

    with pytest.raises(SubmissionError, match='refused'):
        coordinator.submit_session()
    assert api_service.submit_participant.call_count == 1
    assert not coordinator.is_submitting


def test_non_json_response(session, api_service):
    api_service.submit_participant.return_value = mock_response(502, ValueError('no json'))
    coordinator = SubmissionCoordinator(api_service, session)

    with pytest.raises(SubmissionError) as exc_info:
        coordinator.submit_session()
    assert exc_info.value.status_code == 502


def test_success_without_participant_id(session, api_service):
    api_service.submit_participant.return_value = mock_response(200, {'success': True})
    coordinator = SubmissionCoordinator(api_service, session)

    with pytest.raises(SubmissionError, match='participant id'):
        coordinator.submit_session()


def test_partial_image_failure_is_reported(session, api_service):
    api_service.submit_participant.return_value = mock_response(200, {
        'success': True, 'participantId': 'pid-2', 'message': 'Data submitted successfully',
        'imagesCount': 4, 'failedImages': ['hair2'],
    })
    outcome = SubmissionCoordinator(api_service, session).submit_session()
    assert outcome.images_count == 4
    assert outcome.failed_images == ('hair2',)


def test_submit_with_plain_mappings(api_service, valid_metadata, png_bytes):
    slots = {key: SlotImage(f'{key}.jpg', png_bytes, 'image/jpeg') for key in ImageSlot.keys()}
    outcome = SubmissionCoordinator(api_service).submit(slots, valid_metadata)
    assert outcome.participant_id == 'pid-1'

    participant_json, files = api_service.submit_participant.call_args.args
    assert json.loads(participant_json)['age'] == 28
    assert files['hair1'][2] == 'image/jpeg'
