"""Tests for participant schemas."""
import pytest
from pydantic import ValidationError
from shared.schemas import (
    ParticipantCreate, ParticipantImageCreate, SubmitResponse,
    REQUIRED_METADATA_FIELDS, required_fields_for
)


def error_fields(exc_info):
    return {'.'.join(str(x) for x in e['loc']) for e in exc_info.value.errors()}


def test_participant_create_accepts_wire_names(valid_metadata):
    participant = ParticipantCreate.model_validate(valid_metadata)
    assert participant.hair_type == 'curly'
    assert participant.recent_treatments == 'no'
    assert participant.treatment_details is None

    dumped = participant.model_dump()
    assert dumped['scalp_type'] == 'normal'
    assert participant.model_dump(by_alias=True)['scalpType'] == 'normal'


def test_participant_create_trims_and_normalizes(valid_metadata):
    valid_metadata.update(name='  Ada  ', scalpConditions=' YES ', conditionDetails=' dandruff ')
    participant = ParticipantCreate.model_validate(valid_metadata)
    assert participant.name == 'Ada'
    assert participant.scalp_conditions == 'yes'
    assert participant.condition_details == 'dandruff'


def test_details_dropped_when_flag_is_no(valid_metadata):
    valid_metadata['treatmentDetails'] = '   '
    participant = ParticipantCreate.model_validate(valid_metadata)
    assert participant.treatment_details is None


def test_all_missing_fields_reported_together():
    with pytest.raises(ValidationError) as exc_info:
        ParticipantCreate.model_validate({})
    assert error_fields(exc_info) == set(REQUIRED_METADATA_FIELDS)


@pytest.mark.parametrize('age', [-1, 151, 'abc', 12.5])
def test_invalid_age(valid_metadata, age):
    valid_metadata['age'] = age
    with pytest.raises(ValidationError) as exc_info:
        ParticipantCreate.model_validate(valid_metadata)
    assert error_fields(exc_info) == {'age'}


def test_conditional_details_required(valid_metadata):
    valid_metadata.update(recentTreatments='yes', scalpConditions='yes', conditionDetails='eczema')
    with pytest.raises(ValidationError) as exc_info:
        ParticipantCreate.model_validate(valid_metadata)
    assert error_fields(exc_info) == {'treatmentDetails'}


def test_text_markup_is_stripped(valid_metadata):
    valid_metadata['gender'] = '<script>x</script>female'
    participant = ParticipantCreate.model_validate(valid_metadata)
    assert '<' not in participant.gender


def test_required_fields_for_flags():
    assert required_fields_for({}) == REQUIRED_METADATA_FIELDS
    assert required_fields_for({'recentTreatments': 'Yes'}) == REQUIRED_METADATA_FIELDS + ['treatmentDetails']
    assert required_fields_for({'recentTreatments': 'yes', 'scalpConditions': 'yes'})[-2:] == [
        'treatmentDetails', 'conditionDetails'
    ]
    assert len(REQUIRED_METADATA_FIELDS) == 12


def test_image_create_requires_image_type():
    with pytest.raises(ValidationError):
        ParticipantImageCreate(
            participant_id='pid', image_type='skin1', filename='pid/skin1/a.txt',
            original_name='a.txt', mime_type='text/plain', file_size=3,
        )
    with pytest.raises(ValidationError):
        ParticipantImageCreate(
            participant_id='pid', image_type='face', filename='pid/face/a.png',
            original_name='a.png', mime_type='image/png', file_size=3,
        )


def test_submit_response_aliases():
    response = SubmitResponse.model_validate({
        'success': True, 'participantId': 'abc', 'imagesCount': 5, 'message': 'ok',
    })
    assert response.participant_id == 'abc'
    assert response.images_count == 5
    assert response.failed_images == []
