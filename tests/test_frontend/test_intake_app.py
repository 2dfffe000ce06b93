"""Tests for the headless intake client and its API service."""
import argparse
import json
import pytest
import requests
from unittest.mock import Mock, patch
from shared.enums import ImageSlot
from src.intake_app.app import IntakeApp, format_progress, main, parse_image_argument
from src.intake_app.config_manager import ConfigManager
from src.intake_app.services.api_service import APIService


@pytest.fixture(autouse=True)
def quiet_logging():
    # main() would otherwise replace the root handlers for the rest of the run
    with patch('src.intake_app.app.setup_logging'):
        yield


@pytest.fixture
def image_paths(tmp_path, png_bytes):
    paths = {}
    for key in ImageSlot.keys():
        path = tmp_path / f'{key}.png'
        path.write_bytes(png_bytes)
        paths[key] = path
    return paths


@pytest.fixture
def metadata_file(tmp_path, valid_metadata):
    path = tmp_path / 'participant.json'
    path.write_text(json.dumps(valid_metadata))
    return path


def test_config_manager_from_environment():
    with patch.dict('os.environ', {'INTAKE_CLIENT_API_BASE_URL': 'https://intake.example.org',
                                   'INTAKE_CLIENT_API_TIMEOUT': '5'}):
        config = ConfigManager()
    assert config.api_base_url == 'https://intake.example.org'
    assert config.get('api_timeout') == 5.0
    assert config.get('missing', 'default') == 'default'
    assert config.get_all()['preview_max_size'] == 200


def test_intake_app_flow(image_paths, valid_metadata):
    api_service = Mock()
    api_service.submit_participant.return_value = Mock(ok=True, status_code=200, **{
        'json.return_value': {'success': True, 'participantId': 'pid-9', 'imagesCount': 5, 'message': 'ok'},
    })
    app = IntakeApp(ConfigManager(), api_service=api_service)

    for key, path in image_paths.items():
        app.add_image(key, path)
    app.remove_image('skin3')
    for name, value in valid_metadata.items():
        app.update_field(name, value)

    progress = app.progress()
    assert not progress.submit_ready
    assert progress.missing_slots == ('skin3',)

    app.add_image('skin3', image_paths['skin3'])
    outcome = app.submit()
    assert outcome.participant_id == 'pid-9'
    assert app.state.submitted

    app.start_over()
    assert not app.state.submitted
    assert app.progress().completed_tasks == 0


def test_format_progress(valid_metadata):
    app = IntakeApp(ConfigManager(), api_service=Mock())
    app.update_field('name', 'Ada')
    text = format_progress(app.progress())
    assert 'Photos: 0/5 uploaded (pending)' in text
    assert 'Information: 1/12 fields completed (partial)' in text
    assert 'Missing photos: Skin Photo 1' in text
    assert 'Complete all sections to submit' in text


def test_parse_image_argument():
    assert parse_image_argument('skin1=/tmp/a.png') == ('skin1', '/tmp/a.png')
    with pytest.raises(argparse.ArgumentTypeError):
        parse_image_argument('skin1')


def test_main_dry_run_incomplete(metadata_file, image_paths, capsys):
    exit_code = main(['--metadata', str(metadata_file), '--image', f"skin1={image_paths['skin1']}", '--dry-run'])
    assert exit_code == 1
    assert 'Missing photos' in capsys.readouterr().out


def test_main_rejects_unknown_slot(metadata_file, image_paths, capsys):
    exit_code = main(['--metadata', str(metadata_file), '--image', f"face={image_paths['skin1']}"])
    assert exit_code == 2
    assert 'Unknown image slot' in capsys.readouterr().err


def test_main_submits(metadata_file, image_paths, capsys):
    args = ['--metadata', str(metadata_file), '--api-url', 'http://backend.test']
    for key, path in image_paths.items():
        args += ['--image', f'{key}={path}']

    response = Mock(ok=True, status_code=200, **{
        'json.return_value': {'success': True, 'participantId': 'pid-3', 'imagesCount': 5, 'message': 'ok'},
    })
    with patch.object(APIService, 'submit_participant', return_value=response) as submit:
        exit_code = main(args)

    assert exit_code == 0
    assert submit.call_count == 1
    assert 'Participant ID: pid-3' in capsys.readouterr().out


def test_api_service_single_attempt():
    session = Mock()
    session.request.side_effect = requests.exceptions.Timeout('slow')
    service = APIService('http://backend.test/', timeout=3, session=session)

    with pytest.raises(requests.exceptions.Timeout):
        service.submit_participant('{}', {})

    session.request.assert_called_once_with(
        'POST', 'http://backend.test/api/submit',
        data={'participantData': '{}'}, files={}, timeout=3,
    )


def test_api_service_get_participant():
    session = Mock()
    service = APIService('http://backend.test', session=session)
    service.get_participant('abc')
    session.request.assert_called_once_with('GET', 'http://backend.test/api/participants/abc', timeout=60.0)
