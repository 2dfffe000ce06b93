"""Tests for backend settings and error responses."""
import os
import json
from unittest.mock import patch
from backend.settings import BackendSettings
from shared.enums import DeploymentMode
from shared.validation import MAX_IMAGE_BYTES


def test_development_defaults():
    with patch.dict(os.environ, {}, clear=True):
        settings = BackendSettings()
    assert settings.env == DeploymentMode.DEVELOPMENT
    assert settings.resolved_storage_backend() == 'local'
    assert settings.resolved_upload_dir() == os.getcwd()
    config = settings.as_flask_config()
    assert config['MAX_IMAGE_BYTES'] == MAX_IMAGE_BYTES
    assert config['MAX_CONTENT_LENGTH'] > 5 * MAX_IMAGE_BYTES


def test_production_from_environment():
    env = {
        'INTAKE_ENV': 'production',
        'INTAKE_CLOUD_STORAGE_BUCKET': 'research-images',
        'INTAKE_DATABASE_URL': 'postgresql://db/intake',
    }
    with patch.dict(os.environ, env, clear=True):
        settings = BackendSettings()
    assert settings.is_production
    assert settings.resolved_storage_backend() == 'cloud'
    assert settings.resolved_upload_dir() == '/tmp'

    config = settings.as_flask_config()
    assert config['INTAKE_ENV'] == 'production'
    assert config['SQLALCHEMY_DATABASE_URI'] == 'postgresql://db/intake'
    assert config['CLOUD_STORAGE_BUCKET'] == 'research-images'


def test_storage_backend_override():
    with patch.dict(os.environ, {'INTAKE_ENV': 'production', 'INTAKE_STORAGE_BACKEND': 'LOCAL'}, clear=True):
        settings = BackendSettings()
    assert settings.resolved_storage_backend() == 'local'


def test_unknown_route_returns_404(client):
    assert client.get('/api/unknown').status_code == 404


def test_submit_requires_post(client):
    assert client.get('/api/submit').status_code == 405


def test_unexpected_error_is_rendered_as_json(client, submission_form):
    with patch('backend.services.intake_service.IntakeService.submit', side_effect=RuntimeError('boom')):
        response = client.post('/api/submit', data=submission_form(slots=[]), content_type='multipart/form-data')
    assert response.status_code == 500
    assert json.loads(response.data) == {'success': False, 'message': 'Failed to submit participant data'}
