"""Pytest configuration and fixtures for Participant Intake tests."""
import io
import json
import pytest
import tempfile
import os
from PIL import Image
from backend.app import create_app
from backend.models import db
from backend.services.image_storage import LocalImageStorage
from shared.enums import ImageSlot


VALID_METADATA = {
    'name': 'Ada Participant',
    'age': 28,
    'gender': 'female',
    'city': 'Lagos',
    'country': 'Nigeria',
    'hairType': 'curly',
    'hairLength': 'medium',
    'hairDensity': 'thick',
    'hairCondition': 'healthy',
    'scalpType': 'normal',
    'recentTreatments': 'no',
    'scalpConditions': 'no',
}


def make_png(color='red', size=(64, 48)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color=color).save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def valid_metadata():
    return dict(VALID_METADATA)


@pytest.fixture
def make_app(tmp_path):
    """Build a test app; keyword overrides are merged into the test config."""
    db_fd, db_path = tempfile.mkstemp()

    def _make_app(**overrides):
        test_config = {
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
            'SQLALCHEMY_TRACK_MODIFICATIONS': False,
            'IMAGE_STORAGE': LocalImageStorage(tmp_path),
        }
        test_config.update(overrides)
        app = create_app(test_config)
        with app.app_context():
            db.create_all()
        return app

    yield _make_app

    # Cleanup
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def app(make_app):
    """Create and configure a test app instance."""
    return make_app()


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


@pytest.fixture
def submission_form(valid_metadata, png_bytes):
    """Build a multipart form for /api/submit.

    ``slots`` limits which images are attached; ``metadata`` replaces the
    participant data (a string is sent as-is).
    """
    def _form(metadata=None, slots=None):
        metadata = valid_metadata if metadata is None else metadata
        form = {
            'participantData': metadata if isinstance(metadata, str) else json.dumps(metadata),
        }
        for key in (ImageSlot.keys() if slots is None else slots):
            form[key] = (io.BytesIO(png_bytes), f'{key}.png', 'image/png')
        return form

    return _form
