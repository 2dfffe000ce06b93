"""Flask application factory for the Participant Intake backend."""
from flask import Flask
import logging
from pathlib import Path
from werkzeug.exceptions import RequestEntityTooLarge
from .models import db
from .blueprints import submissions, participants, images
from .cli import init_db_command, check_image_integrity_command
from .exceptions import IntakeError, FileTooLarge
from .logging_config import setup_logging
from .services.image_storage import build_image_storage
from .settings import BackendSettings
from .utils import handle_intake_error

logger = logging.getLogger(__name__)


def create_app(test_config=None):
    """Flask application factory for the Participant Intake backend.

    Creates and configures a Flask application instance with:
    - Configuration from INTAKE_* environment variables, instance/config.py or test_config
    - SQLAlchemy database integration
    - Image storage backend (local filesystem or object storage), chosen once here
    - Blueprint registration for API endpoints
    - JSON error handlers
    - CLI command registration

    Args:
        test_config (dict, optional): Configuration overrides for testing

    Returns:
        Flask: Configured Flask application instance
    """
    setup_logging()
    logger.info("Starting Flask application initialization")

    app = Flask(__name__, instance_relative_config=True)
    logger.debug(f"Flask app created with instance path: {app.instance_path}")

    app.config.from_mapping(BackendSettings().as_flask_config())

    if test_config is None:
        # Load the instance config, if it exists, when not testing
        config_loaded = app.config.from_pyfile('config.py', silent=True)
        if config_loaded:
            logger.info("Loaded configuration from instance/config.py")
        else:
            logger.debug("No instance config file found, using environment settings")
    else:
        app.config.from_mapping(test_config)
        logger.info("Loaded test configuration")

    try:
        Path(app.instance_path).mkdir(parents=True, exist_ok=True)
    except OSError:
        logger.debug(f"Could not create instance directory: {app.instance_path}")

    logger.info(f"Using database URI: {app.config['SQLALCHEMY_DATABASE_URI']}")
    db.init_app(app)
    logger.info("SQLAlchemy database initialized")

    storage = build_image_storage(app.config)
    app.extensions['image_storage'] = storage
    logger.info(f"Image storage backend: {storage.name} (env={app.config.get('INTAKE_ENV')})")

    logger.info("Registering API blueprints")
    app.register_blueprint(submissions.bp)
    app.register_blueprint(participants.bp)
    if storage.serves_locally:
        app.register_blueprint(images.bp)
        logger.debug("Registered local images blueprint")
    else:
        logger.debug("Local image serving disabled for object storage")
    logger.info("All API blueprints registered successfully")

    app.register_error_handler(IntakeError, handle_intake_error)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_request_too_large(e):
        max_mb = app.config['MAX_IMAGE_BYTES'] // (1024 * 1024)
        return handle_intake_error(FileTooLarge(f"Upload too large. Maximum size per image: {max_mb}MB"))

    app.cli.add_command(init_db_command)
    app.cli.add_command(check_image_integrity_command)
    logger.info("CLI commands registered: init-db, check-image-integrity")

    logger.info("Flask application initialization completed successfully")
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True)
