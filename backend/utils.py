"""Backend utility functions for the Participant Intake application."""
from flask import jsonify
from .models import db, Participant
from .exceptions import IntakeError
import logging


logger = logging.getLogger(__name__)


def api_error(message, status_code=400, log_level='warning', details=None, errors=None):
    """
    Standardized API error response with consistent logging.

    Args:
        message (str): Error message for the client
        status_code (int): HTTP status code
        log_level (str): Logging level ('debug', 'info', 'warning', 'error', 'critical')
        details (dict, optional): Additional details for logging
        errors (list, optional): Field-level errors returned to the client

    Returns:
        Flask response: JSON error response
    """
    log_func = getattr(logger, log_level, logger.warning)
    if details:
        log_func(f"API Error ({status_code}): {message} - Details: {details}")
    else:
        log_func(f"API Error ({status_code}): {message}")

    body = {'success': False, 'message': message}
    if errors:
        body['errors'] = errors
    return jsonify(body), status_code


def handle_intake_error(e):
    """Render an IntakeError as a JSON error response."""
    return api_error(e.message, e.status_code, e.log_level, errors=e.errors)


def handle_api_exception(e, operation="operation", status_code=500):
    """
    Handle exceptions in API endpoints with consistent logging and responses.

    Args:
        e (Exception): The exception that occurred
        operation (str): Description of the operation being performed
        status_code (int): HTTP status code to return

    Returns:
        Flask response: JSON error response
    """
    logger.error(f"Exception during {operation}: {str(e)}", exc_info=True)
    return api_error(f"Failed to {operation}", status_code, 'error')


def pydantic_errors_to_fields(exc):
    """Flatten a pydantic ValidationError into [{'field', 'message'}] entries."""
    errors = []
    for error in exc.errors():
        field = '.'.join(str(x) for x in error['loc']) or '__root__'
        errors.append({'field': field, 'message': error['msg']})
    return errors


def participant_exists(participant_id):
    """Return True if a participant row with this id exists."""
    if not participant_id:
        return False
    try:
        return db.session.get(Participant, participant_id) is not None
    except Exception as e:
        logger.error(f"Error checking participant {participant_id}: {e}")
        return False