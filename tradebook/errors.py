import logging

from flask import jsonify

logger = logging.getLogger(__name__)


class JournalError(Exception):
    """Base error; subclasses carry the HTTP status they map to."""
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class ValidationError(JournalError):
    """Invalid request data."""
    status_code = 400


class NotFound(JournalError):
    """Resource not found."""
    status_code = 404


class StorageUnavailable(JournalError):
    """Storage is unavailable."""
    status_code = 503


class UpstreamAIError(JournalError):
    """AI service request failed."""
    status_code = 502


def register_error_handlers(app):
    def handle_journal_error(error):
        if error.status_code >= 500:
            logger.error(f"[{error.__class__.__name__}] {error.message}")
        return jsonify({'error': error.message, 'kind': error.__class__.__name__}), error.status_code

    for error_cls in (ValidationError, NotFound, StorageUnavailable, UpstreamAIError):
        app.register_error_handler(error_cls, handle_journal_error)
