"""
Error Handlers for RecallStack

Provides:
- Custom exception classes
- Consistent error response format
- Flask error handlers
"""

from flask import jsonify, request, current_app
from typing import Optional, Dict, Any
from werkzeug.exceptions import HTTPException


class RecallStackError(Exception):
    """Base exception class for RecallStack."""

    def __init__(
        self,
        message: str,
        code: str = 'UNKNOWN_ERROR',
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for JSON response."""
        return {
            'success': False,
            'message': self.message,
            'code': self.code,
            'details': self.details
        }


class NotFoundError(RecallStackError):
    """Resource not found."""

    def __init__(self, message: str = 'Resource not found', resource: str = None):
        super().__init__(
            message=message,
            code='NOT_FOUND',
            status_code=404,
            details={'resource': resource} if resource else None
        )


class ValidationError(RecallStackError):
    """Input validation failed."""

    def __init__(self, message: str = 'Validation failed', errors: Any = None):
        super().__init__(
            message=message,
            code='VALIDATION_ERROR',
            status_code=400,
            details={'errors': errors} if errors else None
        )


class AuthorizationError(RecallStackError):
    """Access denied."""

    def __init__(self, message: str = 'Access denied'):
        super().__init__(
            message=message,
            code='UNAUTHORIZED',
            status_code=401
        )


class ConflictError(RecallStackError):
    """Write rejected because the stored record changed underneath it."""

    def __init__(self, message: str = 'Conflicting update', details: Dict = None):
        super().__init__(
            message=message,
            code='CONFLICT',
            status_code=409,
            details=details
        )


def error_response(
    message: str,
    code: str = 'ERROR',
    status_code: int = 400,
    details: Dict = None
) -> tuple:
    """Create a standardized error response."""
    response = {
        'success': False,
        'message': message,
        'code': code
    }
    if details:
        response['details'] = details

    return jsonify(response), status_code


def register_error_handlers(app):
    """Register error handlers with Flask app."""

    @app.errorhandler(RecallStackError)
    def handle_recallstack_error(error):
        if error.status_code >= 500:
            current_app.logger.error("%s: %s", error.code, error.message)
        else:
            current_app.logger.info("%s: %s", error.code, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        # routing errors (unknown endpoint, wrong method) stay JSON under /api/
        if not request.path.startswith('/api/'):
            return error
        message = 'Endpoint not found' if error.code == 404 else error.name
        return error_response(message, error.name.upper().replace(' ', '_'), error.code)

    @app.errorhandler(500)
    def handle_internal_error(error):
        current_app.logger.exception('Internal server error')
        if request.path.startswith('/api/'):
            return error_response('Internal server error', 'SERVER_ERROR', 500)
        return error
