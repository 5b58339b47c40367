"""
Error envelope and logging for the analytics API.

Every route returns either
    {success: true,  data, meta{timestamp, request_id}}
or
    {success: false, error{message, code, details}, meta{timestamp, request_id}}
"""

import logging
import traceback
import uuid
from functools import wraps
from flask import jsonify, request
from datetime import datetime

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


class ErrorCode:
    """Machine-readable codes carried in ``error.code``"""

    # 4xx
    VALIDATION_ERROR = 'VALIDATION_ERROR'
    MISSING_FIELD = 'MISSING_FIELD'
    INVALID_VALUE = 'INVALID_VALUE'
    RESOURCE_NOT_FOUND = 'RESOURCE_NOT_FOUND'

    # 5xx
    INTERNAL_ERROR = 'INTERNAL_ERROR'
    DATABASE_ERROR = 'DATABASE_ERROR'
    SERVICE_UNAVAILABLE = 'SERVICE_UNAVAILABLE'


class APIError(Exception):
    """An error whose message is safe to show to the client"""

    code = ErrorCode.INTERNAL_ERROR
    status_code = 500

    def __init__(self, message, code=None, status_code=None, details=None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.details = details or {}


class ValidationError(APIError):
    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class DatabaseError(APIError):
    """A required store could not be read. The driver error stays in the log."""

    code = ErrorCode.DATABASE_ERROR

    def __init__(self, message="Failed to load analytics data", details=None):
        super().__init__(message, details=details)


class ResourceNotFoundError(APIError):
    code = ErrorCode.RESOURCE_NOT_FOUND
    status_code = 404


class ServiceUnavailableError(APIError):
    code = ErrorCode.SERVICE_UNAVAILABLE
    status_code = 503


def generate_request_id():
    return f"req_{uuid.uuid4().hex[:12]}"


def _meta(request_id):
    return {
        'timestamp': datetime.now().isoformat(),
        'request_id': request_id or generate_request_id(),
    }


def format_error_response(error, code=None, status_code=None, details=None, request_id=None):
    """
    Build the failure envelope.

    ``error`` is either an APIError (its code, status and details win) or a
    plain message. Returns ``(body, status_code)``.
    """
    if isinstance(error, APIError):
        message, code, status_code, details = error.message, error.code, error.status_code, error.details
    else:
        message = str(error)

    body = {
        'success': False,
        'error': {
            'message': message,
            'code': code or ErrorCode.INTERNAL_ERROR,
            'details': details or {},
        },
        'meta': _meta(request_id),
    }
    return body, status_code or 500


def format_success_response(data, message=None, meta=None, request_id=None):
    body = {'success': True, 'data': data}
    if message:
        body['message'] = message
    body['meta'] = _meta(request_id)
    if meta:
        body['meta'].update(meta)
    return body


_SEVERITY_LEVELS = {
    'CRITICAL': logging.CRITICAL,
    'ERROR': logging.ERROR,
    'WARNING': logging.WARNING,
}


def log_error(error, request_obj=None, request_id=None, severity='ERROR'):
    """Log an error with the request it happened on.

    The stack trace includes chained causes, so a DatabaseError is logged
    together with the driver exception behind it.
    """
    log_data = {
        'request_id': request_id or generate_request_id(),
        'error_message': str(error),
        'error_type': type(error).__name__,
    }
    if request_obj:
        log_data['request'] = {
            'method': request_obj.method,
            'path': request_obj.path,
            'remote_addr': request_obj.remote_addr,
            'user_agent': request_obj.headers.get('User-Agent', 'Unknown'),
        }
    if isinstance(error, BaseException):
        log_data['stack_trace'] = ''.join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

    logger.log(_SEVERITY_LEVELS.get(severity, logging.INFO), f"{severity}: {log_data}")


def _error_reply(error, request_id, severity, message=None, **kwargs):
    log_error(error, request_obj=request, request_id=request_id, severity=severity)
    body, status_code = format_error_response(
        error if message is None else message, request_id=request_id, **kwargs)
    return jsonify(body), status_code


def handle_errors(f):
    """
    Wrap a route so its return value becomes the success envelope and any
    exception becomes the failure envelope.

        @analytics_bp.route('/overview')
        @handle_errors
        def get_overview():
            return {...}
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        request_id = generate_request_id()

        try:
            result = f(*args, **kwargs)
        except APIError as e:
            return _error_reply(e, request_id, 'ERROR' if e.status_code >= 500 else 'WARNING')
        except ValueError as e:
            return _error_reply(e, request_id, 'WARNING',
                                message=str(e), code=ErrorCode.INVALID_VALUE, status_code=400)
        except Exception as e:
            # Internals never reach the client
            return _error_reply(e, request_id, 'ERROR', message=GENERIC_ERROR_MESSAGE)

        # Responses and (body, status) tuples pass through untouched
        if hasattr(result, 'status_code') or isinstance(result, tuple):
            return result
        return jsonify(format_success_response(result, request_id=request_id))

    return decorated_function


def validate_required_fields(data, required_fields):
    """
    Raise a MISSING_FIELD ValidationError naming every field that is absent,
    None, or blank.
    """
    missing_fields = [
        field for field in required_fields
        if data.get(field) is None or (isinstance(data[field], str) and not data[field].strip())
    ]
    if missing_fields:
        raise ValidationError(
            message=f"{', '.join(missing_fields)} required",
            code=ErrorCode.MISSING_FIELD,
            details={'missing_fields': missing_fields},
        )
