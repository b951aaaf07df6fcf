"""Typed request errors and the shared translation to JSON responses."""

from flask import jsonify
from werkzeug.exceptions import HTTPException

from .logging_config import get_logger

logger = get_logger('errors')


class AppError(Exception):
    status_code = 500
    kind = 'internal_error'
    default_message = 'Something went wrong'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def headers(self):
        return {}


class BadRequestError(AppError):
    status_code = 400
    kind = 'bad_request'
    default_message = 'Invalid request'


class UnauthorizedError(AppError):
    status_code = 401
    kind = 'unauthorized'
    default_message = 'Please sign in to continue'


class NotAllowedError(AppError):
    status_code = 403
    kind = 'not_allowed'
    default_message = 'You are not allowed to perform this action'


class NotFoundError(AppError):
    status_code = 404
    kind = 'not_found'
    default_message = 'Not found'


class ConflictError(AppError):
    status_code = 409
    kind = 'conflict'
    default_message = 'Conflict'


class ExpiredCodeError(AppError):
    status_code = 410
    kind = 'expired_code'
    default_message = 'Verification code expired. Please request a new code.'


class InvalidCodeError(AppError):
    status_code = 400
    kind = 'invalid_code'
    default_message = 'Invalid verification code.'


class RateLimitedError(AppError):
    status_code = 429
    kind = 'rate_limited'
    default_message = 'Too many requests. Please wait.'

    def __init__(self, message=None, retry_after=1):
        super().__init__(message)
        self.retry_after = max(1, int(retry_after or 1))

    def headers(self):
        return {'Retry-After': str(self.retry_after)}


class MailDeliveryError(AppError):
    status_code = 502
    kind = 'mail_delivery'
    default_message = 'Could not send the verification email. Please try again.'


class ServiceUnavailableError(AppError):
    status_code = 503
    kind = 'service_unavailable'
    default_message = 'Service temporarily unavailable'


def error_response(message, kind, status_code, headers=None):
    response = jsonify({'status': False, 'message': message, 'error': kind})
    response.status_code = status_code
    for key, value in (headers or {}).items():
        response.headers[key] = value
    return response


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(error):
        if error.status_code >= 500:
            logger.error(f"{error.kind}: {error.message}")
        else:
            logger.info(f"{error.kind}: {error.message}")
        return error_response(error.message, error.kind, error.status_code, error.headers())

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        kind = (error.name or 'http_error').strip().lower().replace(' ', '_')
        return error_response(error.description or error.name, kind, error.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception(f"Unhandled error: {error}")
        return error_response('Internal server error', 'internal_error', 500)
