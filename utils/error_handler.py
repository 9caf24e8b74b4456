"""
Error Handler for SkillUp backend
Typed error hierarchy and centralized JSON error responses
"""

from flask import jsonify
import pydantic
import logging
import traceback

logger = logging.getLogger(__name__)

class SkillUpError(Exception):
    """Base exception class for SkillUp backend"""
    def __init__(self, message, status_code=500, error_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code

class ValidationError(SkillUpError):
    """Raised when an entity or request payload fails validation"""
    def __init__(self, message, field=None):
        super().__init__(message, status_code=400, error_code='VALIDATION_ERROR')
        self.field = field

class IntegrityError(ValidationError):
    """Raised when a reference points at a document that does not exist"""
    def __init__(self, message, ref=None):
        super().__init__(message, field=ref.collection if ref else None)
        self.status_code = 409
        self.error_code = 'INTEGRITY_ERROR'
        self.ref = ref

class AuthenticationError(SkillUpError):
    """Raised when authentication fails"""
    def __init__(self, message):
        super().__init__(message, status_code=401, error_code='AUTH_ERROR')

class AuthorizationError(SkillUpError):
    """Raised when user lacks required permissions"""
    def __init__(self, message):
        super().__init__(message, status_code=403, error_code='PERMISSION_ERROR')

class NotFoundError(SkillUpError):
    """Raised by the HTTP layer when a requested document is absent"""
    def __init__(self, message):
        super().__init__(message, status_code=404, error_code='NOT_FOUND')

class StoreError(SkillUpError):
    """
    Raised when a document store operation fails.
    Carries the adapter operation, the collection and the original error.
    """
    def __init__(self, operation, collection, cause=None, message=None):
        if message is None:
            message = f"Failed to {operation} {collection}"
            if cause is not None:
                message = f"{message}: {cause}"
        super().__init__(message, status_code=500, error_code='DATABASE_ERROR')
        self.operation = operation
        self.collection = collection
        self.cause = cause

class StoreReadError(StoreError):
    """Lookup or query failed (network, permission, malformed constraint)"""

class StoreWriteError(StoreError):
    """Create, update, delete or batch failed"""

def handle_error(error):
    """
    Central error handler that converts exceptions to JSON responses
    """
    try:
        if isinstance(error, StoreError):
            logger.error(f"Store error during {error.operation} on {error.collection}: {error.message}")
            return jsonify({
                'error': error.message,
                'error_code': error.error_code,
                'status': 'error'
            }), error.status_code

        if isinstance(error, SkillUpError):
            logger.warning(f"SkillUp error: {error.message}")
            return jsonify({
                'error': error.message,
                'error_code': error.error_code,
                'status': 'error'
            }), error.status_code

        elif isinstance(error, pydantic.ValidationError):
            logger.warning(f"Schema validation error: {str(error)}")
            return jsonify({
                'error': 'Invalid document',
                'details': [
                    {'field': '.'.join(str(part) for part in item['loc']), 'message': item['msg']}
                    for item in error.errors()
                ],
                'error_code': 'VALIDATION_ERROR',
                'status': 'error'
            }), 400

        elif isinstance(error, ValueError):
            logger.warning(f"Validation error: {str(error)}")
            return jsonify({
                'error': str(error),
                'error_code': 'VALIDATION_ERROR',
                'status': 'error'
            }), 400

        elif isinstance(error, KeyError):
            logger.warning(f"Missing key error: {str(error)}")
            return jsonify({
                'error': f'Missing required field: {str(error)}',
                'error_code': 'MISSING_FIELD',
                'status': 'error'
            }), 400

        elif isinstance(error, PermissionError):
            logger.warning(f"Permission error: {str(error)}")
            return jsonify({
                'error': 'Insufficient permissions',
                'error_code': 'PERMISSION_DENIED',
                'status': 'error'
            }), 403

        else:
            logger.error(f"Unhandled error: {str(error)}")
            logger.error(traceback.format_exc())

            return jsonify({
                'error': 'An unexpected error occurred',
                'error_code': 'INTERNAL_ERROR',
                'status': 'error'
            }), 500

    except Exception as e:
        logger.critical(f"Error in error handler: {str(e)}")
        return jsonify({
            'error': 'Critical system error',
            'error_code': 'CRITICAL_ERROR',
            'status': 'error'
        }), 500

def validate_request_data(data, required_fields):
    """
    Check that a request body is present and carries the required fields
    """
    if not data:
        raise ValidationError("Request body cannot be empty")

    missing_fields = [field for field in required_fields if data.get(field) is None]
    if missing_fields:
        raise ValidationError(f"Missing required fields: {', '.join(missing_fields)}")

    return True
