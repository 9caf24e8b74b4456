"""
Authentication Middleware for SkillUp
Handles Firebase token validation and role checks
"""

from functools import wraps
from flask import current_app, request
from utils.error_handler import AuthenticationError, AuthorizationError, handle_error
from firebase_admin import auth
import logging

logger = logging.getLogger(__name__)

def _resolve_user(decoded_token):
    """
    Build the request user from a decoded token. The role comes from the
    'role' custom claim, falling back to the users document linked by firebaseUid.
    """
    current_user = {
        'uid': decoded_token['uid'],
        'email': decoded_token.get('email', ''),
        'name': decoded_token.get('name', ''),
        'role': decoded_token.get('role'),
        'user_id': None,
    }

    repository = current_app.extensions.get('skillup_repository')
    if repository is not None:
        user = repository.users.get_user_by_firebase_uid(decoded_token['uid'])
        if user is not None:
            current_user['user_id'] = user.id
            current_user['name'] = current_user['name'] or user.name or user.display_name or ''
            current_user['role'] = current_user['role'] or user.role

    return current_user

def require_auth(f):
    """
    Decorator to require authentication for API endpoints
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            auth_header = request.headers.get('Authorization')
            if not auth_header:
                return handle_error(AuthenticationError('Authorization header required'))

            token = auth_header.replace('Bearer ', '').strip()
            if not token:
                return handle_error(AuthenticationError('Valid token required'))

            decoded_token = auth.verify_id_token(token)
        except auth.ExpiredIdTokenError:
            logger.warning("Expired token provided")
            return handle_error(AuthenticationError('Token expired'))
        except auth.RevokedIdTokenError:
            logger.warning("Revoked token provided")
            return handle_error(AuthenticationError('Token revoked'))
        except auth.InvalidIdTokenError:
            logger.warning("Invalid token provided")
            return handle_error(AuthenticationError('Invalid token'))
        except Exception as e:
            logger.error(f"Authentication error: {str(e)}")
            return handle_error(AuthenticationError('Authentication failed'))

        try:
            request.current_user = _resolve_user(decoded_token)
        except Exception as e:
            return handle_error(e)
        return f(*args, **kwargs)

    return decorated_function

def require_role(*roles):
    """
    Decorator to require one of the given roles
    """
    def decorator(f):
        @wraps(f)
        @require_auth
        def decorated_function(*args, **kwargs):
            role = request.current_user.get('role')
            if role not in roles:
                logger.warning(f"User {request.current_user['uid']} with role {role} attempted {request.path}")
                return handle_error(AuthorizationError(f"Requires role: {', '.join(roles)}"))
            return f(*args, **kwargs)

        return decorated_function
    return decorator

require_admin = require_role('admin', 'staff')
require_teacher = require_role('teacher', 'admin')
