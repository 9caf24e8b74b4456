"""
Account Service for SkillUp
Creates a Firebase Auth identity together with its user document
"""

import logging

from firebase_admin import auth

from utils.error_handler import ValidationError

logger = logging.getLogger(__name__)

class AccountService:
    def __init__(self, users, audit):
        self.users = users
        self.audit = audit

    def create_account(self, email, password, profile=None, actor=None):
        """
        Create the Auth user, then the users document pointing at it.
        Students without a code get the next SU-NNN code.
        """
        email = (email or '').strip().lower()
        if not email or not password:
            raise ValidationError("Email and password required")

        profile = {
            key: value for key, value in (profile or {}).items()
            if key not in ('email', 'firebaseUid', 'firebase_uid')
        }
        profile.setdefault('role', 'student')
        if profile['role'] == 'student' and not (profile.get('studentCode') or profile.get('student_code')):
            profile['student_code'] = self.users.generate_student_code()

        try:
            user_record = auth.create_user(
                email=email,
                password=password,
                display_name=profile.get('name') or profile.get('displayName')
            )
        except auth.EmailAlreadyExistsError:
            logger.warning(f"Attempt to create account with existing email: {email}")
            raise ValidationError("Email already exists", field='email')

        try:
            user_id = self.users.create_user({**profile, 'email': email, 'firebase_uid': user_record.uid})
        except Exception:
            logger.error(f"Failed to store profile for {email}, removing auth user {user_record.uid}")
            try:
                auth.delete_user(user_record.uid)
            except Exception as rollback_error:
                logger.error(f"Could not remove auth user {user_record.uid}: {str(rollback_error)}")
            raise

        logger.info(f"Created account {email} with user ID: {user_id}")

        if actor:
            self.audit.log_action({
                'admin_id': actor.get('uid', ''),
                'admin_name': actor.get('name') or actor.get('email') or '',
                'action': 'user_created',
                'target_type': 'user',
                'target_id': user_id,
                'details': {'email': email, 'role': profile['role']},
            })

        return {
            'success': True,
            'user_id': user_id,
            'firebase_uid': user_record.uid,
            'email': email,
            'role': profile['role'],
        }
