"""
User Service for SkillUp
Handles user documents: lookups by identity, filtered listings, student codes
"""

import logging
import re

from schemas import User
from services.entity_service import BatchWriteMixin, EntityService
from services.firestore_service import order_by, where

logger = logging.getLogger(__name__)

STUDENT_CODE_PREFIX = 'SU-'
STUDENT_CODE_PATTERN = re.compile(r'^SU-(\d+)$')

class UserService(BatchWriteMixin, EntityService):
    model = User

    def create_user(self, user_data):
        return self._create(user_data)

    def get_user_by_id(self, user_id):
        return self._get(user_id)

    def get_user_by_firebase_uid(self, firebase_uid):
        return self._first(where('firebaseUid', firebase_uid))

    def get_user_by_email(self, email):
        return self._first(where('email', email))

    def get_user_by_username(self, username):
        return self._first(where('username', username))

    def update_user(self, user_id, changes):
        self._update(user_id, changes)

    def delete_user(self, user_id):
        self._delete(user_id)

    def get_all_users(self, role=None, status=None):
        """
        List users newest first, optionally narrowed by role and/or status
        """
        constraints = []
        if role:
            constraints.append(where('role', role))
        if status:
            constraints.append(where('status', status))
        constraints.append(order_by('createdAt', 'desc'))

        return self._list(*constraints)

    def generate_student_code(self):
        """
        Next free student code (SU-001, SU-002, ...). Not reserved: two
        concurrent callers can receive the same code.
        """
        highest = 0
        for student in self._list(where('role', 'student')):
            match = STUDENT_CODE_PATTERN.match(student.student_code or '')
            if match:
                highest = max(highest, int(match.group(1)))

        code = f"{STUDENT_CODE_PREFIX}{highest + 1:03d}"
        logger.info(f"Generated student code {code}")
        return code
