"""
Submission Service for SkillUp
Handles student submissions and grading
"""

import logging

from firebase_admin import firestore

from schemas import Submission
from services.entity_service import BatchWriteMixin, EntityService
from services.firestore_service import order_by, where

logger = logging.getLogger(__name__)

class SubmissionService(BatchWriteMixin, EntityService):
    model = Submission

    def _server_fields(self, submission):
        # submittedAt defaults to the server time so the submission shows up
        # in time-sorted listings
        if submission.submitted_at is None:
            return {'submittedAt': firestore.SERVER_TIMESTAMP}
        return {}

    def create_submission(self, submission_data):
        return self._create(submission_data)

    def get_submission_by_id(self, submission_id):
        return self._get(submission_id)

    def update_submission(self, submission_id, changes):
        self._update(submission_id, changes)

    def delete_submission(self, submission_id):
        self._delete(submission_id)

    def get_submissions_by_assignment(self, assignment_id):
        return self._list(
            where('assignmentId', assignment_id),
            order_by('submittedAt', 'desc'),
        )

    def get_submissions_by_student(self, student_id):
        return self._list(
            where('studentId', student_id),
            order_by('submittedAt', 'desc'),
        )

    def grade_submission(self, submission_id, score, feedback=None):
        """
        Record a score and mark the submission graded
        """
        changes = {'score': score, 'status': 'graded'}
        if feedback is not None:
            changes['feedback'] = feedback

        self._update(submission_id, changes, gradedAt=firestore.SERVER_TIMESTAMP)
        logger.info(f"Graded submission {submission_id} with score {score}")
