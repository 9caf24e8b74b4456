"""
Assignment Service for SkillUp
Assignments with their question lists and answer keys
"""

import logging

from schemas import Assignment
from services.entity_service import BatchWriteMixin, EntityService
from services.firestore_service import order_by, where

logger = logging.getLogger(__name__)

class AssignmentService(BatchWriteMixin, EntityService):
    model = Assignment

    def create_assignment(self, assignment_data):
        """
        Store an assignment. Answer key entries without a matching question
        are accepted and only logged.
        """
        assignment = Assignment.coerce(assignment_data)
        dangling = assignment.dangling_answer_keys()
        if dangling:
            logger.warning(f"Assignment '{assignment.title}' has answer keys without questions: {dangling}")

        return self._create(assignment)

    def get_assignment_by_id(self, assignment_id):
        return self._get(assignment_id)

    def update_assignment(self, assignment_id, changes):
        self._update(assignment_id, changes)

    def delete_assignment(self, assignment_id):
        self._delete(assignment_id)

    def get_assignments_by_class(self, class_id):
        """
        Active assignments of a class, newest first
        """
        return self._list(
            where('classId', class_id),
            where('isActive', True),
            order_by('createdAt', 'desc'),
        )
