"""
Potential Student Service for SkillUp
Waiting-list leads; enrollment into a User is done by hand
"""

from schemas import PotentialStudent
from services.entity_service import BatchWriteMixin, EntityService
from services.firestore_service import order_by, where

class PotentialStudentService(BatchWriteMixin, EntityService):
    model = PotentialStudent

    def create_potential_student(self, potential_student_data):
        return self._create(potential_student_data)

    def get_potential_student_by_id(self, potential_student_id):
        return self._get(potential_student_id)

    def update_potential_student(self, potential_student_id, changes):
        self._update(potential_student_id, changes)

    def delete_potential_student(self, potential_student_id):
        self._delete(potential_student_id)

    def get_all_potential_students(self, status=None):
        constraints = []
        if status:
            constraints.append(where('status', status))
        constraints.append(order_by('createdAt', 'desc'))

        return self._list(*constraints)
