"""
Class Service for SkillUp
"""

from schemas import Class
from services.entity_service import BatchWriteMixin, EntityService
from services.firestore_service import order_by, where

class ClassService(BatchWriteMixin, EntityService):
    model = Class

    def create_class(self, class_data):
        return self._create(class_data)

    def get_class_by_id(self, class_id):
        return self._get(class_id)

    def get_class_by_code(self, class_code):
        return self._first(where('classCode', class_code))

    def update_class(self, class_id, changes):
        self._update(class_id, changes)

    def delete_class(self, class_id):
        self._delete(class_id)

    def get_all_classes(self, teacher_id=None, is_active=None):
        """
        List classes newest first; is_active=False is a real filter
        """
        constraints = []
        if teacher_id:
            constraints.append(where('teacherId', teacher_id))
        if is_active is not None:
            constraints.append(where('isActive', is_active))
        constraints.append(order_by('createdAt', 'desc'))

        return self._list(*constraints)
