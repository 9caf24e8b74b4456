"""
Level Service for SkillUp
"""

from schemas import Level
from services.entity_service import BatchWriteMixin, EntityService
from services.firestore_service import order_by, where

class LevelService(BatchWriteMixin, EntityService):
    model = Level

    def create_level(self, level_data):
        return self._create(level_data)

    def get_level_by_id(self, level_id):
        return self._get(level_id)

    def update_level(self, level_id, changes):
        self._update(level_id, changes)

    def delete_level(self, level_id):
        self._delete(level_id)

    def get_all_levels(self, is_active=None):
        """
        Levels in display order (ascending `order`)
        """
        constraints = []
        if is_active is not None:
            constraints.append(where('isActive', is_active))
        constraints.append(order_by('order', 'asc'))

        return self._list(*constraints)
