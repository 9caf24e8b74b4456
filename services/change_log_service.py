"""
Change Log Service for SkillUp
Append-only record of document changes; no update or delete is exposed
"""

from firebase_admin import firestore

from schemas import ChangeLog
from services.entity_service import EntityService
from services.firestore_service import order_by, where

class ChangeLogService(EntityService):
    model = ChangeLog

    def _server_fields(self, change_log):
        return {'timestamp': firestore.SERVER_TIMESTAMP}

    def create_change_log(self, change_log_data):
        return self._create(change_log_data)

    def get_change_log_by_id(self, change_log_id):
        return self._get(change_log_id)

    def get_change_logs(self, collection=None, document_id=None):
        """
        Change logs newest first, optionally for one collection and/or document
        """
        constraints = []
        if collection:
            constraints.append(where('collection', collection))
        if document_id:
            constraints.append(where('documentId', document_id))
        constraints.append(order_by('timestamp', 'desc'))

        return self._list(*constraints)

    def record(self, action, collection, document_id, actor, changes=None):
        """
        Shortcut used by the API: actor is the request user
        ({'uid', 'user_id', 'name', 'email'})
        """
        return self.create_change_log({
            'action': action,
            'collection': collection,
            'document_id': document_id,
            'user_id': actor.get('user_id') or actor.get('uid', ''),
            'user_name': actor.get('name') or actor.get('email') or '',
            'changes': changes or {},
        })
