"""
Entity Service base for SkillUp
Binds one schema to its collection on top of the generic Firestore service
"""

import logging

import pydantic

from utils.error_handler import StoreReadError

logger = logging.getLogger(__name__)


class EntityService:
    """
    Parse-on-read and validate-on-write around FirestoreService for one
    entity type. Subclasses set `model` and expose the named operations.
    """

    model = None

    def __init__(self, store, reference_checker=None):
        self.store = store
        self.reference_checker = reference_checker

    @property
    def collection(self):
        return self.model.collection_name

    def _server_fields(self, entity):
        """Fields the service stamps on every new document of this collection"""
        return {}

    def _prepare(self, data):
        entity = self.model.coerce(data)
        if self.reference_checker is not None:
            self.reference_checker.check(entity.references())

        document = entity.to_document()
        document.update(self._server_fields(entity))
        return document

    def _create(self, data):
        return self.store.create(self.collection, self._prepare(data))

    def _get(self, doc_id):
        data = self.store.get_by_id(self.collection, doc_id)
        if data is None:
            return None
        return self._parse(data)

    def _update(self, doc_id, changes, **server_fields):
        validated = self.model.validate_partial(changes or {})
        if self.reference_checker is not None:
            self.reference_checker.check(self.model.references_in(validated))

        document = self.model.dump_partial(validated)
        document.update(server_fields)
        self.store.update(self.collection, doc_id, document)

    def _delete(self, doc_id):
        self.store.delete(self.collection, doc_id)

    def _list(self, *constraints):
        return [self._parse(data) for data in self.store.query(self.collection, constraints)]

    def _first(self, *constraints):
        """First match or None; uniqueness is not enforced by the store"""
        results = self._list(*constraints)
        return results[0] if results else None

    def _parse(self, data):
        try:
            return self.model.from_document(data)
        except pydantic.ValidationError as e:
            logger.error(f"Malformed {self.collection} document {data.get('id')}: {str(e)}")
            raise StoreReadError('parse', self.collection, e) from e

    def create_many(self, items):
        """
        Validate every item, then insert them in one atomic batch
        """
        documents = [self._prepare(item) for item in items]
        return self.store.batch_create(self.collection, documents)


class BatchWriteMixin:
    """
    Atomic multi-document update and delete, for collections that are not
    append-only
    """

    def update_many(self, updates):
        """
        Apply {id: changes} atomically
        """
        documents = []
        for doc_id, changes in updates.items():
            validated = self.model.validate_partial(changes)
            if self.reference_checker is not None:
                self.reference_checker.check(self.model.references_in(validated))
            documents.append((doc_id, self.model.dump_partial(validated)))
        self.store.batch_update(self.collection, documents)

    def delete_many(self, ids):
        self.store.batch_delete(self.collection, ids)
