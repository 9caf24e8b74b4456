"""
Firestore Service for SkillUp
Generic typed-passthrough CRUD, query and batch operations over Firestore
"""

from typing import Any, Dict, List, NamedTuple, Optional
import logging

from firebase_admin import firestore
from google.cloud.firestore_v1 import FieldFilter

from utils.error_handler import StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)

CREATED_AT = 'createdAt'
UPDATED_AT = 'updatedAt'

# Firestore rejects a WriteBatch with more writes than this
MAX_BATCH_WRITES = 500


class Where(NamedTuple):
    """Equality filter on a stored field."""
    field: str
    value: Any


class OrderBy(NamedTuple):
    """Sort on a stored field, 'asc' or 'desc'."""
    field: str
    direction: str = 'asc'


def where(field, value):
    return Where(field, value)


def order_by(field, direction='asc'):
    if direction not in ('asc', 'desc'):
        raise ValueError(f"Invalid sort direction: {direction}")
    return OrderBy(field, direction)


class FirestoreService:
    """
    Uniform surface over a Firestore client, independent of entity shape.

    Documents go in and come out as plain dicts keyed by their stored field
    names; reads inject the document id under 'id'. Every write stamps
    server timestamps. Store failures are logged and re-raised as
    StoreReadError / StoreWriteError; nothing is retried.
    """

    def __init__(self, db):
        self.db = db

    def create(self, collection_name, data) -> str:
        """
        Insert a document with a store-assigned id and return that id
        """
        try:
            _, doc_ref = self.db.collection(collection_name).add({
                **data,
                CREATED_AT: firestore.SERVER_TIMESTAMP,
                UPDATED_AT: firestore.SERVER_TIMESTAMP,
            })
            logger.info(f"Created document {doc_ref.id} in {collection_name}")
            return doc_ref.id
        except Exception as e:
            logger.error(f"Error creating document in {collection_name}: {str(e)}")
            raise StoreWriteError('create', collection_name, e) from e

    def get_by_id(self, collection_name, doc_id) -> Optional[Dict[str, Any]]:
        """
        Point lookup; None when the document does not exist
        """
        try:
            snapshot = self.db.collection(collection_name).document(doc_id).get()
        except Exception as e:
            logger.error(f"Error getting document {doc_id} from {collection_name}: {str(e)}")
            raise StoreReadError('get', collection_name, e) from e

        if not snapshot.exists:
            return None
        return self._to_dict(snapshot)

    def update(self, collection_name, doc_id, data):
        """
        Merge partial fields into an existing document and re-stamp updatedAt.
        A missing document is an error raised by the store.
        """
        try:
            self.db.collection(collection_name).document(doc_id).update({
                **data,
                UPDATED_AT: firestore.SERVER_TIMESTAMP,
            })
            logger.info(f"Updated document {doc_id} in {collection_name}")
        except Exception as e:
            logger.error(f"Error updating document {doc_id} in {collection_name}: {str(e)}")
            raise StoreWriteError('update', collection_name, e) from e

    def delete(self, collection_name, doc_id):
        try:
            self.db.collection(collection_name).document(doc_id).delete()
            logger.info(f"Deleted document {doc_id} from {collection_name}")
        except Exception as e:
            logger.error(f"Error deleting document {doc_id} from {collection_name}: {str(e)}")
            raise StoreWriteError('delete', collection_name, e) from e

    def query(self, collection_name, constraints=()) -> List[Dict[str, Any]]:
        """
        Run equality filters (in the given order) plus at most one sort
        """
        constraints = list(constraints)
        sorts = [c for c in constraints if isinstance(c, OrderBy)]
        filters = [c for c in constraints if isinstance(c, Where)]

        if len(sorts) + len(filters) != len(constraints):
            raise StoreReadError('query', collection_name,
                                 message=f"Malformed constraint for {collection_name} query")
        if len(sorts) > 1:
            raise StoreReadError('query', collection_name,
                                 message=f"At most one sort is allowed for {collection_name} query")

        try:
            query = self.db.collection(collection_name)
            for constraint in filters:
                query = query.where(filter=FieldFilter(constraint.field, '==', constraint.value))
            if sorts:
                direction = firestore.Query.DESCENDING if sorts[0].direction == 'desc' \
                    else firestore.Query.ASCENDING
                query = query.order_by(sorts[0].field, direction=direction)

            return [self._to_dict(doc) for doc in query.stream()]
        except Exception as e:
            logger.error(f"Error querying {collection_name}: {str(e)}")
            raise StoreReadError('query', collection_name, e) from e

    def batch_create(self, collection_name, documents) -> List[str]:
        """
        Insert all documents in one atomic batch and return their ids
        """
        documents = list(documents)
        if not documents:
            return []
        self._check_batch_size('batch_create', collection_name, len(documents))

        try:
            collection = self.db.collection(collection_name)
            batch = self.db.batch()
            doc_refs = []
            for data in documents:
                doc_ref = collection.document()
                batch.set(doc_ref, {
                    **data,
                    CREATED_AT: firestore.SERVER_TIMESTAMP,
                    UPDATED_AT: firestore.SERVER_TIMESTAMP,
                })
                doc_refs.append(doc_ref)

            batch.commit()
            logger.info(f"Batch created {len(doc_refs)} documents in {collection_name}")
            return [doc_ref.id for doc_ref in doc_refs]
        except Exception as e:
            logger.error(f"Error batch creating documents in {collection_name}: {str(e)}")
            raise StoreWriteError('batch_create', collection_name, e) from e

    def batch_update(self, collection_name, updates):
        """
        Apply partial updates atomically. Each update is an (id, data) pair
        or a mapping with 'id' and 'data'.
        """
        updates = [self._unpack_update(update) for update in updates]
        if not updates:
            return
        self._check_batch_size('batch_update', collection_name, len(updates))

        try:
            collection = self.db.collection(collection_name)
            batch = self.db.batch()
            for doc_id, data in updates:
                batch.update(collection.document(doc_id), {
                    **data,
                    UPDATED_AT: firestore.SERVER_TIMESTAMP,
                })

            batch.commit()
            logger.info(f"Batch updated {len(updates)} documents in {collection_name}")
        except Exception as e:
            logger.error(f"Error batch updating documents in {collection_name}: {str(e)}")
            raise StoreWriteError('batch_update', collection_name, e) from e

    def batch_delete(self, collection_name, ids):
        ids = list(ids)
        if not ids:
            return
        self._check_batch_size('batch_delete', collection_name, len(ids))

        try:
            collection = self.db.collection(collection_name)
            batch = self.db.batch()
            for doc_id in ids:
                batch.delete(collection.document(doc_id))

            batch.commit()
            logger.info(f"Batch deleted {len(ids)} documents from {collection_name}")
        except Exception as e:
            logger.error(f"Error batch deleting documents from {collection_name}: {str(e)}")
            raise StoreWriteError('batch_delete', collection_name, e) from e

    def _to_dict(self, snapshot):
        data = snapshot.to_dict() or {}
        data['id'] = snapshot.id
        return data

    def _unpack_update(self, update):
        if isinstance(update, dict):
            return update['id'], update['data']
        doc_id, data = update
        return doc_id, data

    def _check_batch_size(self, operation, collection_name, count):
        if count > MAX_BATCH_WRITES:
            logger.error(f"Refusing {operation} of {count} writes on {collection_name}")
            raise StoreWriteError(
                operation, collection_name,
                message=f"Batch of {count} writes exceeds the limit of {MAX_BATCH_WRITES}"
            )
