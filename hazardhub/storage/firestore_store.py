"""
Firestore-backed store.

Compare-and-swap writes run inside a Firestore transaction so concurrent
confirmers on different app instances cannot both cross a threshold.
"""

from typing import Any, Dict, List, Optional
import logging

from firebase_admin import firestore

from hazardhub.utils.firestore_helpers import apply_equality_filters
from .base import KeyValueStore, check_version

logger = logging.getLogger(__name__)


class FirestoreStore(KeyValueStore):

    def __init__(self, db: firestore.Client):
        self.db = db

    def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        doc = self.db.collection(collection).document(record_id).get()
        if not doc.exists:
            return None
        return doc.to_dict()

    def list(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        query = apply_equality_filters(self.db.collection(collection), filters)
        return [doc.to_dict() for doc in query.stream()]

    def put(
        self,
        collection: str,
        record_id: str,
        record: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        doc_ref = self.db.collection(collection).document(record_id)

        if expected_version is None:
            doc_ref.set(record)
            return

        @firestore.transactional
        def _compare_and_set(transaction, ref):
            snapshot = ref.get(transaction=transaction)
            current = snapshot.to_dict() if snapshot.exists else None
            check_version(collection, record_id, current, expected_version)
            transaction.set(ref, record)

        _compare_and_set(self.db.transaction(), doc_ref)

    def delete(self, collection: str, record_id: str) -> None:
        self.db.collection(collection).document(record_id).delete()

    def ping(self) -> bool:
        # Round-trip to the backend; connection errors propagate to the caller
        collections = list(self.db.collections())
        logger.debug(f"[FIRESTORE] Ping ok, {len(collections)} collections visible")
        return True
