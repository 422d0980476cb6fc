import os
import json
import logging

import firebase_admin
from django.conf import settings
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions

from .exceptions import BookingNotFound, ConcurrentModification, StoreReadFailure, StoreWriteFailure

logger = logging.getLogger(__name__)


def get_firestore_client():
    """
    Initialize Firebase once per process and return a Firestore client.

    Credentials come from FIREBASE_KEY (service account JSON string), then
    FIREBASE_KEY_PATH (file on disk), then application default credentials.
    """
    if not firebase_admin._apps:
        firebase_key_json = settings.FIREBASE_KEY
        cred_path = settings.FIREBASE_KEY_PATH
        if firebase_key_json:
            cred = credentials.Certificate(json.loads(firebase_key_json))
            firebase_admin.initialize_app(cred)
        elif cred_path and os.path.exists(cred_path):
            firebase_admin.initialize_app(credentials.Certificate(cred_path))
        else:
            logger.warning("FIREBASE_KEY not set, falling back to application default credentials")
            firebase_admin.initialize_app()
        logger.info("Firebase connected")
    return firestore.client()


class FirestoreStore:
    """Thin document-store adapter: records come back as plain dicts with their id."""

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_firestore_client()
        return self._client

    def query(self, collection, filters=(), order_by=None, descending=False):
        q = self.client.collection(collection)
        for field, op, value in filters:
            q = q.where(filter=firestore.FieldFilter(field, op, value))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            q = q.order_by(order_by, direction=direction)

        try:
            return [{"id": doc.id, **doc.to_dict()} for doc in q.stream()]
        except google_exceptions.GoogleAPIError as e:
            logger.error("Error querying %s: %s", collection, e)
            raise StoreReadFailure(f"Could not load {collection}") from e

    def get(self, collection, doc_id):
        try:
            snapshot = self.client.collection(collection).document(doc_id).get()
        except google_exceptions.GoogleAPIError as e:
            logger.error("Error reading %s/%s: %s", collection, doc_id, e)
            raise StoreReadFailure(f"Could not load {collection}/{doc_id}") from e

        if not snapshot.exists:
            raise BookingNotFound(doc_id)
        return {"id": snapshot.id, **snapshot.to_dict()}, snapshot.update_time

    def update_fields(self, collection, doc_id, fields, last_update_time=None):
        doc_ref = self.client.collection(collection).document(doc_id)
        option = None
        if last_update_time is not None:
            option = self.client.write_option(last_update_time=last_update_time)

        try:
            doc_ref.update(fields, option=option)
        except google_exceptions.FailedPrecondition as e:
            logger.warning("Concurrent update on %s/%s: %s", collection, doc_id, e)
            raise ConcurrentModification(f"{collection}/{doc_id} was modified by someone else") from e
        except google_exceptions.NotFound as e:
            raise BookingNotFound(doc_id) from e
        except google_exceptions.GoogleAPIError as e:
            logger.error("Error updating %s/%s: %s", collection, doc_id, e)
            raise StoreWriteFailure(f"Could not update {collection}/{doc_id}") from e

    def server_timestamp(self):
        return firestore.SERVER_TIMESTAMP


_store = None


def get_store():
    global _store
    if _store is None:
        _store = FirestoreStore()
    return _store
