from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from bookings.exceptions import BookingNotFound, ConcurrentModification, StoreReadFailure, StoreWriteFailure

SERVER_TIMESTAMP = object()


class FakeStore:
    """In-memory stand-in for FirestoreStore that records every write."""

    def __init__(self, collections=None):
        self.collections = {
            name: {record["id"]: dict(record) for record in records}
            for name, records in (collections or {}).items()
        }
        self.versions = {}
        self.writes = []
        self.fail_reads = False
        self.fail_writes = False

    def query(self, collection, filters=(), order_by=None, descending=False):
        if self.fail_reads:
            raise StoreReadFailure(f"Could not load {collection}")

        records = [dict(r) for r in self.collections.get(collection, {}).values()]
        for field, op, value in filters:
            if op == "==":
                records = [r for r in records if r.get(field) == value]
            elif op == "in":
                records = [r for r in records if r.get(field) in value]
            else:
                raise AssertionError(f"unsupported operator {op}")
        if order_by:
            # Firestore drops documents missing the ordering field.
            records = [r for r in records if r.get(order_by) is not None]
            records.sort(key=lambda r: r[order_by], reverse=descending)
        return records

    def get(self, collection, doc_id):
        if self.fail_reads:
            raise StoreReadFailure(f"Could not load {collection}/{doc_id}")
        record = self.collections.get(collection, {}).get(doc_id)
        if record is None:
            raise BookingNotFound(doc_id)
        return dict(record), self.versions.get((collection, doc_id), 0)

    def update_fields(self, collection, doc_id, fields, last_update_time=None):
        if self.fail_writes:
            raise StoreWriteFailure(f"Could not update {collection}/{doc_id}")
        record = self.collections.get(collection, {}).get(doc_id)
        if record is None:
            raise BookingNotFound(doc_id)
        version = self.versions.get((collection, doc_id), 0)
        if last_update_time is not None and last_update_time != version:
            raise ConcurrentModification(f"{collection}/{doc_id} was modified by someone else")

        self.writes.append((collection, doc_id, dict(fields)))
        now = timezone.now()
        record.update({k: now if v is SERVER_TIMESTAMP else v for k, v in fields.items()})
        self.versions[(collection, doc_id)] = version + 1

    def server_timestamp(self):
        return SERVER_TIMESTAMP

    def touch(self, collection, doc_id, **fields):
        """Simulate another operator writing to the record."""
        self.collections[collection][doc_id].update(fields)
        self.versions[(collection, doc_id)] = self.versions.get((collection, doc_id), 0) + 1


def at(days):
    return datetime(2030, 1, 1, tzinfo=dt_timezone.utc) + timedelta(days=days)


@pytest.fixture
def bookings():
    return [
        {"id": "b-pending-old", "status": "pending", "userName": "Ana", "userEmail": "ana@example.com",
         "venueId": "v1", "menuItems": ["m1", "m-gone"], "totalAmount": 5000, "createdAt": at(-10),
         "startDate": at(30), "endDate": at(31)},
        {"id": "b-pending-new", "status": "pending", "userName": "Ben", "userEmail": "ben@example.com",
         "venueId": "v-gone", "menuItems": [], "totalAmount": 1200, "createdAt": at(-2),
         "startDate": at(40), "endDate": at(41)},
        {"id": "b-approved", "status": "approved", "userName": "Cy", "userEmail": "cy@example.com",
         "venueId": "v1", "totalAmount": 800, "createdAt": at(-20), "approvedAt": at(-5),
         "startDate": at(10), "endDate": at(11)},
        {"id": "b-ongoing", "status": "ongoing", "userName": "Di", "userEmail": "di@example.com",
         "venueId": "v2", "totalAmount": 700, "createdAt": at(-21), "approvedAt": at(-6),
         "startedAt": at(-1), "startDate": at(-1), "endDate": at(1)},
        {"id": "b-paid", "status": "paid", "userName": "Ed", "userEmail": "ed@example.com",
         "venueId": "v2", "totalAmount": 1000, "createdAt": at(-22), "approvedAt": at(-7),
         "startDate": at(-3), "endDate": at(-2)},
        {"id": "b-finished", "status": "finished", "userName": "Flo", "userEmail": "flo@example.com",
         "venueId": "v1", "totalAmount": 2000, "createdAt": at(-30), "approvedAt": at(-25),
         "finishedAt": at(-15), "startDate": at(-20), "endDate": at(-19)},
    ]


@pytest.fixture
def store(bookings):
    return FakeStore({
        "bookings": bookings,
        "venues": [{"id": "v1", "name": "Casa Verde"}, {"id": "v2", "name": "Villa Azul"}],
        "menu": [{"id": "m1", "name": "Paella", "price": 1500}],
        "users": [{"id": "u1", "uid": "owner-uid", "fullName": "Owner One", "venueAssigned": "v2"}],
    })


@pytest.fixture
def api(store, monkeypatch, settings):
    settings.PAYMENT_WEBHOOK_SECRET = "hook-secret"
    monkeypatch.setattr("bookings.views.get_store", lambda: store)
    return APIClient()
