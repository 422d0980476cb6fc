import logging

from django.conf import settings

from .exceptions import InvalidTransition
from .models import ACTIVE_STATUSES, TRANSITIONS, BookingAction, BookingStatus

logger = logging.getLogger(__name__)

PENDING_VIEW = "pending"
ACTIVE_VIEW = "active"


class BookingLifecycleController:
    """
    Drives bookings through the status table in `bookings.models` and keeps a
    cached list of one dashboard view (pending or active) in sync with the store.

    The cached list is only replaced after a successful read, so a failing
    store leaves the previous list in place.
    """

    def __init__(self, store, view=ACTIVE_VIEW):
        self.store = store
        self.view = view
        self.bookings = []

    @property
    def collection(self):
        return settings.BOOKINGS_COLLECTION

    def list_pending(self):
        return self.store.query(
            self.collection,
            filters=[("status", "==", BookingStatus.PENDING.value)],
            order_by="createdAt",
            descending=True,
        )

    def list_active(self):
        return self.store.query(
            self.collection,
            filters=[("status", "in", [status.value for status in ACTIVE_STATUSES])],
            order_by="approvedAt",
            descending=True,
        )

    def refresh(self, view=None):
        view = view or self.view
        bookings = self.list_pending() if view == PENDING_VIEW else self.list_active()
        self.view = view
        self.bookings = bookings
        return bookings

    @property
    def active_bookings(self):
        return [b for b in self.bookings if b.get("status") != BookingStatus.FINISHED]

    @property
    def completed_bookings(self):
        return [b for b in self.bookings if b.get("status") == BookingStatus.FINISHED]

    def transition(self, booking_id, action, refresh=True):
        """
        Apply `action` to one booking and return the refreshed list.

        With refresh=False only the write happens and the cached list is left
        as it is.
        """
        action = BookingAction(action)
        rule = TRANSITIONS[action]

        booking, update_time = self.store.get(self.collection, booking_id)
        status = booking.get("status")
        if status != rule.source:
            logger.warning("Rejected %s on booking %s (status=%s)", action.value, booking_id, status)
            raise InvalidTransition(booking_id, action.value, status)

        fields = {"status": rule.target.value}
        if rule.timestamp_field:
            fields[rule.timestamp_field] = self.store.server_timestamp()

        self.store.update_fields(self.collection, booking_id, fields, last_update_time=update_time)
        logger.info("Booking %s: %s -> %s", booking_id, rule.source.value, rule.target.value)

        if not refresh:
            return self.bookings
        return self.refresh(PENDING_VIEW if action == BookingAction.APPROVE else ACTIVE_VIEW)
