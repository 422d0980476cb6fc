from collections import namedtuple

from django.db import models


class BookingStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    ONGOING = "ongoing", "Event Ongoing"
    PAID = "paid", "Payment Received"
    READY = "ready", "Villa Ready"
    FINISHED = "finished", "Event Completed"


class BookingAction(models.TextChoices):
    APPROVE = "approve", "Approve Booking"
    ACCEPT = "accept", "Accept"
    PAY = "pay", "Payment Confirmed"
    MARK_READY = "mark_ready", "Mark Villa as Ready"
    FINISH = "finish", "Mark as Finished"


Transition = namedtuple("Transition", ["source", "target", "timestamp_field"])

# Single source of truth for the booking lifecycle.
TRANSITIONS = {
    BookingAction.APPROVE: Transition(BookingStatus.PENDING, BookingStatus.APPROVED, "approvedAt"),
    BookingAction.ACCEPT: Transition(BookingStatus.APPROVED, BookingStatus.ONGOING, "startedAt"),
    BookingAction.PAY: Transition(BookingStatus.ONGOING, BookingStatus.PAID, None),
    BookingAction.MARK_READY: Transition(BookingStatus.PAID, BookingStatus.READY, "readyAt"),
    BookingAction.FINISH: Transition(BookingStatus.READY, BookingStatus.FINISHED, "finishedAt"),
}

ACTIVE_STATUSES = [
    BookingStatus.APPROVED,
    BookingStatus.ONGOING,
    BookingStatus.PAID,
    BookingStatus.READY,
    BookingStatus.FINISHED,
]

REVENUE_STATUSES = {BookingStatus.PAID.value, BookingStatus.READY.value, BookingStatus.FINISHED.value}

# Actions an operator may trigger from a dashboard; `pay` only arrives via the payment hook.
OWNER_ACTIONS = {BookingAction.ACCEPT.value, BookingAction.MARK_READY.value, BookingAction.FINISH.value}


def action_for_status(status):
    """Return the operator action available from `status`, or None."""
    for action, transition in TRANSITIONS.items():
        if transition.source == status and action != BookingAction.PAY:
            return action
    return None
