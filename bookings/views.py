import logging

from django.conf import settings
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from . import statistics
from .exceptions import (
    BookingNotFound,
    BookingStoreError,
    ConcurrentModification,
    InvalidTransition,
    StoreReadFailure,
    StoreWriteFailure,
)
from .lifecycle import ACTIVE_VIEW, PENDING_VIEW, BookingLifecycleController
from .models import OWNER_ACTIONS, BookingAction, BookingStatus, action_for_status
from .references import ReferenceDirectory
from .utils import get_store

logger = logging.getLogger(__name__)

# Most specific first.
ERROR_STATUS = [
    (InvalidTransition, status.HTTP_409_CONFLICT),
    (BookingNotFound, status.HTTP_404_NOT_FOUND),
    (ConcurrentModification, status.HTTP_409_CONFLICT),
    (StoreWriteFailure, status.HTTP_503_SERVICE_UNAVAILABLE),
    (StoreReadFailure, status.HTTP_503_SERVICE_UNAVAILABLE),
]


# Rejections the caller caused; anything else is the store failing.
CLIENT_ERRORS = (InvalidTransition, BookingNotFound, ConcurrentModification)


def log_failure(message, error, *args):
    if isinstance(error, CLIENT_ERRORS):
        logger.warning(message + ": %s", *args, error)
    else:
        logger.error(message + ": %s", *args, error)


def error_response(error):
    for error_class, http_status in ERROR_STATUS:
        if isinstance(error, error_class):
            return Response({"error": str(error)}, status=http_status)
    return Response({"error": str(error)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)


def status_label(value):
    try:
        return BookingStatus(value).label
    except ValueError:
        return value


def describe_booking(booking, references):
    """Booking dict enriched with the display fields the dashboards render."""
    booking_status = booking.get("status")
    action = action_for_status(booking_status)
    return {
        **booking,
        "venueName": references.venue_name(booking.get("venueId")),
        "menuItems": [references.menu_item(item_id) for item_id in booking.get("menuItems") or []],
        "totalAmount": booking.get("totalAmount") or 0,
        "statusLabel": status_label(booking_status),
        "awaitingPayment": booking_status == BookingStatus.ONGOING,
        "availableAction": action.value if action else None,
    }


def owner_profile(store, uid, references):
    users = store.query(settings.USERS_COLLECTION, filters=[("uid", "==", uid)])
    if not users:
        return None
    profile = users[0]
    return {
        "fullName": profile.get("fullName"),
        "venueName": references.assigned_venue_name(profile.get("venueAssigned")),
    }


def admin_payload(controller, references):
    return {
        "summary": statistics.admin_summary(controller.bookings, references),
        "bookings": [describe_booking(b, references) for b in controller.bookings],
    }


def owner_payload(controller, references):
    return {
        "summary": statistics.owner_summary(controller.bookings, timezone.now()),
        "activeBookings": [describe_booking(b, references) for b in controller.active_bookings],
        "completedBookings": [describe_booking(b, references) for b in controller.completed_bookings],
    }


# 🗂️ Administrator: pending bookings awaiting approval
@api_view(['GET'])
def admin_bookings(request):
    store = get_store()
    controller = BookingLifecycleController(store, view=PENDING_VIEW)
    try:
        controller.refresh()
        references = ReferenceDirectory.load(store)
    except BookingStoreError as e:
        logger.error("Admin dashboard load failed: %s", e)
        return error_response(e)

    return Response(admin_payload(controller, references))


@api_view(['POST'])
def approve_booking(request, booking_id):
    store = get_store()
    controller = BookingLifecycleController(store, view=PENDING_VIEW)
    try:
        controller.transition(booking_id, BookingAction.APPROVE)
        references = ReferenceDirectory.load(store)
    except (InvalidTransition, BookingStoreError) as e:
        log_failure("Error approving booking %s", e, booking_id)
        return error_response(e)

    return Response({
        "message": "Booking approved successfully!",
        **admin_payload(controller, references),
    })


# 🏠 Owner: approved bookings through to completion
@api_view(['GET'])
def owner_bookings(request):
    store = get_store()
    controller = BookingLifecycleController(store, view=ACTIVE_VIEW)
    uid = request.query_params.get("uid")
    try:
        controller.refresh()
        references = ReferenceDirectory.load(store)
        profile = owner_profile(store, uid, references) if uid else None
    except BookingStoreError as e:
        logger.error("Owner dashboard load failed: %s", e)
        return error_response(e)

    return Response({"profile": profile, **owner_payload(controller, references)})


@api_view(['POST'])
def owner_booking_action(request, booking_id, action):
    if action not in OWNER_ACTIONS:
        return Response({"error": f"Unknown action '{action}'"}, status=status.HTTP_400_BAD_REQUEST)

    store = get_store()
    controller = BookingLifecycleController(store, view=ACTIVE_VIEW)
    try:
        controller.transition(booking_id, action)
        references = ReferenceDirectory.load(store)
    except (InvalidTransition, BookingStoreError) as e:
        log_failure("Error running %s on booking %s", e, action, booking_id)
        return error_response(e)

    return Response(owner_payload(controller, references))


# 📡 Payment provider confirms an ongoing event has been paid
@csrf_exempt
@api_view(['POST'])
def payment_confirmation(request, booking_id):
    incoming_key = request.headers.get("x-api-key")
    if not settings.PAYMENT_WEBHOOK_SECRET or incoming_key != settings.PAYMENT_WEBHOOK_SECRET:
        logger.warning("Payment confirmation rejected for booking %s: invalid x-api-key", booking_id)
        return Response({"error": "Unauthorized webhook"}, status=status.HTTP_403_FORBIDDEN)

    data = request.data
    if not isinstance(data, dict):
        return Response({"error": "Invalid JSON"}, status=status.HTTP_400_BAD_REQUEST)

    payment_status = data.get("payment_status_description") or data.get("payment_status")
    if not payment_status:
        return Response({"error": "Missing payment_status"}, status=status.HTTP_400_BAD_REQUEST)

    if str(payment_status).upper() != "COMPLETED":
        logger.info("Payment for booking %s not completed (%s), ignoring", booking_id, payment_status)
        return Response({"status": "ignored", "booking_id": booking_id})

    controller = BookingLifecycleController(get_store(), view=ACTIVE_VIEW)
    try:
        controller.transition(booking_id, BookingAction.PAY, refresh=False)
    except (InvalidTransition, BookingStoreError) as e:
        log_failure("Payment confirmation failed for booking %s", e, booking_id)
        return error_response(e)

    logger.info("Payment recorded for booking %s", booking_id)
    return Response({"status": "received", "booking_id": booking_id, "bookingStatus": BookingStatus.PAID.value})
