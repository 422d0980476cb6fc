"""Dashboard summary figures derived from an in-memory list of bookings."""
from .models import REVENUE_STATUSES, BookingStatus


def total_revenue(bookings):
    return sum(
        booking.get("totalAmount") or 0
        for booking in bookings
        if booking.get("status") in REVENUE_STATUSES
    )


def active_count(bookings):
    return sum(1 for booking in bookings if booking.get("status") == BookingStatus.APPROVED)


def completed_count(bookings):
    return sum(1 for booking in bookings if booking.get("status") == BookingStatus.FINISHED)


def upcoming_count(bookings, now):
    """Unfinished bookings whose event starts after `now`; no startDate means not upcoming."""
    return sum(
        1
        for booking in bookings
        if booking.get("status") != BookingStatus.FINISHED
        and booking.get("startDate") is not None
        and booking["startDate"] > now
    )


def owner_summary(bookings, now):
    return {
        "totalRevenue": total_revenue(bookings),
        "activeBookings": active_count(bookings),
        "completedBookings": completed_count(bookings),
        "upcomingBookings": upcoming_count(bookings, now),
    }


def admin_summary(pending_bookings, references):
    return {
        "totalVenues": len(references.venues),
        "menuItems": len(references.menu_items),
        "pendingBookings": len(pending_bookings),
    }
