from django.urls import path
from .views import admin_bookings, approve_booking, owner_bookings, owner_booking_action, payment_confirmation

urlpatterns = [
    path("admin/bookings/", admin_bookings, name="admin-bookings"),
    path("admin/bookings/<str:booking_id>/approve/", approve_booking, name="approve-booking"),
    path("owner/bookings/", owner_bookings, name="owner-bookings"),
    path("owner/bookings/<str:booking_id>/<str:action>/", owner_booking_action, name="owner-booking-action"),
    path("bookings/<str:booking_id>/payment/", payment_confirmation, name="payment-confirmation"),
]
