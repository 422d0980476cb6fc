class BookingStoreError(Exception):
    """Base class for failures talking to the booking document store."""


class StoreReadFailure(BookingStoreError):
    pass


class StoreWriteFailure(BookingStoreError):
    pass


class ConcurrentModification(StoreWriteFailure):
    """The record changed between the validating read and the write."""


class BookingNotFound(BookingStoreError):
    def __init__(self, booking_id):
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class InvalidTransition(Exception):
    def __init__(self, booking_id, action, status):
        self.booking_id = booking_id
        self.action = action
        self.status = status
        super().__init__(f"Cannot {action} booking {booking_id} while it is {status}")
