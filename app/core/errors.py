class BookingError(Exception):
    """Base class for booking flow errors."""


class ValidationError(BookingError):
    """Missing or malformed guest/operator input. Rendered as 400."""


class NotFoundError(BookingError):
    """Unknown catalog item or booking id. Rendered as 404."""


class StorageWriteFailure(BookingError):
    """Neither storage backend accepted a write. Logged on guest paths, 503 on admin paths."""


class PaymentAdapterFailure(BookingError):
    """The payment provider rejected or could not serve a request."""


class NotificationFailure(BookingError):
    """An email could not be delivered to one recipient."""
