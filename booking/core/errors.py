"""Error taxonomy shared by the booking core and the HTTP layer.

Each error carries a stable machine-readable ``kind`` and the HTTP status the
API answers with. Messages are written for end users and never include
internal details such as file paths or driver errors.
"""


class BookingError(Exception):
    """Base class for every error the core reports to its callers."""

    kind = 'BookingError'
    status_code = 500
    default_message = 'Unexpected error.'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingError):
    kind = 'ValidationError'
    status_code = 400
    default_message = 'Request is invalid.'


class SlotUnavailable(BookingError):
    kind = 'SlotUnavailable'
    status_code = 409
    default_message = 'This appointment slot is no longer available.'


class InvalidCredentials(BookingError):
    kind = 'InvalidCredentials'
    status_code = 401
    default_message = 'Incorrect password.'


class Unauthorized(BookingError):
    kind = 'Unauthorized'
    status_code = 401
    default_message = 'Unauthorized'


class NotFound(BookingError):
    kind = 'NotFound'
    status_code = 404
    default_message = 'Appointment not found.'


class StorageError(BookingError):
    kind = 'StorageError'
    status_code = 503
    default_message = 'Storage unavailable. Try again shortly.'
