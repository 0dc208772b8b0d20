"""Error kinds raised by the normalization and validation pipeline."""


class RecordError(Exception):
    """Base error for event and booking records.

    Carries the offending field name and a human-readable reason so the
    caller can map it to a user-facing message.
    """

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class ValidationError(RecordError):
    """Input rejected before any store access."""


class RequiredFieldMissing(ValidationError):
    """A required field is absent."""


class EmptyField(ValidationError):
    """A required text field is blank after trimming."""


class EmptyArray(ValidationError):
    """A required list field has no elements."""


class InvalidElement(ValidationError):
    """A list field contains an absent or blank element."""


class InvalidEmail(ValidationError):
    """Email does not match the address pattern."""


class InvalidDate(ValidationError):
    """Date text cannot be parsed as a calendar date."""


class InvalidTime(ValidationError):
    """Time text is not a valid 12/24-hour time or range."""


class InvalidSlug(ValidationError):
    """Title produces an empty slug."""


class SlugConflict(RecordError):
    """Slug is already owned by another event."""


class DanglingReference(RecordError):
    """Booking references an event that does not exist."""


class RecordNotFound(RecordError):
    """Record to update does not exist."""


class StoreError(RecordError):
    """Transport or availability failure from the backing store."""
