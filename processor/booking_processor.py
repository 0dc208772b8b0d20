"""Booking processor enforcing email shape and event references."""
import logging
import time
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Optional, Set

from processor.errors import DanglingReference, RecordNotFound, ValidationError
from processor.models import (
    BOOKING_EDITABLE_FIELDS,
    Booking,
    changed_fields,
    editable_values,
)
from processor.validators import normalize_email, require_text
from storage.interfaces import RecordStore

logger = logging.getLogger(__name__)


class BookingProcessor:
    """Processor for validating and committing bookings."""

    def __init__(self, store: RecordStore):
        self.store = store

    def create(self, booking: Booking) -> Booking:
        """Validate and commit a new booking."""
        staged = self.prepare(booking)
        return self.store.commit_booking(staged, is_new=True)

    def update(self, booking_id: str, changes: Dict[str, Any]) -> Booking:
        """
        Apply caller changes to a stored booking and commit them.

        Raises:
            RecordNotFound: If no booking with this ID is stored
        """
        booking_id = require_text('booking_id', booking_id)
        if not isinstance(changes, dict):
            raise ValidationError('changes', 'changes must be an object of field values')
        previous = self.store.get_booking(booking_id)
        if previous is None:
            raise RecordNotFound('booking_id', f'booking {booking_id} does not exist')

        proposed = replace(previous, **editable_values(changes, BOOKING_EDITABLE_FIELDS))
        staged = self.prepare(proposed, changed_fields(previous, proposed))
        return self.store.commit_booking(staged, is_new=False)

    def list_for_event(self, event_id: str) -> List[Booking]:
        """Return bookings referencing an event."""
        return self.store.list_bookings_for_event(require_text('event_id', event_id))

    def prepare(self, booking: Booking, changed: Optional[Set[str]] = None) -> Booking:
        """
        Build the normalized copy of a booking that will be committed.

        The email is checked on every transition; the referenced event is
        looked up only for new bookings or when event_id changed.

        Raises:
            ValidationError: If event_id or email is missing or malformed
            DanglingReference: If the referenced event does not exist
        """
        is_new = changed is None
        event_id = require_text('event_id', booking.event_id)
        email = normalize_email(booking.email)

        if is_new or 'event_id' in changed:
            if not self.store.event_exists(event_id):
                logger.warning(f"Booking references missing event {event_id}")
                raise DanglingReference('event_id', 'Referenced event does not exist')

        now = int(time.time())
        return replace(
            booking,
            booking_id=booking.booking_id or uuid.uuid4().hex,
            event_id=event_id,
            email=email,
            created_at=now if is_new else booking.created_at,
            updated_at=now
        )
