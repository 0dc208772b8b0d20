"""Store interface required by the event and booking processors."""
from abc import ABC, abstractmethod
from typing import List, Optional

from processor.models import Booking, Event


class RecordStore(ABC):
    """Interface for event and booking persistence operations."""

    @abstractmethod
    def event_exists(self, event_id: str) -> bool:
        """Check if an event exists."""
        ...

    @abstractmethod
    def slug_taken(self, slug: str, excluding_id: Optional[str] = None) -> bool:
        """Check if a slug is owned by an event other than excluding_id."""
        ...

    @abstractmethod
    def get_event(self, event_id: str) -> Optional[Event]:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def get_event_by_slug(self, slug: str) -> Optional[Event]:
        """Return an event by slug, or None if not found."""
        ...

    @abstractmethod
    def list_events(self) -> List[Event]:
        """Return all events."""
        ...

    @abstractmethod
    def commit_event(self, event: Event, previous_slug: Optional[str] = None) -> Event:
        """
        Atomically write an event.

        previous_slug is None for a new event. Raises SlugConflict when the
        slug is owned by another event.
        """
        ...

    @abstractmethod
    def get_booking(self, booking_id: str) -> Optional[Booking]:
        """Return a booking by ID, or None if not found."""
        ...

    @abstractmethod
    def list_bookings_for_event(self, event_id: str) -> List[Booking]:
        """Return all bookings referencing an event."""
        ...

    @abstractmethod
    def commit_booking(self, booking: Booking, is_new: bool) -> Booking:
        """Atomically write a booking."""
        ...
