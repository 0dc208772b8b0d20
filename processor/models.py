"""Data models for events and bookings."""
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional, Set


@dataclass
class Event:
    """Event record as supplied by callers and as stored."""
    title: Optional[str] = None
    description: Optional[str] = None
    overview: Optional[str] = None
    image: Optional[str] = None
    venue: Optional[str] = None
    location: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    mode: Optional[str] = None
    audience: Optional[str] = None
    agenda: Optional[List[str]] = None
    organizer: Optional[str] = None
    tags: Optional[List[str]] = None
    event_id: Optional[str] = None
    slug: Optional[str] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None


@dataclass
class Booking:
    """Booking of one email address for one event."""
    event_id: Optional[str] = None
    email: Optional[str] = None
    booking_id: Optional[str] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None


# Fields callers may set; identities, slug and timestamps are system-managed
EVENT_EDITABLE_FIELDS = (
    'title', 'description', 'overview', 'image', 'venue', 'location',
    'date', 'time', 'mode', 'audience', 'agenda', 'organizer', 'tags',
)
EVENT_TEXT_FIELDS = tuple(
    name for name in EVENT_EDITABLE_FIELDS if name not in ('agenda', 'tags')
)
EVENT_LIST_FIELDS = ('agenda', 'tags')

BOOKING_EDITABLE_FIELDS = ('event_id', 'email')


def editable_values(data: Dict[str, Any], allowed: tuple) -> Dict[str, Any]:
    """Keep only caller-editable keys from a payload."""
    return {key: value for key, value in data.items() if key in allowed}


def event_from_dict(data: Dict[str, Any]) -> Event:
    """Build an Event from a payload, dropping unknown and system-managed keys."""
    return Event(**editable_values(data, EVENT_EDITABLE_FIELDS))


def booking_from_dict(data: Dict[str, Any]) -> Booking:
    """Build a Booking from a payload, dropping unknown and system-managed keys."""
    return Booking(**editable_values(data, BOOKING_EDITABLE_FIELDS))


def changed_fields(previous: Any, proposed: Any) -> Set[str]:
    """
    Compare a committed snapshot with a proposed record.

    Args:
        previous: Record as last committed
        proposed: Record with caller changes applied

    Returns:
        Names of fields whose values differ
    """
    return {
        f.name for f in fields(previous)
        if getattr(previous, f.name) != getattr(proposed, f.name)
    }
