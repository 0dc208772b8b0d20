"""Event processor for validating and normalizing event data."""
import logging
import time
import uuid
from dataclasses import replace
from typing import Any, Dict, Optional, Set

from processor.errors import InvalidSlug, RecordNotFound, SlugConflict, ValidationError
from processor.models import (
    EVENT_EDITABLE_FIELDS,
    EVENT_LIST_FIELDS,
    EVENT_TEXT_FIELDS,
    Event,
    changed_fields,
    editable_values,
)
from processor.normalize import normalize_date, normalize_time, slugify
from processor.validators import require_text, require_text_list
from storage.interfaces import RecordStore

logger = logging.getLogger(__name__)


class EventProcessor:
    """Processor for validating, normalizing and committing events."""

    def __init__(self, store: RecordStore):
        """
        Args:
            store: Backing store used for slug checks and commits
        """
        self.store = store

    def create(self, event: Event) -> Event:
        """
        Validate, normalize and commit a new event.

        Args:
            event: Caller-supplied event

        Returns:
            The committed event with slug, identity and timestamps set
        """
        staged = self.prepare(event)
        return self.store.commit_event(staged)

    def update(self, event_id: str, changes: Dict[str, Any]) -> Event:
        """
        Apply caller changes to a stored event and commit them.

        Only editable fields are taken from changes. Slug, date and time
        are recomputed only when the fields they derive from changed.

        Args:
            event_id: Identity of the stored event
            changes: Field values to change

        Returns:
            The committed event

        Raises:
            RecordNotFound: If no event with this ID is stored
        """
        event_id = require_text('event_id', event_id)
        if not isinstance(changes, dict):
            raise ValidationError('changes', 'changes must be an object of field values')
        previous = self.store.get_event(event_id)
        if previous is None:
            raise RecordNotFound('event_id', f'event {event_id} does not exist')

        proposed = replace(previous, **editable_values(changes, EVENT_EDITABLE_FIELDS))
        changed = changed_fields(previous, proposed)
        logger.info(f"Updating event {event_id}, changed fields: {sorted(changed)}")

        staged = self.prepare(proposed, changed)
        return self.store.commit_event(staged, previous_slug=previous.slug)

    def prepare(self, event: Event, changed: Optional[Set[str]] = None) -> Event:
        """
        Build the normalized copy of an event that will be committed.

        The input event is left untouched, so a failed commit never leaks
        normalized values into the caller's record.

        Args:
            event: Event to validate
            changed: Fields changed since the last commit, None for a new event

        Returns:
            Staged Event ready for commit

        Raises:
            ValidationError: If any field is missing or malformed
            SlugConflict: If another event already owns the slug
        """
        is_new = changed is None
        values = {
            name: require_text(name, getattr(event, name))
            for name in EVENT_TEXT_FIELDS
        }
        for name in EVENT_LIST_FIELDS:
            values[name] = require_text_list(name, getattr(event, name))

        event_id = event.event_id or uuid.uuid4().hex

        if is_new or 'title' in changed:
            values['slug'] = self._generate_slug(values['title'], event_id)

        # Normalize date and time for consistency
        if is_new or 'date' in changed:
            values['date'] = normalize_date(values['date'])
        if is_new or 'time' in changed:
            values['time'] = normalize_time(values['time'])

        now = int(time.time())
        if is_new:
            values['created_at'] = now
        values['updated_at'] = now

        return replace(event, event_id=event_id, **values)

    def _generate_slug(self, title: str, event_id: str) -> str:
        """
        Derive the slug for a title and check it is free.

        Args:
            title: Trimmed event title
            event_id: Event allowed to already own the slug

        Returns:
            Slug string
        """
        slug = slugify(title)
        if not slug:
            logger.warning(f"Title '{title}' produces an empty slug")
            raise InvalidSlug('slug', f"title '{title}' does not produce a usable slug")

        if self.store.slug_taken(slug, excluding_id=event_id):
            logger.warning(f"Slug '{slug}' is already in use")
            raise SlugConflict('slug', f"slug '{slug}' is already in use")

        return slug
