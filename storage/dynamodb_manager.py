"""DynamoDB manager for event and booking storage operations."""
import logging
from typing import Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from processor.errors import RecordNotFound, SlugConflict, StoreError
from processor.models import Booking, Event
from storage.interfaces import RecordStore

logger = logging.getLogger(__name__)


class DynamoDBManager(RecordStore):
    """Manager for DynamoDB operations.

    Events and their slug claims share the events table. A slug claim is an
    item keyed ``SLUG#<slug>`` that names its owning event; creating it with
    ``attribute_not_exists`` inside the same transaction as the event write
    is what keeps slugs unique under concurrent writers.

    The manager owns its boto3 resource and client. Construct one per
    process (or per Lambda container) and pass it to the processors.
    """

    SLUG_PREFIX = 'SLUG#'
    EVENT_RECORD = 'event'
    SLUG_RECORD = 'slug'
    BOOKING_EVENT_INDEX = 'event-index'

    def __init__(
        self,
        events_table: str,
        bookings_table: str,
        region_name: Optional[str] = None
    ):
        """
        Initialize DynamoDB resource, client and table references.

        Args:
            events_table: Name of the events table (hash key event_id)
            bookings_table: Name of the bookings table (hash key booking_id)
            region_name: AWS region, boto3 default chain when None
        """
        self.events_table_name = events_table
        self.bookings_table_name = bookings_table
        self.dynamodb = boto3.resource('dynamodb', region_name=region_name)
        self.client = boto3.client('dynamodb', region_name=region_name)
        self.events_table = self.dynamodb.Table(events_table)
        self.bookings_table = self.dynamodb.Table(bookings_table)
        self.serializer = TypeSerializer()
        logger.info(
            f"Initialized DynamoDBManager for tables: {events_table}, "
            f"{bookings_table}"
        )

    # Events

    def event_exists(self, event_id: str) -> bool:
        """
        Check whether an event with this ID is stored.

        Args:
            event_id: Event identity

        Returns:
            True if the event exists
        """
        item = self._get_event_item(event_id)
        return item is not None and item.get('record_type') == self.EVENT_RECORD

    def slug_taken(self, slug: str, excluding_id: Optional[str] = None) -> bool:
        """
        Check whether a slug is claimed by an event other than excluding_id.

        Args:
            slug: Slug to look up
            excluding_id: Event allowed to own the slug

        Returns:
            True if another event owns the slug
        """
        claim = self._get_event_item(self.SLUG_PREFIX + slug)
        if claim is None:
            return False
        return claim.get('owner_id') != excluding_id

    def get_event(self, event_id: str) -> Optional[Event]:
        """Return the stored event, or None."""
        item = self._get_event_item(event_id)
        if item is None or item.get('record_type') != self.EVENT_RECORD:
            return None
        return self._item_to_event(item)

    def get_event_by_slug(self, slug: str) -> Optional[Event]:
        """Return the event owning a slug, or None."""
        claim = self._get_event_item(self.SLUG_PREFIX + slug)
        if claim is None:
            return None
        return self.get_event(claim['owner_id'])

    def list_events(self) -> List[Event]:
        """
        Retrieve all events using a paginated Scan.

        Returns:
            List of Event objects, slug claims excluded
        """
        logger.info("Scanning DynamoDB table for all events")
        items = self._scan(
            self.events_table,
            FilterExpression=Attr('record_type').eq(self.EVENT_RECORD)
        )
        events = [self._item_to_event(item) for item in items]
        logger.info(f"Retrieved {len(events)} events from DynamoDB")
        return events

    def commit_event(self, event: Event, previous_slug: Optional[str] = None) -> Event:
        """
        Write an event and its slug claim in one transaction.

        Args:
            event: Fully prepared event
            previous_slug: Slug last committed for this event, None when new

        Returns:
            The committed event

        Raises:
            SlugConflict: If another event owns the slug
            RecordNotFound: If an update targets a missing event
            StoreError: On any other store failure
        """
        is_new = previous_slug is None
        slug_moved = is_new or event.slug != previous_slug
        owner = {':owner': {'S': event.event_id}}

        transact_items = [{
            'Put': {
                'TableName': self.events_table_name,
                'Item': self._serialize(self._event_to_item(event)),
                'ConditionExpression': (
                    'attribute_not_exists(event_id)' if is_new
                    else 'attribute_exists(event_id)'
                ),
            }
        }]

        if slug_moved:
            transact_items.append({
                'Put': {
                    'TableName': self.events_table_name,
                    'Item': self._serialize({
                        'event_id': self.SLUG_PREFIX + event.slug,
                        'record_type': self.SLUG_RECORD,
                        'owner_id': event.event_id,
                    }),
                    'ConditionExpression': (
                        'attribute_not_exists(event_id) OR owner_id = :owner'
                    ),
                    'ExpressionAttributeValues': owner,
                }
            })
        if slug_moved and not is_new:
            transact_items.append({
                'Delete': {
                    'TableName': self.events_table_name,
                    'Key': {'event_id': {'S': self.SLUG_PREFIX + previous_slug}},
                    'ConditionExpression': (
                        'attribute_not_exists(event_id) OR owner_id = :owner'
                    ),
                    'ExpressionAttributeValues': owner,
                }
            })

        try:
            self.client.transact_write_items(TransactItems=transact_items)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') == 'TransactionCanceledException':
                raise self._cancellation_error(e, event, is_new, slug_moved) from e
            logger.error(f"Error committing event {event.event_id}: {e}")
            raise StoreError('event', f'Failed to write event: {e}') from e
        except BotoCoreError as e:
            logger.error(f"Error committing event {event.event_id}: {e}")
            raise StoreError('event', f'Failed to write event: {e}') from e

        logger.info(
            f"Committed {'new' if is_new else 'updated'} event "
            f"{event.event_id} with slug '{event.slug}'"
        )
        return event

    # Bookings

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        """Return the stored booking, or None."""
        try:
            response = self.bookings_table.get_item(Key={'booking_id': booking_id})
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error reading booking {booking_id}: {e}")
            raise StoreError('booking_id', f'Failed to read booking: {e}') from e

        item = response.get('Item')
        return self._item_to_booking(item) if item else None

    def list_bookings_for_event(self, event_id: str) -> List[Booking]:
        """
        Query bookings referencing an event through the event index.

        Args:
            event_id: Event identity

        Returns:
            List of Booking objects
        """
        kwargs = {
            'IndexName': self.BOOKING_EVENT_INDEX,
            'KeyConditionExpression': Key('event_id').eq(event_id),
        }
        items = []
        try:
            response = self.bookings_table.query(**kwargs)
            items.extend(response.get('Items', []))

            while 'LastEvaluatedKey' in response:
                response = self.bookings_table.query(
                    ExclusiveStartKey=response['LastEvaluatedKey'], **kwargs
                )
                items.extend(response.get('Items', []))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error querying bookings for event {event_id}: {e}")
            raise StoreError('event_id', f'Failed to query bookings: {e}') from e

        logger.info(f"Retrieved {len(items)} bookings for event {event_id}")
        return [self._item_to_booking(item) for item in items]

    def commit_booking(self, booking: Booking, is_new: bool) -> Booking:
        """
        Write a booking with a conditional put.

        Args:
            booking: Fully prepared booking
            is_new: True when creating

        Returns:
            The committed booking

        Raises:
            RecordNotFound: If an update targets a missing booking
            StoreError: On any other store failure
        """
        condition = (
            'attribute_not_exists(booking_id)' if is_new
            else 'attribute_exists(booking_id)'
        )
        try:
            self.bookings_table.put_item(
                Item=self._booking_to_item(booking),
                ConditionExpression=condition
            )
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code')
            if code == 'ConditionalCheckFailedException' and not is_new:
                raise RecordNotFound(
                    'booking_id', f'booking {booking.booking_id} does not exist'
                ) from e
            logger.error(f"Error committing booking {booking.booking_id}: {e}")
            raise StoreError('booking', f'Failed to write booking: {e}') from e
        except BotoCoreError as e:
            logger.error(f"Error committing booking {booking.booking_id}: {e}")
            raise StoreError('booking', f'Failed to write booking: {e}') from e

        logger.info(
            f"Committed {'new' if is_new else 'updated'} booking "
            f"{booking.booking_id} for event {booking.event_id}"
        )
        return booking

    # Helpers

    def _get_event_item(self, key: str) -> Optional[dict]:
        try:
            response = self.events_table.get_item(Key={'event_id': key})
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error reading item {key}: {e}")
            raise StoreError('event_id', f'Failed to read event: {e}') from e
        return response.get('Item')

    def _scan(self, table, **kwargs) -> List[dict]:
        try:
            # Scan the table, following pagination
            response = table.scan(**kwargs)
            items = response.get('Items', [])

            while 'LastEvaluatedKey' in response:
                response = table.scan(
                    ExclusiveStartKey=response['LastEvaluatedKey'], **kwargs
                )
                items.extend(response.get('Items', []))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error scanning DynamoDB table {table.name}: {e}")
            raise StoreError('table', f'Failed to scan {table.name}: {e}') from e
        return items

    def _cancellation_error(
        self,
        error: ClientError,
        event: Event,
        is_new: bool,
        slug_moved: bool
    ) -> Exception:
        """
        Map a cancelled transaction to the error it represents.

        Cancellation reasons line up with the transaction items: the event
        put first, then the slug claim.
        """
        reasons = [
            reason.get('Code')
            for reason in error.response.get('CancellationReasons', [])
        ]

        if slug_moved and len(reasons) > 1 and reasons[1] == 'ConditionalCheckFailed':
            logger.warning(f"Slug '{event.slug}' is already in use")
            return SlugConflict('slug', f"slug '{event.slug}' is already in use")

        if reasons and reasons[0] == 'ConditionalCheckFailed':
            if is_new:
                return StoreError('event_id', f'event {event.event_id} already exists')
            return RecordNotFound('event_id', f'event {event.event_id} does not exist')

        if not reasons and slug_moved and self.slug_taken(event.slug, event.event_id):
            return SlugConflict('slug', f"slug '{event.slug}' is already in use")

        logger.error(f"Transaction cancelled for event {event.event_id}: {error}")
        return StoreError('event', f'Transaction cancelled: {error}')

    def _serialize(self, item: dict) -> Dict[str, dict]:
        return {key: self.serializer.serialize(value) for key, value in item.items()}

    def _item_to_event(self, item: dict) -> Event:
        """
        Convert DynamoDB item to Event object.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Event object
        """
        return Event(
            event_id=item['event_id'],
            slug=item.get('slug'),
            title=item.get('title'),
            description=item.get('description'),
            overview=item.get('overview'),
            image=item.get('image'),
            venue=item.get('venue'),
            location=item.get('location'),
            date=item.get('date'),
            time=item.get('time'),
            mode=item.get('mode'),
            audience=item.get('audience'),
            agenda=list(item.get('agenda', [])),
            organizer=item.get('organizer'),
            tags=list(item.get('tags', [])),
            created_at=_as_int(item.get('created_at')),
            updated_at=_as_int(item.get('updated_at'))
        )

    def _event_to_item(self, event: Event) -> dict:
        """
        Convert Event object to DynamoDB item.

        Args:
            event: Event object

        Returns:
            DynamoDB item dictionary
        """
        item = {
            'event_id': event.event_id,
            'record_type': self.EVENT_RECORD,
            'slug': event.slug,
            'title': event.title,
            'description': event.description,
            'overview': event.overview,
            'image': event.image,
            'venue': event.venue,
            'location': event.location,
            'date': event.date,
            'time': event.time,
            'mode': event.mode,
            'audience': event.audience,
            'agenda': list(event.agenda),
            'organizer': event.organizer,
            'tags': list(event.tags),
            'created_at': event.created_at,
            'updated_at': event.updated_at
        }
        return {key: value for key, value in item.items() if value is not None}

    def _item_to_booking(self, item: dict) -> Booking:
        return Booking(
            booking_id=item['booking_id'],
            event_id=item['event_id'],
            email=item['email'],
            created_at=_as_int(item.get('created_at')),
            updated_at=_as_int(item.get('updated_at'))
        )

    def _booking_to_item(self, booking: Booking) -> dict:
        item = {
            'booking_id': booking.booking_id,
            'event_id': booking.event_id,
            'email': booking.email,
            'created_at': booking.created_at,
            'updated_at': booking.updated_at
        }
        return {key: value for key, value in item.items() if value is not None}


def _as_int(value) -> Optional[int]:
    return int(value) if value is not None else None
