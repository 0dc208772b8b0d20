"""Shared fixtures: mock DynamoDB tables and sample records."""
import boto3
import pytest
from moto import mock_aws

from processor.models import Booking, Event
from storage.dynamodb_manager import DynamoDBManager

EVENTS_TABLE = 'test-events'
BOOKINGS_TABLE = 'test-bookings'
REGION = 'us-east-1'


@pytest.fixture
def dynamodb_tables():
    """Create mock events and bookings tables for testing."""
    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name=REGION)

        events_table = dynamodb.create_table(
            TableName=EVENTS_TABLE,
            KeySchema=[
                {'AttributeName': 'event_id', 'KeyType': 'HASH'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'event_id', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )

        bookings_table = dynamodb.create_table(
            TableName=BOOKINGS_TABLE,
            KeySchema=[
                {'AttributeName': 'booking_id', 'KeyType': 'HASH'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'booking_id', 'AttributeType': 'S'},
                {'AttributeName': 'event_id', 'AttributeType': 'S'}
            ],
            GlobalSecondaryIndexes=[
                {
                    'IndexName': 'event-index',
                    'KeySchema': [
                        {'AttributeName': 'event_id', 'KeyType': 'HASH'}
                    ],
                    'Projection': {'ProjectionType': 'ALL'}
                }
            ],
            BillingMode='PAY_PER_REQUEST'
        )

        yield events_table, bookings_table


@pytest.fixture
def dynamodb_manager(dynamodb_tables):
    """Create DynamoDBManager instance with mock tables."""
    return DynamoDBManager(EVENTS_TABLE, BOOKINGS_TABLE, region_name=REGION)


def make_event(**overrides) -> Event:
    """Build a valid caller-supplied Event."""
    values = dict(
        title='PyCon Meetup',
        description='Monthly Python meetup',
        overview='Talks and networking',
        image='https://example.com/meetup.png',
        venue='Community Hall',
        location='Berlin, Germany',
        date='2024-03-05',
        time='6pm-8:30pm',
        mode='offline',
        audience='Developers',
        agenda=['Welcome', 'Lightning talks'],
        organizer='Python Berlin',
        tags=['python', 'meetup']
    )
    values.update(overrides)
    return Event(**values)


@pytest.fixture
def sample_event():
    """Create a sample caller-supplied Event."""
    return make_event()


@pytest.fixture
def stored_event(dynamodb_manager):
    """Create a committed Event with slug and identity set."""
    event = make_event(
        event_id='event-1',
        slug='pycon-meetup',
        date='2024-03-05',
        time='18:00-20:30',
        created_at=1700000000,
        updated_at=1700000000
    )
    return dynamodb_manager.commit_event(event)


@pytest.fixture
def sample_booking(stored_event):
    """Create a caller-supplied Booking for the stored event."""
    return Booking(event_id=stored_event.event_id, email='guest@example.com')
