"""AWS Lambda handler for event and booking writes."""
import json
import logging
import os
import time
from dataclasses import asdict
from typing import Any, Callable, Dict

from processor.booking_processor import BookingProcessor
from processor.errors import (
    DanglingReference,
    RecordError,
    RecordNotFound,
    SlugConflict,
    StoreError,
    ValidationError,
)
from processor.event_processor import EventProcessor
from processor.models import booking_from_dict, event_from_dict
from processor.validators import require_text
from storage.dynamodb_manager import DynamoDBManager


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


ERROR_STATUS = [
    (ValidationError, 400),
    (RecordNotFound, 404),
    (SlugConflict, 409),
    (DanglingReference, 422),
    (StoreError, 503),
]


class UnknownAction(Exception):
    """Request names an action this handler does not serve."""


def _create_event(events, bookings, payload):
    return 201, asdict(events.create(event_from_dict(payload)))


def _update_event(events, bookings, payload):
    event = events.update(payload.get('event_id'), payload.get('changes') or {})
    return 200, asdict(event)


def _get_event(events, bookings, payload):
    store = events.store
    if payload.get('slug'):
        event = store.get_event_by_slug(payload['slug'])
    else:
        event = store.get_event(require_text('event_id', payload.get('event_id')))
    if event is None:
        raise RecordNotFound('event_id', 'event does not exist')
    return 200, asdict(event)


def _list_events(events, bookings, payload):
    return 200, {'events': [asdict(event) for event in events.store.list_events()]}


def _create_booking(events, bookings, payload):
    return 201, asdict(bookings.create(booking_from_dict(payload)))


def _update_booking(events, bookings, payload):
    booking = bookings.update(payload.get('booking_id'), payload.get('changes') or {})
    return 200, asdict(booking)


def _list_bookings(events, bookings, payload):
    found = bookings.list_for_event(payload.get('event_id'))
    return 200, {'bookings': [asdict(booking) for booking in found]}


ACTIONS: Dict[str, Callable] = {
    'create_event': _create_event,
    'update_event': _update_event,
    'get_event': _get_event,
    'list_events': _list_events,
    'create_booking': _create_booking,
    'update_booking': _update_booking,
    'list_bookings': _list_bookings,
}


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {'statusCode': status_code, 'body': json.dumps(body)}


def _error_status(error: RecordError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return 500


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function.

    Args:
        event: Request payload of the form {"action": ..., "payload": {...}}
        context: Lambda context object

    Returns:
        Response dict with statusCode and JSON body
    """
    # Read configuration from environment variables
    events_table = os.environ.get('EVENTS_TABLE', 'events')
    bookings_table = os.environ.get('BOOKINGS_TABLE', 'bookings')
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    region_name = os.environ.get('AWS_REGION')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    action = event.get('action')
    payload = event.get('payload') or {}
    logger.info(f"Handling action '{action}'")

    try:
        if action not in ACTIONS:
            raise UnknownAction(f"Unknown action: {action}")

        store = DynamoDBManager(
            events_table=events_table,
            bookings_table=bookings_table,
            region_name=region_name
        )
        status_code, body = ACTIONS[action](
            EventProcessor(store), BookingProcessor(store), payload
        )

    except UnknownAction as e:
        logger.warning(str(e))
        return _response(400, {
            'message': str(e),
            'error_type': type(e).__name__
        })

    except RecordError as e:
        status_code = _error_status(e)
        log = logger.error if status_code >= 500 else logger.warning
        log(
            f"Action '{action}' rejected: {e}",
            extra={'error_type': type(e).__name__}
        )
        return _response(status_code, {
            'message': e.reason,
            'field': e.field,
            'error_type': type(e).__name__
        })

    except Exception as e:
        logger.error(
            f"Action '{action}' failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _response(500, {
            'message': 'Request failed',
            'error': str(e),
            'error_type': type(e).__name__
        })

    duration = time.time() - start_time
    logger.info(
        f"Action '{action}' completed with status {status_code}",
        extra={'duration_seconds': round(duration, 2)}
    )
    return _response(status_code, body)
