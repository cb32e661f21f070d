"""AWS Lambda handler for the event listing and booking API."""
import json
import logging
import os
import time
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from processor.booking_processor import BookingProcessor
from processor.errors import (
    DanglingReferenceError,
    DuplicateKeyError,
    EventsError,
    InvalidDateError,
    InvalidTimeError,
    StoreUnavailableError,
    TimeOutOfRangeError,
    ValidationError,
)
from processor.event_processor import EventProcessor
from processor.models import Booking, Event
from storage.dynamodb_manager import DynamoDBManager

ERROR_STATUS_CODES = [
    (ValidationError, 400),
    (InvalidDateError, 400),
    (InvalidTimeError, 400),
    (TimeOutOfRangeError, 400),
    (DuplicateKeyError, 409),
    (DanglingReferenceError, 422),
    (StoreUnavailableError, 503),
]

UPDATABLE_EVENT_FIELDS = (
    'title', 'description', 'overview', 'image', 'venue', 'location',
    'date', 'time', 'mode', 'audience', 'agenda', 'organizer', 'tags',
)


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


class RequestError(Exception):
    """Raised for requests that cannot be routed or decoded."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler for API Gateway proxy requests.

    Args:
        event: API Gateway proxy event
        context: Lambda context object

    Returns:
        Response dict with statusCode, headers and JSON body
    """
    # Read configuration from environment variables
    events_table = os.environ.get('EVENTS_TABLE', 'events')
    bookings_table = os.environ.get('BOOKINGS_TABLE', 'bookings')
    slugs_table = os.environ.get('SLUGS_TABLE', 'event-slugs')
    log_level = os.environ.get('LOG_LEVEL', 'INFO')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    method = (event.get('httpMethod') or 'GET').upper()
    path = event.get('path') or '/'
    start_time = time.time()
    logger.info(
        f"Request started: {method} {path}",
        extra={'method': method, 'path': path}
    )

    try:
        store = DynamoDBManager(
            events_table=events_table,
            bookings_table=bookings_table,
            slugs_table=slugs_table
        )
        status_code, body = _dispatch(method, path, event.get('body'), store)
    except RequestError as e:
        logger.warning(f"Request rejected: {e}")
        message = 'Not found' if e.status_code == 404 else 'Bad request'
        status_code, body = e.status_code, _error_body(message, e)
    except EventsError as e:
        status_code = _status_for(e)
        level = logging.ERROR if status_code >= 500 else logging.WARNING
        logger.log(
            level,
            f"Request failed: {e}",
            extra={'error_type': e.code}
        )
        body = _error_body('Request failed', e)
    except Exception as e:
        logger.error(
            f"Request failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        status_code, body = 500, _error_body('Internal error', e)

    duration = time.time() - start_time
    logger.info(
        f"Request completed: {method} {path} -> {status_code}",
        extra={'status_code': status_code, 'duration_seconds': round(duration, 2)}
    )
    return _response(status_code, body)


def _dispatch(method: str, path: str, raw_body: Optional[str], store: DynamoDBManager):
    parts: List[str] = [part for part in path.strip('/').split('/') if part]

    if parts == ['events']:
        if method == 'GET':
            summaries = store.list_event_summaries()
            return 200, {'events': [asdict(summary) for summary in summaries]}
        if method == 'POST':
            created = EventProcessor(store).save(Event.from_dict(_parse_body(raw_body)))
            return 201, created.to_dict()

    elif len(parts) == 2 and parts[0] == 'events':
        if method == 'GET':
            found = store.get_event_by_slug(parts[1])
            if found is None:
                raise RequestError(404, f"Event '{parts[1]}' not found")
            return 200, found.to_dict()
        if method == 'PUT':
            return 200, _update_event(store, parts[1], _parse_body(raw_body)).to_dict()

    elif len(parts) == 3 and parts[0] == 'events' and parts[2] == 'bookings':
        if method == 'GET':
            bookings = store.list_bookings_for_event(parts[1])
            return 200, {'bookings': [booking.to_dict() for booking in bookings]}

    elif parts == ['bookings']:
        if method == 'POST':
            booking = Booking.from_dict(_parse_body(raw_body))
            return 201, BookingProcessor(store).save(booking).to_dict()

    raise RequestError(404, f'No route for {method} {path}')


def _update_event(store: DynamoDBManager, event_id: str, changes: Dict[str, Any]) -> Event:
    existing = store.get_event(event_id)
    if existing is None:
        raise RequestError(404, f"Event '{event_id}' not found")

    for name in UPDATABLE_EVENT_FIELDS:
        if name in changes:
            setattr(existing, name, changes[name])

    return EventProcessor(store).save(existing)


def _parse_body(raw_body: Optional[str]) -> Dict[str, Any]:
    try:
        data = json.loads(raw_body or '{}')
    except json.JSONDecodeError as e:
        raise RequestError(400, f'Malformed JSON body: {e}') from e
    if not isinstance(data, dict):
        raise RequestError(400, 'Request body must be a JSON object')
    return data


def _status_for(error: EventsError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_class):
            return status_code
    return 500


def _error_body(message: str, error: Exception) -> Dict[str, Any]:
    body = {
        'message': message,
        'error': str(error),
        'error_type': getattr(error, 'code', type(error).__name__)
    }
    if getattr(error, 'field', None):
        body['field'] = error.field
    return body


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body)
    }
