"""DynamoDB manager for event and booking storage operations."""
import logging
from typing import Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from processor.errors import DuplicateKeyError, StoreUnavailableError
from processor.models import Booking, Event, EventSummary

logger = logging.getLogger(__name__)

STORE_ERRORS = (BotoCoreError, ClientError)


class DynamoDBManager:
    """
    Manager for DynamoDB operations.

    Events, bookings and slug claims live in three tables. The slugs table
    is keyed by slug and acts as the unique index on Event.slug.
    """

    BOOKINGS_EVENT_INDEX = 'event-index'

    def __init__(
        self,
        events_table: str,
        bookings_table: str,
        slugs_table: str,
        dynamodb=None
    ):
        """
        Initialize DynamoDB resource and table references.

        Args:
            events_table: Name of the events table (hash key event_id)
            bookings_table: Name of the bookings table (hash key booking_id)
            slugs_table: Name of the slug claims table (hash key slug)
            dynamodb: Optional boto3 DynamoDB resource to use
        """
        self.dynamodb = dynamodb or boto3.resource('dynamodb')
        self.events_table = self.dynamodb.Table(events_table)
        self.bookings_table = self.dynamodb.Table(bookings_table)
        self.slugs_table = self.dynamodb.Table(slugs_table)
        logger.info(
            f"Initialized DynamoDBManager for tables: {events_table}, "
            f"{bookings_table}, {slugs_table}"
        )

    def put_event(self, event: Event) -> Event:
        """
        Write an event, claiming its slug first.

        Args:
            event: Prepared event with event_id and slug set

        Returns:
            The same event, marked as persisted

        Raises:
            DuplicateKeyError: If the slug belongs to another event
            StoreUnavailableError: If DynamoDB fails
        """
        previous_slug = event.persisted.get('slug') if event.persisted else None
        newly_claimed = self._claim_slug(event.slug, event.event_id)

        try:
            self.events_table.put_item(Item=self._event_to_item(event))
        except STORE_ERRORS as e:
            logger.error(f"Error writing event {event.event_id}: {e}")
            if newly_claimed:
                self._release_slug(event.slug, event.event_id)
            raise StoreUnavailableError(f'Failed to write event: {e}') from e
        except Exception:
            if newly_claimed:
                self._release_slug(event.slug, event.event_id)
            raise

        if previous_slug and previous_slug != event.slug:
            self._release_slug(previous_slug, event.event_id)

        event.mark_persisted()
        return event

    def put_booking(self, booking: Booking) -> Booking:
        """
        Write a booking.

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            self.bookings_table.put_item(Item=self._booking_to_item(booking))
        except STORE_ERRORS as e:
            logger.error(f"Error writing booking {booking.booking_id}: {e}")
            raise StoreUnavailableError(f'Failed to write booking: {e}') from e
        return booking

    def event_exists(self, event_id: str) -> bool:
        """
        Check whether an event with the given ID exists.

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            response = self.events_table.get_item(
                Key={'event_id': event_id},
                ProjectionExpression='event_id'
            )
        except STORE_ERRORS as e:
            logger.error(f"Error checking event {event_id}: {e}")
            raise StoreUnavailableError(f'Failed to read event: {e}') from e
        return 'Item' in response

    def get_event(self, event_id: str) -> Optional[Event]:
        """Return the event with the given ID, or None if not found."""
        try:
            response = self.events_table.get_item(Key={'event_id': event_id})
        except STORE_ERRORS as e:
            logger.error(f"Error reading event {event_id}: {e}")
            raise StoreUnavailableError(f'Failed to read event: {e}') from e

        item = response.get('Item')
        return self._item_to_event(item) if item else None

    def get_event_by_slug(self, slug: str) -> Optional[Event]:
        """Return the event that owns the slug, or None if not found."""
        try:
            response = self.slugs_table.get_item(Key={'slug': slug})
        except STORE_ERRORS as e:
            logger.error(f"Error reading slug '{slug}': {e}")
            raise StoreUnavailableError(f'Failed to read slug: {e}') from e

        claim = response.get('Item')
        if not claim:
            return None
        return self.get_event(claim['event_id'])

    def list_events(self) -> List[Event]:
        """
        Retrieve all events using a Scan operation.

        Returns:
            Events ordered by date and time
        """
        items = self._scan(self.events_table)
        events = [
            event for event in (self._item_to_event(item) for item in items)
            if event
        ]
        events.sort(key=lambda e: (e.date, e.time))
        logger.info(f"Retrieved {len(events)} events from DynamoDB")
        return events

    def list_event_summaries(self) -> List[EventSummary]:
        """Return listing summaries for all events."""
        return [event.to_summary() for event in self.list_events()]

    def list_bookings_for_event(self, event_id: str) -> List[Booking]:
        """
        Retrieve bookings for an event through the event-index GSI.

        Returns:
            Bookings ordered by creation time
        """
        query_args = {
            'IndexName': self.BOOKINGS_EVENT_INDEX,
            'KeyConditionExpression': Key('event_id').eq(event_id),
        }
        try:
            response = self.bookings_table.query(**query_args)
            items = response.get('Items', [])

            # Handle pagination
            while 'LastEvaluatedKey' in response:
                response = self.bookings_table.query(
                    ExclusiveStartKey=response['LastEvaluatedKey'],
                    **query_args
                )
                items.extend(response.get('Items', []))
        except STORE_ERRORS as e:
            logger.error(f"Error querying bookings for event {event_id}: {e}")
            raise StoreUnavailableError(f'Failed to read bookings: {e}') from e

        bookings = [
            booking for booking in (self._item_to_booking(item) for item in items)
            if booking
        ]
        bookings.sort(key=lambda b: b.created_at)
        return bookings

    def _scan(self, table) -> List[dict]:
        try:
            # Scan the table (paginated automatically by boto3)
            response = table.scan()
            items = response.get('Items', [])

            # Handle pagination
            while 'LastEvaluatedKey' in response:
                response = table.scan(
                    ExclusiveStartKey=response['LastEvaluatedKey']
                )
                items.extend(response.get('Items', []))
        except STORE_ERRORS as e:
            logger.error(f"Error scanning DynamoDB table {table.name}: {e}")
            raise StoreUnavailableError(f'Failed to scan {table.name}: {e}') from e
        return items

    def _claim_slug(self, slug: str, event_id: str) -> bool:
        """
        Claim a slug for an event with a conditional put.

        Returns:
            True if the claim was created, False if the event already held it

        Raises:
            DuplicateKeyError: If another event holds the slug
        """
        try:
            response = self.slugs_table.put_item(
                Item={'slug': slug, 'event_id': event_id},
                ConditionExpression='attribute_not_exists(slug) OR event_id = :id',
                ExpressionAttributeValues={':id': event_id},
                ReturnValues='ALL_OLD'
            )
        except ClientError as e:
            if e.response['Error']['Code'] == 'ConditionalCheckFailedException':
                logger.warning(f"Slug '{slug}' is already used by another event")
                raise DuplicateKeyError(f"Slug '{slug}' already exists") from e
            logger.error(f"Error claiming slug '{slug}': {e}")
            raise StoreUnavailableError(f'Failed to claim slug: {e}') from e
        except BotoCoreError as e:
            logger.error(f"Error claiming slug '{slug}': {e}")
            raise StoreUnavailableError(f'Failed to claim slug: {e}') from e

        return 'Attributes' not in response

    def _release_slug(self, slug: str, event_id: str) -> None:
        """Delete a slug claim if it is still owned by the event."""
        try:
            self.slugs_table.delete_item(
                Key={'slug': slug},
                ConditionExpression='event_id = :id',
                ExpressionAttributeValues={':id': event_id}
            )
        except STORE_ERRORS as e:
            # Stale claim; the slug stays reserved for this event
            logger.warning(f"Failed to release slug '{slug}': {e}")

    def _item_to_event(self, item: dict) -> Optional[Event]:
        """
        Convert DynamoDB item to Event object.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Event marked as persisted, or None if conversion fails
        """
        try:
            event = Event(
                title=item['title'],
                description=item['description'],
                overview=item['overview'],
                image=item['image'],
                venue=item['venue'],
                location=item['location'],
                date=item['date'],
                time=item['time'],
                mode=item['mode'],
                audience=item['audience'],
                agenda=list(item['agenda']),
                organizer=item['organizer'],
                tags=list(item.get('tags', [])),
                slug=item['slug'],
                event_id=item['event_id'],
                created_at=int(item['created_at']),
                updated_at=int(item['updated_at'])
            )
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Failed to convert item to Event: {e}")
            return None

        event.mark_persisted()
        return event

    def _event_to_item(self, event: Event) -> dict:
        """
        Convert Event object to DynamoDB item.

        Args:
            event: Prepared Event object

        Returns:
            DynamoDB item dictionary
        """
        return event.to_dict()

    def _item_to_booking(self, item: dict) -> Optional[Booking]:
        """
        Convert DynamoDB item to Booking object.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Booking object or None if conversion fails
        """
        try:
            return Booking(
                booking_id=item['booking_id'],
                event_id=item['event_id'],
                email=item['email'],
                created_at=int(item['created_at']),
                updated_at=int(item['updated_at'])
            )
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Failed to convert item to Booking: {e}")
            return None

    def _booking_to_item(self, booking: Booking) -> Dict[str, object]:
        """
        Convert Booking object to DynamoDB item.

        Args:
            booking: Booking object

        Returns:
            DynamoDB item dictionary
        """
        return booking.to_dict()
