"""Booking processor for validating bookings and checking their event."""
import logging
import re
import time
import uuid

from processor.errors import DanglingReferenceError, ValidationError
from processor.models import Booking

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


class BookingProcessor:
    """Runs the validate, check reference, persist pipeline for bookings."""

    def __init__(self, store):
        self.store = store

    def save(self, booking: Booking) -> Booking:
        """
        Validate a booking, confirm its event exists, then persist it.

        Args:
            booking: Booking to create

        Returns:
            The persisted booking

        Raises:
            ValidationError: If the email or event_id is invalid (no store read)
            DanglingReferenceError: If the event does not exist
            StoreUnavailableError: If the existence check or write fails
        """
        self.prepare(booking)

        if not self.store.event_exists(booking.event_id):
            logger.warning(
                f"Booking rejected: event {booking.event_id} does not exist"
            )
            raise DanglingReferenceError(
                f'Referenced event {booking.event_id} does not exist'
            )

        now = int(time.time())
        booking.booking_id = booking.booking_id or uuid.uuid4().hex
        booking.created_at = booking.created_at or now
        booking.updated_at = max(now, booking.created_at)

        saved = self.store.put_booking(booking)
        logger.info(f"Saved booking {saved.booking_id} for event {saved.event_id}")
        return saved

    def prepare(self, booking: Booking) -> Booking:
        """Validate the booking fields and trim the email in place."""
        if not booking.event_id or not isinstance(booking.event_id, str):
            logger.warning("Booking missing required field: event_id")
            raise ValidationError('event_id is required', field='event_id')

        if not isinstance(booking.email, str) or not booking.email.strip():
            logger.warning("Booking missing required field: email")
            raise ValidationError('Email is required', field='email')

        email = booking.email.strip()
        if not EMAIL_PATTERN.match(email):
            logger.warning(f"Booking rejected: invalid email '{email}'")
            raise ValidationError('Invalid email format', field='email')

        booking.email = email
        return booking
