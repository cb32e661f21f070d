"""Event processor for validating, normalizing and saving event records."""
import logging
import time
import uuid

from processor.errors import ValidationError
from processor.models import Event
from processor.normalize import normalize_date, normalize_time, slugify

logger = logging.getLogger(__name__)


class EventProcessor:
    """Runs the validate, normalize, persist pipeline for events."""

    REQUIRED_TEXT_FIELDS = (
        'title',
        'description',
        'overview',
        'image',
        'venue',
        'location',
        'date',
        'time',
        'mode',
        'audience',
        'organizer',
    )

    def __init__(self, store=None):
        """
        Initialize the processor.

        Args:
            store: Document store used by save(); prepare() never touches it
        """
        self.store = store

    def save(self, event: Event) -> Event:
        """
        Validate, normalize and persist an event.

        Args:
            event: New event, or an event previously loaded from the store

        Returns:
            The persisted event with slug, date, time and timestamps set

        Raises:
            ValidationError, InvalidDateError, InvalidTimeError,
            TimeOutOfRangeError: If the record is rejected (nothing is written)
            DuplicateKeyError: If another event already uses the slug
            StoreUnavailableError: If the store write fails
        """
        if self.store is None:
            raise RuntimeError('EventProcessor.save() requires a store')

        self.prepare(event)

        now = int(time.time())
        if event.event_id is None:
            event.event_id = uuid.uuid4().hex
        if event.created_at is None:
            event.created_at = now
        event.updated_at = max(now, event.created_at)

        saved = self.store.put_event(event)
        logger.info(f"Saved event '{saved.slug}' ({saved.event_id})")
        return saved

    def prepare(self, event: Event) -> Event:
        """
        Validate and canonicalize an event in place.

        The slug is recomputed only when the title changed or the slug is
        unset; date and time only when they changed since the last save.

        Args:
            event: Event to prepare

        Returns:
            The same event, canonicalized
        """
        self._validate_required_fields(event)

        if event.is_modified('title') or not event.slug:
            event.slug = slugify(event.title)
            if not event.slug:
                logger.warning(f"Event title '{event.title}' produces an empty slug")
                raise ValidationError(
                    'Title must contain at least one letter or digit', field='title'
                )

        if event.is_modified('date') or not event.date:
            event.date = normalize_date(event.date)

        if event.is_modified('time') or not event.time:
            event.time = normalize_time(event.time)

        return event

    def _validate_required_fields(self, event: Event) -> None:
        """
        Check required fields and trim text values.

        Raises:
            ValidationError: On the first missing or malformed field
        """
        for name in self.REQUIRED_TEXT_FIELDS:
            value = getattr(event, name)
            if not isinstance(value, str) or not value.strip():
                logger.warning(f"Event missing required field: {name}")
                raise ValidationError(f'{name} is required', field=name)
            setattr(event, name, value.strip())

        if not isinstance(event.agenda, list) or not event.agenda:
            logger.warning(f"Event '{event.title}' has an empty agenda")
            raise ValidationError('Agenda must be a non-empty list', field='agenda')
        event.agenda = self._clean_text_items(event.agenda, 'agenda')

        if not isinstance(event.tags, list):
            logger.warning(f"Event '{event.title}' has malformed tags")
            raise ValidationError('Tags must be a list', field='tags')
        event.tags = self._clean_text_items(event.tags, 'tags')

    def _clean_text_items(self, items: list, name: str) -> list:
        """Return the items trimmed; every item must be non-empty text."""
        for item in items:
            if not isinstance(item, str) or not item.strip():
                logger.warning(f"Event has a non-text {name} item: {item!r}")
                raise ValidationError(f'{name} items must be non-empty text', field=name)
        return [item.strip() for item in items]
