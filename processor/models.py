"""Data models for events and bookings."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

TRACKED_FIELDS = ('title', 'slug', 'date', 'time')


@dataclass
class Event:
    """Event record as submitted by a caller or loaded from the store."""
    title: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: str
    time: str
    mode: str
    audience: str
    agenda: List[str]
    organizer: str
    tags: List[str] = field(default_factory=list)
    slug: Optional[str] = None
    event_id: Optional[str] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None
    # Values of TRACKED_FIELDS as last written to the store
    persisted: Optional[Dict[str, Any]] = field(
        default=None, init=False, repr=False, compare=False
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Event':
        """Build an Event from a request payload; missing keys become None."""
        return cls(
            title=data.get('title'),
            description=data.get('description'),
            overview=data.get('overview'),
            image=data.get('image'),
            venue=data.get('venue'),
            location=data.get('location'),
            date=data.get('date'),
            time=data.get('time'),
            mode=data.get('mode'),
            audience=data.get('audience'),
            agenda=data.get('agenda'),
            organizer=data.get('organizer'),
            tags=data.get('tags', []),
            slug=data.get('slug'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'event_id': self.event_id,
            'title': self.title,
            'slug': self.slug,
            'description': self.description,
            'overview': self.overview,
            'image': self.image,
            'venue': self.venue,
            'location': self.location,
            'date': self.date,
            'time': self.time,
            'mode': self.mode,
            'audience': self.audience,
            'agenda': list(self.agenda),
            'organizer': self.organizer,
            'tags': list(self.tags),
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    def is_modified(self, name: str) -> bool:
        """Return True if the field differs from its persisted value."""
        if self.persisted is None:
            return True
        return getattr(self, name) != self.persisted.get(name)

    def mark_persisted(self) -> None:
        """Record the current tracked values as the stored state."""
        self.persisted = {name: getattr(self, name) for name in TRACKED_FIELDS}

    def to_summary(self) -> 'EventSummary':
        return EventSummary(
            image=self.image,
            title=self.title,
            slug=self.slug,
            location=self.location,
            date=self.date,
            time=self.time,
        )


@dataclass
class Booking:
    """Booking of a single email address for an event."""
    event_id: str
    email: str
    booking_id: Optional[str] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Booking':
        return cls(event_id=data.get('event_id'), email=data.get('email'))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'booking_id': self.booking_id,
            'event_id': self.event_id,
            'email': self.email,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }


@dataclass
class EventSummary:
    """Fields shown on an event card in listings."""
    image: str
    title: str
    slug: str
    location: str
    date: str
    time: str
