"""
Attendance Model for the Attendance Check-in System
===================================================

AttendanceRecord is the unit submitted by the kiosk and relayed by the
gateway to the remote storage API. All fields are strings.
"""

import random
from dataclasses import dataclass, asdict, fields
from datetime import datetime, timezone

# Order matters: the gateway reports missing fields in this order
REQUIRED_FIELDS = [
    'id',
    'image_url',
    'department',
    'location',
    'location_address',
    'timestamp',
    'ip_address',
]

DEPARTMENTS = ['Engineering', 'Marketing', 'Sales', 'HR', 'Finance']

USER_ID_PREFIX = 'USR'


def generate_user_id(rng=None):
    """Pseudo-random kiosk user id, e.g. USR4821. Not collision-safe."""
    rng = rng or random
    return f"{USER_ID_PREFIX}{rng.randrange(10000)}"


def utc_timestamp(now=None):
    """ISO-8601 UTC instant with millisecond precision and a Z suffix"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def format_location(latitude, longitude):
    """Coordinates as the '<lat>, <lng>' string stored on the record"""
    return f"{latitude}, {longitude}"


def parse_location(location):
    """
    Parse a '<lat>, <lng>' string back into floats.

    Returns:
        tuple: (latitude, longitude), or (None, None) if unparseable
    """
    try:
        lat, lng = (float(part.strip()) for part in location.split(','))
        return lat, lng
    except (AttributeError, ValueError):
        return None, None


@dataclass
class AttendanceRecord:
    """A single selfie check-in as sent to the gateway"""

    id: str
    image_url: str
    department: str
    location: str
    location_address: str
    timestamp: str
    ip_address: str

    def __repr__(self):
        return f'<AttendanceRecord {self.id} ({self.department}) at {self.timestamp}>'

    def to_payload(self):
        """JSON-ready dict with exactly the required fields"""
        return asdict(self)

    @classmethod
    def from_payload(cls, payload):
        """Build a record from a stored item, ignoring unknown keys"""
        names = {f.name for f in fields(cls)}
        values = {name: payload.get(name, '') for name in names}
        return cls(**values)

    @property
    def has_location_data(self):
        lat, lng = parse_location(self.location)
        return lat is not None and lng is not None

    def summary(self):
        """Payload with the image truncated, for logging"""
        payload = self.to_payload()
        if payload['image_url']:
            payload['image_url'] = str(payload['image_url'])[:50] + '...[truncated]'
        else:
            payload['image_url'] = 'No image'
        return payload
