"""
Models package for the Attendance Check-in System
=================================================

Plain data models shared by the gateway and the kiosk client.
"""

from .attendance import (
    AttendanceRecord,
    REQUIRED_FIELDS,
    DEPARTMENTS,
    generate_user_id,
    utc_timestamp,
    format_location,
    parse_location,
)
from .location import LocationInfo, ADDRESS_NOT_AVAILABLE, ADDRESS_LOOKUP_FAILED
from .session import UserSession, VALID_ROLES

__all__ = [
    'AttendanceRecord',
    'REQUIRED_FIELDS',
    'DEPARTMENTS',
    'generate_user_id',
    'utc_timestamp',
    'format_location',
    'parse_location',
    'LocationInfo',
    'ADDRESS_NOT_AVAILABLE',
    'ADDRESS_LOOKUP_FAILED',
    'UserSession',
    'VALID_ROLES',
]
