"""
Device Capability Acquirer
==========================

Gathers the contextual values an attendance record needs:
- public IP address (IP echo service)
- geolocation with a reverse-geocoded "City, Country" address
- a short "Browser / OS" device description

Network calls use requests off the event loop. Nothing here is retried
automatically: a failed IP lookup degrades to a sentinel, a failed reverse
geocode degrades to a sentinel, and a failed geolocation request raises a
classified CheckInError for the caller to show.
"""

import asyncio
import logging

import requests

import geolocation
from errors import AccessDeniedError, AcquisitionTimeoutError, CheckInError, DeviceUnavailableError
from models.location import LocationInfo, ADDRESS_NOT_AVAILABLE, ADDRESS_LOOKUP_FAILED
from utils.device_utils import describe_device
from utils.http_client import get_json

logger = logging.getLogger('attendance_kiosk.capabilities')

IP_UNAVAILABLE = 'Unable to fetch IP'

LOCATION_ERROR_PREFIX = 'Location access denied. '
LOCATION_ERROR_MESSAGES = {
    geolocation.PERMISSION_DENIED: 'Please allow location permissions.',
    geolocation.POSITION_UNAVAILABLE: 'Location information unavailable.',
    geolocation.TIMEOUT: 'Location request timed out.',
}
UNKNOWN_LOCATION_ERROR = 'Unknown location error.'
GEOLOCATION_UNSUPPORTED = 'Geolocation is not supported on this device'


def describe_position_error(code):
    """Human-readable message for a PositionError code"""
    return LOCATION_ERROR_PREFIX + LOCATION_ERROR_MESSAGES.get(code, UNKNOWN_LOCATION_ERROR)


def classify_position_error(error):
    """Convert a PositionError into the matching CheckInError"""
    message = describe_position_error(error.code)
    if error.code == geolocation.PERMISSION_DENIED:
        return AccessDeniedError(message)
    if error.code == geolocation.POSITION_UNAVAILABLE:
        return DeviceUnavailableError(message)
    if error.code == geolocation.TIMEOUT:
        return AcquisitionTimeoutError(message)
    return CheckInError(message)


def compose_address(data):
    """'City, Country' when the lookup returned both, else the sentinel"""
    city = data.get('city') if isinstance(data, dict) else None
    country = data.get('countryName') if isinstance(data, dict) else None
    if city and country:
        return f"{city}, {country}"
    return ADDRESS_NOT_AVAILABLE


class DeviceCapabilityAcquirer:
    """Resolves IP, location, address and device description for the kiosk"""

    def __init__(self, config, geolocation_provider=None, user_agent='', session=None):
        self.ip_echo_url = config.IP_ECHO_URL
        self.reverse_geocode_url = config.REVERSE_GEOCODE_URL
        self.http_timeout = config.HTTP_TIMEOUT
        self.geolocation_timeout = config.GEOLOCATION_TIMEOUT
        self.geolocation_maximum_age = config.GEOLOCATION_MAXIMUM_AGE
        self.geolocation_provider = geolocation_provider
        self.user_agent = user_agent
        self.session = session

    async def resolve_public_ip(self):
        """Public IP from the echo service, or the fallback sentinel"""
        try:
            data = await asyncio.to_thread(
                get_json, self.ip_echo_url, timeout=self.http_timeout, session=self.session
            )
            ip_address = data.get('ip') if isinstance(data, dict) else None
        except (requests.RequestException, ValueError) as e:
            logger.warning("IP lookup failed: %s", e)
            return IP_UNAVAILABLE

        if not ip_address:
            logger.warning("IP lookup returned no address")
            return IP_UNAVAILABLE
        return ip_address

    async def reverse_geocode(self, latitude, longitude):
        """Locality for the coordinates; lookup failures give a sentinel"""
        params = {
            'latitude': latitude,
            'longitude': longitude,
            'localityLanguage': 'en',
        }
        try:
            data = await asyncio.to_thread(
                get_json,
                self.reverse_geocode_url,
                params=params,
                timeout=self.http_timeout,
                session=self.session
            )
        except (requests.RequestException, ValueError) as e:
            logger.info("Reverse geocoding failed: %s", e)
            return ADDRESS_LOOKUP_FAILED

        return compose_address(data)

    async def resolve_geolocation(self):
        """
        One high-accuracy position request followed by reverse geocoding.

        Returns:
            LocationInfo: with address set (possibly to a sentinel)

        Raises:
            CheckInError subclass with a user-facing message
        """
        if self.geolocation_provider is None:
            raise DeviceUnavailableError(GEOLOCATION_UNSUPPORTED)

        try:
            position = await self.geolocation_provider.get_current_position(
                enable_high_accuracy=True,
                timeout=self.geolocation_timeout,
                maximum_age=self.geolocation_maximum_age
            )
        except geolocation.PositionError as e:
            logger.warning("Geolocation error %s: %s", e.code, e.message)
            raise classify_position_error(e) from e

        logger.info("Location obtained: %s, %s", position.latitude, position.longitude)
        location = LocationInfo(
            latitude=position.latitude,
            longitude=position.longitude,
            accuracy=position.accuracy
        )
        location.address = await self.reverse_geocode(position.latitude, position.longitude)
        return location

    def describe_device(self):
        return describe_device(self.user_agent)
