"""
Geolocation Providers
=====================

The kiosk's stand-in for the platform location API. A provider returns one
Position per call or raises PositionError with a numeric code:

    1 PERMISSION_DENIED     the user has not consented to location access
    2 POSITION_UNAVAILABLE  no position could be determined
    3 TIMEOUT               no fix within the allowed time

Providers:
    - StaticGeolocationProvider: fixed coordinates for a wall-mounted kiosk
    - IPGeolocationProvider: coarse position from an IP geolocation service
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

import requests

from utils.http_client import get_json

PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3

logger = logging.getLogger('attendance_kiosk.geolocation')


class PositionError(Exception):
    """Platform-level geolocation failure"""

    def __init__(self, code, message=''):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


@dataclass
class Position:
    latitude: float
    longitude: float
    accuracy: float
    timestamp: float = field(default_factory=time.time)

    def age(self, now=None):
        return (now or time.time()) - self.timestamp


class GeolocationProvider:
    """Base provider; subclasses implement _locate"""

    def __init__(self):
        self._cached = None

    async def get_current_position(self, enable_high_accuracy=True, timeout=10, maximum_age=60):
        """
        One-shot position request.

        Args:
            enable_high_accuracy (bool): prefer the most precise source available
            timeout (float): seconds to wait for a fix
            maximum_age (float): a cached position this many seconds old is acceptable

        Raises:
            PositionError
        """
        if self._cached is not None and self._cached.age() <= maximum_age:
            logger.debug("Using cached position (%.1fs old)", self._cached.age())
            return self._cached

        try:
            position = await asyncio.wait_for(self._locate(enable_high_accuracy), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise PositionError(TIMEOUT, f'No position within {timeout}s') from e

        self._cached = position
        return position

    async def _locate(self, enable_high_accuracy):
        raise NotImplementedError


class StaticGeolocationProvider(GeolocationProvider):
    """Always reports the configured coordinates"""

    def __init__(self, latitude, longitude, accuracy=10.0):
        super().__init__()
        self.latitude = float(latitude)
        self.longitude = float(longitude)
        self.accuracy = float(accuracy)

    async def _locate(self, enable_high_accuracy):
        return Position(self.latitude, self.longitude, self.accuracy)


class IPGeolocationProvider(GeolocationProvider):
    """
    Coarse position from an IP geolocation service returning
    {latitude, longitude} JSON (ipapi.co format).
    """

    # City-level accuracy of IP lookups
    DEFAULT_ACCURACY = 5000.0

    def __init__(self, url, consent=True, http_timeout=10, session=None):
        super().__init__()
        self.url = url
        self.consent = consent
        self.http_timeout = http_timeout
        self.session = session

    async def _locate(self, enable_high_accuracy):
        if not self.consent:
            raise PositionError(PERMISSION_DENIED, 'Location consent not given')

        try:
            data = await asyncio.to_thread(
                get_json, self.url, timeout=self.http_timeout, session=self.session
            )
        except requests.Timeout as e:
            raise PositionError(TIMEOUT, str(e)) from e
        except (requests.RequestException, ValueError) as e:
            raise PositionError(POSITION_UNAVAILABLE, str(e)) from e

        try:
            latitude = float(data['latitude'])
            longitude = float(data['longitude'])
        except (KeyError, TypeError, ValueError) as e:
            raise PositionError(POSITION_UNAVAILABLE, 'Lookup returned no coordinates') from e

        return Position(latitude, longitude, self.DEFAULT_ACCURACY)


def create_provider(config):
    """
    Build the provider selected by GEOLOCATION_PROVIDER.

    Returns None when no provider can be built, which the kiosk reports as
    geolocation being unsupported.
    """
    kind = config.GEOLOCATION_PROVIDER
    if kind == 'static':
        if config.STATIC_LATITUDE is None or config.STATIC_LONGITUDE is None:
            logger.warning("Static geolocation selected but STATIC_LATITUDE/STATIC_LONGITUDE unset")
            return None
        return StaticGeolocationProvider(
            config.STATIC_LATITUDE, config.STATIC_LONGITUDE, config.STATIC_ACCURACY
        )
    if kind == 'ip':
        return IPGeolocationProvider(
            config.IP_GEOLOCATION_URL,
            consent=config.GEOLOCATION_CONSENT,
            http_timeout=config.HTTP_TIMEOUT
        )
    logger.warning("Unknown geolocation provider: %s", kind)
    return None
