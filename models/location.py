"""
Location Model
==============

LocationInfo holds one geolocation result. A new instance is created for
every request; retries replace it rather than update it.
"""

from dataclasses import dataclass
from typing import Optional

ADDRESS_NOT_AVAILABLE = 'Address not available'
ADDRESS_LOOKUP_FAILED = 'Address lookup failed'


@dataclass
class LocationInfo:
    latitude: float
    longitude: float
    accuracy: float
    address: Optional[str] = None

    def __repr__(self):
        return f'<LocationInfo {self.latitude:.6f}, {self.longitude:.6f} ±{round(self.accuracy)}m>'

    @property
    def coordinates_display(self):
        return f"{self.latitude:.6f}, {self.longitude:.6f}"

    @property
    def location_accuracy_level(self):
        """Human-readable accuracy level"""
        if not self.accuracy:
            return 'unknown'
        elif self.accuracy <= 5:
            return 'high'
        elif self.accuracy <= 20:
            return 'medium'
        else:
            return 'low'
