"""
User Session Model
==================

UserSession is the logged-in state of the kiosk. It is stored as JSON under
a single key of the client-side key-value store.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

VALID_ROLES = ['user', 'admin']


@dataclass
class UserSession:
    role: str
    email: str
    login_time: str

    def __post_init__(self):
        if self.role not in VALID_ROLES:
            raise ValueError(f"Invalid role: {self.role!r}")

    @classmethod
    def start(cls, role, email, now=None):
        """New session stamped with the current UTC time"""
        now = now or datetime.now(timezone.utc)
        return cls(role=role, email=email, login_time=now.isoformat())

    @property
    def is_admin(self):
        return self.role == 'admin'

    def to_dict(self):
        return {
            'role': self.role,
            'email': self.email,
            'loginTime': self.login_time,
        }

    @classmethod
    def from_dict(cls, data):
        """Raises KeyError/TypeError/ValueError on malformed data"""
        return cls(role=data['role'], email=data['email'], login_time=data['loginTime'])
