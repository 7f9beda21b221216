"""
Client-side Session Storage
===========================

JsonFileStore is a small key-value store kept in one JSON file, playing the
role of browser local storage for the kiosk. SessionRepository keeps the
logged-in UserSession under a fixed key.

An entry that cannot be parsed into a UserSession is treated as absent and
removed.
"""

import json
import logging
import os

from models.session import UserSession

AUTH_STORAGE_KEY = 'attendance_auth_session'

logger = logging.getLogger('attendance_kiosk.session')


class JsonFileStore:
    """String key -> string value store backed by a JSON file"""

    def __init__(self, path):
        self.path = path

    def _load_all(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Storage file %s unreadable, starting empty: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save_all(self, data):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def get_item(self, key):
        return self._load_all().get(key)

    def set_item(self, key, value):
        data = self._load_all()
        data[key] = value
        self._save_all(data)

    def remove_item(self, key):
        data = self._load_all()
        if key in data:
            del data[key]
            self._save_all(data)


class SessionRepository:
    """load/save/clear for the kiosk's UserSession"""

    def __init__(self, store, key=AUTH_STORAGE_KEY):
        self.store = store
        self.key = key

    def load(self):
        """
        Returns:
            UserSession or None when logged out. Corrupt entries are cleared.
        """
        raw = self.store.get_item(self.key)
        if raw is None:
            return None
        try:
            return UserSession.from_dict(json.loads(raw))
        except (TypeError, ValueError, KeyError) as e:
            logger.warning("Discarding corrupt session entry: %s", e)
            self.clear()
            return None

    def save(self, session):
        self.store.set_item(self.key, json.dumps(session.to_dict()))

    def clear(self):
        self.store.remove_item(self.key)
