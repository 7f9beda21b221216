import pathlib
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app import create_app


@pytest.fixture
def sample_payload():
    return {
        "id": "USR4821",
        "image_url": "data:image/jpeg;base64,/9j/4AAQSkZJRgABAQAAAQABAAD",
        "department": "engineering",
        "location": "37.7749, -122.4194",
        "location_address": "San Francisco, United States",
        "timestamp": "2024-05-01T09:15:00.000Z",
        "ip_address": "203.0.113.7",
    }


@pytest.fixture
def relay():
    fake = MagicMock()
    fake.submit.return_value = {"message": "stored", "id": "USR4821"}
    fake.list_records.return_value = {"data": {"Items": []}}
    return fake


@pytest.fixture
def app(relay, tmp_path):
    return create_app(relay=relay, LOG_DIR=str(tmp_path / "logs"), TESTING=True)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def kiosk_config(tmp_path):
    return SimpleNamespace(
        SESSION_STORE_PATH=str(tmp_path / "local_storage.json"),
        GATEWAY_URL="http://gateway.test/api/attendance",
        SUBMISSION_TIMEOUT=5,
        IP_ECHO_URL="https://ip.test/",
        REVERSE_GEOCODE_URL="https://geo.test/reverse",
        HTTP_TIMEOUT=5,
        GEOLOCATION_TIMEOUT=1,
        GEOLOCATION_MAXIMUM_AGE=60,
    )
