import random
import re
from datetime import datetime, timedelta, timezone

import pytest

from models import AttendanceRecord, LocationInfo, UserSession
from models.attendance import format_location, generate_user_id, parse_location, utc_timestamp


def test_generate_user_id_format():
    rng = random.Random(7)

    for _ in range(20):
        assert re.fullmatch(r"USR\d{1,4}", generate_user_id(rng))


def test_utc_timestamp_has_milliseconds_and_z():
    now = datetime(2024, 5, 1, 11, 15, 0, 123456, tzinfo=timezone(timedelta(hours=2)))

    assert utc_timestamp(now) == "2024-05-01T09:15:00.123Z"


def test_location_string():
    assert format_location(37.7749, -122.4194) == "37.7749, -122.4194"
    assert parse_location("37.7749, -122.4194") == (37.7749, -122.4194)
    assert parse_location("nowhere") == (None, None)
    assert parse_location(None) == (None, None)


def test_record_payload_and_summary(sample_payload):
    record = AttendanceRecord.from_payload(dict(sample_payload, unknown="ignored"))

    assert record.to_payload() == sample_payload
    assert record.has_location_data
    summary = record.summary()
    assert summary["image_url"] == sample_payload["image_url"][:50] + "...[truncated]"
    assert summary["department"] == "engineering"


def test_record_summary_without_image(sample_payload):
    record = AttendanceRecord.from_payload(dict(sample_payload, image_url=""))

    assert record.summary()["image_url"] == "No image"


def test_location_info_display():
    location = LocationInfo(37.7749, -122.4194, 12.4)

    assert location.coordinates_display == "37.774900, -122.419400"
    assert location.location_accuracy_level == "medium"
    assert location.address is None


def test_session_rejects_unknown_role():
    with pytest.raises(ValueError):
        UserSession.start("guest", "guest@demo.com")

    session = UserSession.start("admin", "admin@demo.com")
    assert session.is_admin
    assert UserSession.from_dict(session.to_dict()) == session


def test_record_summary_with_non_string_image(sample_payload):
    record = AttendanceRecord.from_payload(dict(sample_payload, image_url=12345))

    assert record.summary()["image_url"] == "12345...[truncated]"
