import pytest

from errors import LocalError, NetworkError, RemoteError
from models.attendance import REQUIRED_FIELDS


def test_valid_submission_is_relayed_unchanged(client, relay, sample_payload):
    payload = dict(sample_payload, extra_field="kept")

    response = client.post("/api/attendance", json=payload)

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["message"] == "Attendance submitted successfully"
    assert body["data"] == {"message": "stored", "id": "USR4821"}
    relay.submit.assert_called_once_with(payload)


def test_missing_fields_are_listed_in_order_and_not_relayed(client, relay, sample_payload):
    payload = dict(sample_payload)
    del payload["department"]
    payload["ip_address"] = ""
    payload["image_url"] = None

    response = client.post("/api/attendance", json=payload)

    assert response.status_code == 400
    assert response.get_json() == {
        "error": "Missing required fields",
        "missing": ["image_url", "department", "ip_address"],
    }
    relay.submit.assert_not_called()


@pytest.mark.parametrize(
    "overrides,missing",
    [
        ({"ip_address": 0}, ["ip_address"]),
        ({"location_address": False, "ip_address": 0}, ["location_address", "ip_address"]),
        ({"department": []}, ["department"]),
    ],
)
def test_falsy_values_count_as_missing(client, relay, sample_payload, overrides, missing):
    response = client.post("/api/attendance", json=dict(sample_payload, **overrides))

    assert response.status_code == 400
    assert response.get_json()["missing"] == missing
    relay.submit.assert_not_called()


def test_whitespace_value_is_present(client, relay, sample_payload):
    response = client.post("/api/attendance", json=dict(sample_payload, location_address="  "))

    assert response.status_code == 200
    relay.submit.assert_called_once()


def test_non_string_fields_are_relayed_once_and_succeed(client, relay, sample_payload):
    payload = dict(sample_payload, image_url=12345, timestamp=1714554900)

    response = client.post("/api/attendance", json=payload)

    assert response.status_code == 200
    assert response.get_json()["success"] is True
    relay.submit.assert_called_once_with(payload)


def test_empty_object_reports_every_field(client, relay):
    response = client.post("/api/attendance", json={})

    assert response.status_code == 400
    assert response.get_json()["missing"] == REQUIRED_FIELDS
    relay.submit.assert_not_called()


def test_non_object_json_reports_every_field(client, relay):
    response = client.post("/api/attendance", json=[1, 2, 3])

    assert response.status_code == 400
    assert response.get_json()["missing"] == REQUIRED_FIELDS


def test_invalid_json_body_is_rejected(client, relay):
    response = client.post("/api/attendance", data="{not json", content_type="application/json")

    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid JSON body"
    relay.submit.assert_not_called()


def test_list_is_passed_through_and_repeatable(client, relay):
    relay.list_records.return_value = {"data": {"Items": [{"id": "USR1"}]}}

    first = client.get("/api/attendance")
    second = client.get("/api/attendance")

    assert first.status_code == 200
    assert first.get_json() == {"success": True, "data": {"data": {"Items": [{"id": "USR1"}]}}}
    assert second.get_json() == first.get_json()
    assert relay.list_records.call_count == 2
    relay.submit.assert_not_called()


def test_preflight_returns_cors_headers(client, relay):
    response = client.open("/api/attendance", method="OPTIONS")

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type"
    relay.submit.assert_not_called()
    relay.list_records.assert_not_called()


def test_remote_error_status_and_message_are_mirrored(client, relay, sample_payload):
    relay.submit.side_effect = RemoteError(422, {"message": "Duplicate check-in"})

    response = client.post("/api/attendance", json=sample_payload)

    assert response.status_code == 422
    body = response.get_json()
    assert body["error"] == "Remote API Error"
    assert body["message"] == "Duplicate check-in"
    assert body["details"] == {"message": "Duplicate check-in"}


def test_remote_error_without_message_uses_status(client, relay, sample_payload):
    relay.submit.side_effect = RemoteError(502, "Bad Gateway")

    response = client.post("/api/attendance", json=sample_payload)

    assert response.status_code == 502
    assert response.get_json()["message"] == "Remote API returned status 502"


def test_unreachable_remote_is_503(client, relay, sample_payload):
    relay.submit.side_effect = NetworkError("connection refused")

    response = client.post("/api/attendance", json=sample_payload)

    assert response.status_code == 503
    assert response.get_json()["error"] == "Network Error"


@pytest.mark.parametrize(
    "error,message",
    [
        (LocalError("Invalid URL ''"), "Invalid URL ''"),
        (LocalError(), "An unexpected error occurred"),
    ],
)
def test_local_failure_is_500(client, relay, error, message):
    relay.list_records.side_effect = error

    response = client.get("/api/attendance")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal Server Error", "message": message}


def test_dashboard_stats_endpoint(client, relay):
    relay.list_records.return_value = {
        "data": {
            "Items": [
                {"id": "USR1", "department": "engineering", "timestamp": "2024-05-01T09:00:00.000Z"},
                {"id": "USR2", "department": "sales", "timestamp": "2024-05-01T10:00:00.000Z"},
                {"id": "USR3", "department": "engineering", "timestamp": "2024-05-02T08:00:00.000Z"},
            ]
        }
    }

    response = client.get("/api/dashboard/stats")

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["total"] == 3
    assert data["departments"] == {"engineering": 2, "sales": 1}
    assert data["department_count"] == 2
    assert [record["id"] for record in data["recent"]] == ["USR3", "USR2", "USR1"]


def test_department_chart_is_png(client, relay):
    relay.list_records.return_value = {"data": {"Items": [{"department": "hr"}]}}

    response = client.get("/api/dashboard/department-chart.png")

    assert response.status_code == 200
    assert response.mimetype == "image/png"
    assert response.data.startswith(b"\x89PNG")


def test_unknown_route_is_json_404(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.get_json()["error"] == "Not Found"


def test_submissions_are_logged(app, client, sample_payload, tmp_path):
    client.post("/api/attendance", json=sample_payload)

    for handler in app.logger_handler.logger.handlers:
        handler.flush()
    log_text = (tmp_path / "logs" / "application.log").read_text()
    assert "attendance_submitted" in log_text
    assert "...[truncated]" in log_text
