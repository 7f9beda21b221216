from unittest.mock import MagicMock, patch

import pytest

import checkin
from errors import NetworkError, RemoteError
from utils.http_client import JsonResponse


def test_login_stores_session(kiosk_config, capsys):
    assert checkin.main(["login", "--email", "admin@demo.com", "--password", "admin1234"], kiosk_config) == 0
    assert "Logged in as admin@demo.com (admin)" in capsys.readouterr().out

    assert checkin.main(["whoami"], kiosk_config) == 0
    assert "admin@demo.com (admin)" in capsys.readouterr().out


@pytest.mark.parametrize(
    "argv,expected",
    [
        (["login", "--email", "user@demo.com", "--password", "wrongpass"], "Invalid credentials"),
        (["login", "--email", "bad", "--password", "x"], "Please enter a valid email address"),
    ],
)
def test_login_failures(kiosk_config, capsys, argv, expected):
    assert checkin.main(argv, kiosk_config) == 1
    assert expected in capsys.readouterr().out
    assert checkin.main(["whoami"], kiosk_config) == 1


def test_logout(kiosk_config):
    checkin.main(["login", "--email", "user@demo.com", "--password", "user1234"], kiosk_config)

    assert checkin.main(["logout"], kiosk_config) == 0
    assert checkin.main(["whoami"], kiosk_config) == 1


def test_register_validates_form(kiosk_config, capsys):
    argv = ["register", "--name", "Ann", "--email", "ann@demo.com",
            "--password", "password1", "--confirm-password", "password2"]

    assert checkin.main(argv, kiosk_config) == 1
    assert "Passwords do not match" in capsys.readouterr().out


def test_checkin_requires_login(kiosk_config, capsys):
    assert checkin.main(["checkin", "--auto"], kiosk_config) == 1
    assert "Please log in" in capsys.readouterr().out


def test_dashboard_requires_admin(kiosk_config, capsys):
    checkin.main(["login", "--email", "user@demo.com", "--password", "user1234"], kiosk_config)

    assert checkin.main(["dashboard"], kiosk_config) == 1
    assert "Administrator privileges required" in capsys.readouterr().out


def _login_admin(kiosk_config):
    checkin.main(["login", "--email", "admin@demo.com", "--password", "admin1234"], kiosk_config)


def _client_returning(result):
    client = MagicMock()

    async def list_records():
        if isinstance(result, Exception):
            raise result
        return result

    client.list_records = list_records
    return client


def test_dashboard_prints_stats_and_chart(kiosk_config, capsys, tmp_path):
    _login_admin(kiosk_config)
    body = {"success": True, "data": {"data": {"Items": [{"id": "USR1", "department": "sales"}]}}}
    chart = tmp_path / "chart.png"

    with patch("checkin.GatewayClient", return_value=_client_returning(JsonResponse(200, body))):
        assert checkin.main(["dashboard", "--chart", str(chart)], kiosk_config) == 0

    out = capsys.readouterr().out
    assert "Total Attendance: 1" in out
    assert chart.read_bytes().startswith(b"\x89PNG")


def test_dashboard_reports_gateway_failure(kiosk_config, capsys):
    _login_admin(kiosk_config)

    with patch("checkin.GatewayClient", return_value=_client_returning(NetworkError("refused"))):
        assert checkin.main(["dashboard"], kiosk_config) == 1

    assert "Failed to fetch attendance data: refused" in capsys.readouterr().out


def test_dashboard_shows_remote_error_message(kiosk_config, capsys):
    _login_admin(kiosk_config)
    error = RemoteError(502, {"error": "Remote API Error", "message": "Storage API is down"})

    with patch("checkin.GatewayClient", return_value=_client_returning(error)):
        assert checkin.main(["dashboard"], kiosk_config) == 1

    assert "Failed to fetch attendance data: Storage API is down" in capsys.readouterr().out
