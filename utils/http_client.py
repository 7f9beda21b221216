"""
HTTP Client Boundary
====================

JSON request helper shared by the gateway relay and the kiosk submission
client. requests exceptions never escape this module: they are converted to
RemoteError, NetworkError or LocalError so callers can handle each case
explicitly.
"""

from collections import namedtuple

import requests

from errors import LocalError, NetworkError, RemoteError

JSON_HEADERS = {
    'Content-Type': 'application/json',
    'Accept': 'application/json',
}

JsonResponse = namedtuple('JsonResponse', ['status', 'body'])


def decode_body(response):
    """Return the parsed JSON body, falling back to the raw text"""
    try:
        return response.json()
    except ValueError:
        return response.text or None


def send_json(method, url, payload=None, timeout=30, session=None):
    """
    Send a JSON request and return a JsonResponse for any 1xx-3xx answer.

    Raises:
        RemoteError: the server answered with a 4xx/5xx status
        NetworkError: connection failure or timeout
        LocalError: invalid URL, unserialisable payload or other setup failure
    """
    http = session or requests
    try:
        response = http.request(
            method,
            url,
            json=payload,
            headers=JSON_HEADERS,
            timeout=timeout
        )
        response.raise_for_status()
    except requests.HTTPError as e:
        raise RemoteError(e.response.status_code, decode_body(e.response)) from e
    except (requests.ConnectionError, requests.Timeout) as e:
        raise NetworkError(str(e)) from e
    except (requests.RequestException, ValueError, TypeError) as e:
        raise LocalError(str(e) or 'An unexpected error occurred') from e

    return JsonResponse(response.status_code, decode_body(response))


def get_json(url, params=None, timeout=10, session=None, headers=None):
    """
    Plain GET for third-party lookups (IP echo, reverse geocoding).

    Errors are left as requests exceptions; callers substitute their own
    fallback value.
    """
    http = session or requests
    response = http.get(url, params=params, headers=headers, timeout=timeout)
    response.raise_for_status()
    return response.json()
