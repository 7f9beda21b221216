"""
Configuration for the Attendance Check-in System
================================================

Settings are read from the environment (a local .env file is loaded first)
and shared by the gateway (app.py) and the kiosk client (checkin.py).
"""

import os
from dotenv import load_dotenv

# Load environment variables in .env
load_dotenv()


def _env_bool(name, default='False'):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes')


class Config:
    """Flask-style configuration object, loaded with app.config.from_object"""

    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-attendance-secret')
    DEBUG = _env_bool('DEBUG')
    FLASK_HOST = os.environ.get('FLASK_HOST', '127.0.0.1')
    FLASK_PORT = int(os.environ.get('FLASK_PORT', '5000'))
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')

    # Gateway -> remote storage API
    REMOTE_STORAGE_API_URL = os.environ.get('REMOTE_STORAGE_API_URL', '')
    SUBMISSION_TIMEOUT = float(os.environ.get('SUBMISSION_TIMEOUT', '30'))

    # Kiosk -> gateway
    GATEWAY_URL = os.environ.get('GATEWAY_URL', 'http://127.0.0.1:5000/api/attendance')

    # Third-party lookups
    IP_ECHO_URL = os.environ.get('IP_ECHO_URL', 'https://api.ipify.org?format=json')
    REVERSE_GEOCODE_URL = os.environ.get(
        'REVERSE_GEOCODE_URL',
        'https://api.bigdatacloud.net/data/reverse-geocode-client'
    )
    IP_GEOLOCATION_URL = os.environ.get('IP_GEOLOCATION_URL', 'https://ipapi.co/json/')
    HTTP_TIMEOUT = float(os.environ.get('HTTP_TIMEOUT', '10'))

    # Geolocation
    GEOLOCATION_PROVIDER = os.environ.get('GEOLOCATION_PROVIDER', 'ip').lower()
    GEOLOCATION_CONSENT = _env_bool('GEOLOCATION_CONSENT', 'True')
    GEOLOCATION_TIMEOUT = float(os.environ.get('GEOLOCATION_TIMEOUT', '10'))
    GEOLOCATION_MAXIMUM_AGE = float(os.environ.get('GEOLOCATION_MAXIMUM_AGE', '60'))
    STATIC_LATITUDE = os.environ.get('STATIC_LATITUDE')
    STATIC_LONGITUDE = os.environ.get('STATIC_LONGITUDE')
    STATIC_ACCURACY = float(os.environ.get('STATIC_ACCURACY', '10'))

    # Camera
    CAMERA_INDEX = int(os.environ.get('CAMERA_INDEX', '0'))
    CAPTURE_WIDTH = int(os.environ.get('CAPTURE_WIDTH', '640'))
    CAPTURE_HEIGHT = int(os.environ.get('CAPTURE_HEIGHT', '480'))
    JPEG_QUALITY = float(os.environ.get('JPEG_QUALITY', '0.8'))

    # Client-side session storage
    SESSION_STORE_PATH = os.environ.get(
        'SESSION_STORE_PATH',
        os.path.join(os.path.expanduser('~'), '.attendance', 'local_storage.json')
    )
