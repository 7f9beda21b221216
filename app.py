"""
Attendance Submission Gateway
=============================

Flask application that sits between the check-in kiosk and the remote
storage API:

    GET     /api/attendance                     list stored records
    POST    /api/attendance                     validate and relay one record
    OPTIONS /api/attendance                     CORS preflight
    GET     /api/dashboard/stats                dashboard aggregates
    GET     /api/dashboard/department-chart.png department pie chart
"""

from flask import Blueprint, Flask, Response, current_app, jsonify, request

from config import Config
from dashboard_stats import build_dashboard_stats, render_department_chart
from errors import GatewayError, LocalError, NetworkError, RemoteError
from logger_handler import AppLogger, log_gateway_activity
from models.attendance import AttendanceRecord
from storage_relay import StorageRelay
from utils.validation import find_missing_fields

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, POST, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type',
}

gateway = Blueprint('gateway', __name__)


def relay_error_response(operation, error):
    """
    Map a relay failure to the JSON error envelope and status:
    remote error status is mirrored, unreachable API is 503, anything
    local is 500.
    """
    current_app.logger_handler.log_relay_error(operation, error)

    if isinstance(error, RemoteError):
        body = error.body if isinstance(error.body, dict) else {}
        return jsonify({
            'error': 'Remote API Error',
            'message': body.get('message') or f'Remote API returned status {error.status}',
            'details': error.body
        }), error.status

    if isinstance(error, NetworkError):
        return jsonify({
            'error': 'Network Error',
            'message': 'Unable to reach the remote storage API. Please check your internet connection.'
        }), 503

    message = error.message if isinstance(error, LocalError) else None
    return jsonify({
        'error': 'Internal Server Error',
        'message': message or 'An unexpected error occurred'
    }), 500


@gateway.route('/')
def index():
    """Service banner"""
    return jsonify({
        'service': 'attendance-gateway',
        'endpoints': ['/api/attendance', '/api/dashboard/stats', '/api/dashboard/department-chart.png']
    })


@gateway.route('/api/attendance', methods=['OPTIONS'])
def attendance_preflight():
    """Handle preflight OPTIONS request for CORS"""
    return Response(status=200, headers=CORS_HEADERS)


@gateway.route('/api/attendance', methods=['GET'], provide_automatic_options=False)
@log_gateway_activity('list_attendance')
def list_attendance():
    """Fetch the stored attendance collection from the remote API"""
    try:
        data = current_app.storage_relay.list_records()
    except GatewayError as e:
        return relay_error_response('list_records', e)

    return jsonify({
        'success': True,
        'data': data
    }), 200


@gateway.route('/api/attendance', methods=['POST'], provide_automatic_options=False)
@log_gateway_activity('submit_attendance')
def submit_attendance():
    """Validate an attendance record and forward it unmodified"""
    payload = request.get_json(silent=True)

    if payload is None:
        return jsonify({
            'error': 'Invalid JSON body',
            'message': 'Request body must be JSON'
        }), 400

    missing_fields = find_missing_fields(payload)
    if missing_fields:
        current_app.logger_handler.log_validation_failure(missing_fields)
        return jsonify({
            'error': 'Missing required fields',
            'missing': missing_fields
        }), 400

    # Built before the relay: nothing after a stored record may fail the request
    record_summary = AttendanceRecord.from_payload(payload).summary()

    try:
        data = current_app.storage_relay.submit(payload)
    except GatewayError as e:
        return relay_error_response('submit', e)

    current_app.logger_handler.log_submission(record_summary, remote_response=data)

    return jsonify({
        'success': True,
        'message': 'Attendance submitted successfully',
        'data': data
    }), 200


@gateway.route('/api/dashboard/stats')
@log_gateway_activity('dashboard_stats')
def dashboard_stats():
    """Aggregates for the admin dashboard"""
    try:
        data = current_app.storage_relay.list_records()
    except GatewayError as e:
        return relay_error_response('dashboard_stats', e)

    return jsonify({
        'success': True,
        'data': build_dashboard_stats(data)
    })


@gateway.route('/api/dashboard/department-chart.png')
def department_chart():
    """Department distribution pie chart"""
    try:
        data = current_app.storage_relay.list_records()
    except GatewayError as e:
        return relay_error_response('department_chart', e)

    stats = build_dashboard_stats(data)
    return Response(render_department_chart(stats['departments']), mimetype='image/png')


def create_app(config_object=Config, relay=None, **overrides):
    """
    Build the gateway application.

    Args:
        config_object: class or object passed to app.config.from_object
        relay: StorageRelay-like object; built from the config when omitted
        overrides: extra config values, applied last
    """
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.config.update(overrides)

    AppLogger(app)

    app.storage_relay = relay or StorageRelay(
        app.config['REMOTE_STORAGE_API_URL'],
        timeout=app.config['SUBMISSION_TIMEOUT']
    )
    app.register_blueprint(gateway)

    if not app.config['REMOTE_STORAGE_API_URL'] and relay is None:
        app.logger_handler.log_system_event(
            event_type='configuration_warning',
            description='REMOTE_STORAGE_API_URL is not set; relay calls will fail',
            severity='WARNING'
        )

    return app


if __name__ == '__main__':
    app = create_app()
    app.logger_handler.logger.info("Attendance gateway started")
    app.run(debug=app.config['DEBUG'],
            host=app.config['FLASK_HOST'],
            port=app.config['FLASK_PORT'])
