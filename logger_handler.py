#!/usr/bin/env python3
"""
Logging Handler for the Attendance Gateway
==========================================

This module provides logging for the submission gateway:
- Attendance submissions relayed to the remote storage API
- Validation failures on incoming submissions
- Relay errors (remote error status, unreachable API, local failures)
- Flask application errors and unknown routes

Features:
- JSON-structured event lines
- Rotating log files to prevent disk space issues
- Separate security log
- Console output in debug mode
"""

import logging
import logging.handlers
import json
import os
import traceback
from datetime import datetime
from functools import wraps

from flask import current_app, has_request_context, jsonify, request

from errors import LocalError, NetworkError, RemoteError
from utils.device_utils import detect_device_info


class AppLogger:
    """
    Gateway logger with rotating file outputs and JSON error handlers
    """

    def __init__(self, app=None):
        """Initialize the logger with a Flask app"""
        self.app = app
        self.logger = None
        self.security_logger = None

        if app:
            self.init_app(app)

    def init_app(self, app):
        """Attach loggers and JSON error handlers to the gateway app"""
        self.app = app

        # Relative LOG_DIR is resolved against the app root
        log_dir = app.config.get('LOG_DIR') or 'logs'
        if not os.path.isabs(log_dir):
            log_dir = os.path.join(app.root_path, log_dir)
        os.makedirs(log_dir, exist_ok=True)

        self.logger = logging.getLogger('attendance_gateway')
        self.logger.setLevel(logging.INFO)
        self.security_logger = logging.getLogger('attendance_gateway_security')
        self.security_logger.setLevel(logging.WARNING)

        # Loggers are process-wide; a second create_app must not double up handlers
        for existing in (self.logger, self.security_logger):
            for handler in list(existing.handlers):
                existing.removeHandler(handler)
                handler.close()

        self._setup_file_handlers(log_dir)
        self._setup_console_handler()
        self._register_error_handlers()

        app.logger_handler = self

    def _setup_file_handlers(self, log_dir):
        """One rotating file per log stream"""
        formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        for filename, level, max_mb, backups, target in (
            ('application.log', logging.INFO, 10, 5, self.logger),
            ('errors.log', logging.ERROR, 5, 10, self.logger),
            ('security.log', logging.WARNING, 2, 20, self.security_logger),
        ):
            handler = logging.handlers.RotatingFileHandler(
                os.path.join(log_dir, filename),
                maxBytes=max_mb * 1024 * 1024,
                backupCount=backups,
                encoding='utf-8'
            )
            handler.setLevel(level)
            handler.setFormatter(formatter)
            target.addHandler(handler)

    def _setup_console_handler(self):
        """Setup console handler for development environment"""
        if self.app.debug:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.DEBUG)

            console_formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(message)s',
                datefmt='%H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)

            self.logger.addHandler(console_handler)

    def _register_error_handlers(self):
        """Register Flask error handlers for automatic logging"""

        @self.app.errorhandler(500)
        def handle_internal_error(error):
            """JSON 500 with the original exception logged"""
            original = getattr(error, 'original_exception', None) or error
            self.log_flask_error(
                error_type=type(original).__name__,
                error_message=str(original),
                stack_trace=traceback.format_exc()
            )
            return jsonify({
                'error': 'Internal Server Error',
                'message': 'An unexpected error occurred'
            }), 500

        @self.app.errorhandler(404)
        def handle_not_found(error):
            """JSON 404, recorded as a security event"""
            self.log_security_event(
                event_type="page_not_found",
                description=f"404 error: {request.path}",
                severity="LOW"
            )
            return jsonify({
                'error': 'Not Found',
                'message': f'No route for {request.path}'
            }), 404

    def _get_request_context(self):
        """Get current request context information"""
        if not has_request_context():
            return {}

        user_agent = request.headers.get('User-Agent', '')
        return {
            'ip_address': request.environ.get('HTTP_X_FORWARDED_FOR', request.remote_addr),
            'user_agent': user_agent,
            'device_info': detect_device_info(user_agent),
            'request_path': request.path,
            'request_method': request.method,
        }

    def _emit(self, logger, level, event, event_data):
        logger.log(level, json.dumps({
            'event': event,
            'data': event_data
        }, default=str))

    # SUBMISSION LOGGING METHODS

    def log_submission(self, record_summary, remote_response=None):
        """Log an attendance submission accepted by the remote API"""
        event_data = {
            'record': record_summary,
            'remote_response': remote_response,
            'submitted_timestamp': datetime.now().isoformat(),
            'request_context': self._get_request_context()
        }
        self._emit(self.logger, logging.INFO, 'attendance_submitted', event_data)

    def log_validation_failure(self, missing_fields, record_summary=None):
        """Log a submission rejected for missing fields"""
        event_data = {
            'missing_fields': missing_fields,
            'record': record_summary,
            'request_context': self._get_request_context()
        }
        self._emit(self.logger, logging.WARNING, 'attendance_validation_failed', event_data)

    def log_relay_error(self, operation, error):
        """Log a failed call to the remote storage API"""
        event_data = {
            'operation': operation,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'error_timestamp': datetime.now().isoformat(),
        }

        if isinstance(error, RemoteError):
            event_data['remote_status'] = error.status
            event_data['remote_body'] = error.body
        elif isinstance(error, NetworkError):
            event_data['network_failure'] = True
        elif isinstance(error, LocalError):
            event_data['local_failure'] = True

        self._emit(self.logger, logging.ERROR, 'relay_error', event_data)

    # APPLICATION ERRORS

    def log_flask_error(self, error_type, error_message, stack_trace=None, request_data=None):
        """Log an unhandled exception raised inside a request"""
        event_data = {
            'error_type': error_type,
            'error_message': error_message,
            'error_timestamp': datetime.now().isoformat(),
            'request_context': self._get_request_context(),
            'stack_trace': stack_trace[:2000] if stack_trace else None  # Truncate long traces
        }

        if request_data:
            event_data['request_data'] = request_data

        self._emit(self.logger, logging.ERROR, 'flask_error', event_data)

    # SECURITY AND SYSTEM EVENTS

    def log_security_event(self, event_type, description, severity='MEDIUM', additional_data=None):
        """Log to the security logger (unknown routes, suspicious input)"""
        event_data = {
            'security_event_type': event_type,
            'description': description,
            'severity': severity,
            'event_timestamp': datetime.now().isoformat(),
            'request_context': self._get_request_context()
        }

        if additional_data:
            event_data['additional_data'] = additional_data

        self._emit(self.security_logger, logging.WARNING, 'security_event', event_data)

    def log_system_event(self, event_type, description, severity='INFO', additional_data=None):
        """Log startup and configuration events"""
        event_data = {
            'system_event_type': event_type,
            'description': description,
            'severity': severity,
            'event_timestamp': datetime.now().isoformat(),
        }

        if additional_data:
            event_data['additional_data'] = additional_data

        level = logging.getLevelName(severity)
        if not isinstance(level, int):
            level = logging.INFO
        self._emit(self.logger, level, 'system_event', event_data)


# ROUTE ACTIVITY DECORATOR

def log_gateway_activity(activity_type):
    """Decorator to log each call of a gateway route"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            handler = getattr(current_app, 'logger_handler', None)
            try:
                result = f(*args, **kwargs)
            except Exception as e:
                if handler:
                    handler.log_flask_error(
                        error_type=f"activity_error_{activity_type}",
                        error_message=str(e),
                        stack_trace=traceback.format_exc()
                    )
                raise

            if handler:
                handler.logger.info(json.dumps({
                    'event': f'gateway_activity_{activity_type}',
                    'data': {
                        'activity': activity_type,
                        'timestamp': datetime.now().isoformat(),
                        'request_context': handler._get_request_context()
                    }
                }))
            return result

        return decorated_function
    return decorator
