"""
Utilities Package for the Attendance Check-in System
====================================================

Modules:
    - auth_decorators: role gates for kiosk commands
    - validation: roles, demo credentials, forms and required fields
    - device_utils: user-agent descriptions
    - http_client: JSON requests with tagged error variants
"""

# Authentication decorators
from .auth_decorators import (
    login_required,
    admin_required,
)

# Validation functions
from .validation import (
    has_admin_privileges,
    get_role_permissions,
    validate_credentials,
    validate_login_form,
    validate_signup_form,
    find_missing_fields,
    normalize_department,
    DUMMY_CREDENTIALS,
)

# Device helpers
from .device_utils import describe_device, detect_device_info

# Export all for easy importing
__all__ = [
    # Decorators
    'login_required',
    'admin_required',

    # Validation
    'has_admin_privileges',
    'get_role_permissions',
    'validate_credentials',
    'validate_login_form',
    'validate_signup_form',
    'find_missing_fields',
    'normalize_department',
    'DUMMY_CREDENTIALS',

    # Device
    'describe_device',
    'detect_device_info',
]
