"""
Validation Utilities for the Attendance Check-in System
=======================================================

Role checks, demo credential validation, form validation and the
required-field check used by the gateway.
"""

import re

from models.attendance import REQUIRED_FIELDS, DEPARTMENTS

# Demo credentials for the kiosk login
DUMMY_CREDENTIALS = {
    'user': {'email': 'user@demo.com', 'password': 'user1234'},
    'admin': {'email': 'admin@demo.com', 'password': 'admin1234'},
}

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2


def has_admin_privileges(role):
    """
    Check if role has admin privileges

    Args:
        role (str): User role to check

    Returns:
        bool: True if role is admin
    """
    return role == 'admin'


def get_role_permissions(role):
    """
    Get permissions description for a role

    Args:
        role (str): User role

    Returns:
        dict: Role permissions with title, permissions list, and restrictions
    """
    permissions = {
        'admin': {
            'title': 'Administrator Permissions',
            'permissions': [
                'Take attendance',
                'View the attendance dashboard',
                'View department statistics',
            ],
            'restrictions': []
        },
        'user': {
            'title': 'User Permissions',
            'permissions': [
                'Take attendance',
            ],
            'restrictions': [
                'Cannot view the attendance dashboard',
            ]
        }
    }

    return permissions.get(role, {
        'title': 'Unknown Role',
        'permissions': [],
        'restrictions': ['Invalid role specified']
    })


def validate_credentials(email, password):
    """
    Match an email/password pair against the demo accounts

    Returns:
        str: 'admin' or 'user', or None if the pair does not match
    """
    for role in ('admin', 'user'):
        account = DUMMY_CREDENTIALS[role]
        if email == account['email'] and password == account['password']:
            return role
    return None


def validate_email(email):
    return bool(EMAIL_PATTERN.match(email or ''))


def validate_password(password):
    return len(password or '') >= MIN_PASSWORD_LENGTH


def validate_name(name):
    return len((name or '').strip()) >= MIN_NAME_LENGTH


def validate_login_form(email, password):
    """
    Validate the login form fields

    Returns:
        dict: field name -> error message, empty when the form is valid
    """
    errors = {}

    if not email:
        errors['email'] = 'Email is required'
    elif not validate_email(email):
        errors['email'] = 'Please enter a valid email address'

    if not password:
        errors['password'] = 'Password is required'
    elif not validate_password(password):
        errors['password'] = f'Password must be at least {MIN_PASSWORD_LENGTH} characters long'

    return errors


def validate_signup_form(name, email, password, confirm_password):
    """
    Validate the sign-up form fields

    Returns:
        dict: field name -> error message, empty when the form is valid
    """
    errors = {}

    if not validate_name(name):
        errors['name'] = f'Name must be at least {MIN_NAME_LENGTH} characters long'

    errors.update(validate_login_form(email, password))

    if not confirm_password:
        errors['confirm_password'] = 'Please confirm your password'
    elif confirm_password != password:
        errors['confirm_password'] = 'Passwords do not match'

    return errors


def is_missing(value):
    """A field is missing when absent or falsy (None, '', 0, False, empty containers)"""
    return not value


def find_missing_fields(payload, required=REQUIRED_FIELDS):
    """
    List the required fields that are missing from a submission payload

    Returns:
        list: missing field names, in the order of the required list
    """
    if not isinstance(payload, dict):
        return list(required)
    return [field for field in required if is_missing(payload.get(field))]


def normalize_department(department):
    """
    Map a department name to its canonical spelling (case-insensitive)

    Returns:
        str: canonical department, '' for an empty value, None if unknown
    """
    if not department or not department.strip():
        return ''
    wanted = department.strip().lower()
    for name in DEPARTMENTS:
        if name.lower() == wanted:
            return name
    return None
