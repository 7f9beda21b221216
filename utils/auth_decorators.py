"""
Authentication and Authorization Decorators
===========================================

Role gates for kiosk commands. A decorated command is called as
command(args, config) and receives the loaded UserSession as a third
argument; without a suitable session it prints a message and returns
exit code 1.
"""

from functools import wraps

from session_repository import JsonFileStore, SessionRepository
from utils.validation import has_admin_privileges


def get_session_repository(config):
    return SessionRepository(JsonFileStore(config.SESSION_STORE_PATH))


def login_required(f):
    """
    Decorator to ensure user is logged in

    Usage:
        @login_required
        def cmd_checkin(args, config, session):
            ...
    """
    @wraps(f)
    def decorated_function(args, config, *extra):
        session = get_session_repository(config).load()
        if session is None:
            print("⚠️ Please log in to access this command.")
            return 1
        return f(args, config, session, *extra)
    return decorated_function


def admin_required(f):
    """
    Decorator to ensure user has admin privileges

    Usage:
        @admin_required
        def cmd_dashboard(args, config, session):
            ...
    """
    @wraps(f)
    def decorated_function(args, config, *extra):
        session = get_session_repository(config).load()
        if session is None:
            print("⚠️ Please log in to access this command.")
            return 1

        if not has_admin_privileges(session.role):
            print("⛔ Administrator privileges required for this command.")
            return 1

        return f(args, config, session, *extra)
    return decorated_function
