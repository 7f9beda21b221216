"""
Device Utilities
================

User-agent helpers: the short "Browser / OS" description shown on the kiosk
and the detailed device string used in gateway logs.
"""

from user_agents import parse

# Ordered token lists: first match wins
BROWSER_TOKENS = [
    ('Chrome', 'Chrome'),
    ('Safari', 'Safari'),
    ('Firefox', 'Firefox'),
    ('Edge', 'Edge'),
]

OS_TOKENS = [
    ('Win', 'Windows'),
    ('Mac', 'macOS'),
    ('Linux', 'Linux'),
    ('Android', 'Android'),
    ('iOS', 'iOS'),
]

UNKNOWN = 'Unknown'


def _first_match(user_agent, tokens):
    for token, label in tokens:
        if token in user_agent:
            return label
    return UNKNOWN


def describe_device(user_agent_string):
    """'Browser / OS' from plain token matching, e.g. 'Chrome / Windows'"""
    user_agent_string = user_agent_string or ''
    browser = _first_match(user_agent_string, BROWSER_TOKENS)
    os_name = _first_match(user_agent_string, OS_TOKENS)
    return f"{browser} / {os_name}"


def detect_device_info(user_agent_string):
    """Extract device information from user agent"""
    try:
        user_agent = parse(user_agent_string or '')
        device_info = f"{user_agent.device.family}"

        if user_agent.os.family:
            device_info += f" - {user_agent.os.family}"
            if user_agent.os.version_string:
                device_info += f" {user_agent.os.version_string}"

        if user_agent.browser.family:
            device_info += f" ({user_agent.browser.family})"

        return device_info[:200]  # Limit length
    except (TypeError, ValueError):
        return "Unknown Device"
