"""
Error Types for the Attendance Check-in System
==============================================

Every failure in the check-in workflow is converted into one of these
exceptions at the boundary where it happens. Each carries a user-facing
message that the capture controller keeps in its state.

HTTP failures are represented by the three GatewayError variants, which are
only raised by utils.http_client:
    - RemoteError: the server answered with an error status
    - NetworkError: no response was received
    - LocalError: the request could not be built or sent
"""


class CheckInError(Exception):
    """Base class for all check-in workflow failures"""

    default_message = 'An unexpected error occurred'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AccessDeniedError(CheckInError):
    """Camera or geolocation permission was denied"""

    default_message = 'Access denied'


class DeviceUnavailableError(CheckInError):
    """No camera device, or the position could not be determined"""

    default_message = 'Device unavailable'


class AcquisitionTimeoutError(CheckInError):
    """The geolocation fix was not obtained in time"""

    default_message = 'Request timed out'


class SubmissionValidationError(CheckInError):
    """Required submission fields are missing; nothing is sent"""

    default_message = 'Missing required fields'


class GatewayError(CheckInError):
    """Base class for failures raised at the HTTP client boundary"""


class RemoteError(GatewayError):
    """The server responded with an error status"""

    def __init__(self, status, body=None):
        self.status = status
        self.body = body
        super().__init__(f'Server error: {status}')

    @property
    def body_message(self):
        """The message/error field of a JSON error body, if there is one"""
        if isinstance(self.body, dict):
            return self.body.get('message') or self.body.get('error')
        return None


class NetworkError(GatewayError):
    """The request was sent but no response was received"""

    default_message = 'No response received'


class LocalError(GatewayError):
    """The request could not be constructed or dispatched"""
