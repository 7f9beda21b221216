"""
Capture Controller
==================

State machine for one selfie check-in:

    IDLE --start_camera--> STREAMING --capture_image--> CAPTURED
    CAPTURED --retake--> STREAMING
    CAPTURED --submit--> SUBMITTING --ok--> SUBMITTED --take_another--> IDLE
                                    --fail--> CAPTURED (image kept)
    STREAMING --stop_camera--> IDLE

Every failure is caught here and stored as a message (upload_error or
location_error). Nothing is retried automatically; each retry is a new
call by the user.
"""

import asyncio
import enum
import logging

from camera import encode_frame, DEFAULT_WIDTH, DEFAULT_HEIGHT
from errors import CheckInError, LocalError, NetworkError, RemoteError, SubmissionValidationError
from models.attendance import AttendanceRecord, generate_user_id, utc_timestamp, format_location
from utils.validation import normalize_department

logger = logging.getLogger('attendance_kiosk.capture')

CAMERA_DENIED_MESSAGE = 'Camera access denied. Please allow camera permissions.'
CAMERA_NOT_READY_MESSAGE = 'Camera not ready'
CAPTURE_FAILED_MESSAGE = 'Failed to capture image'
DEPARTMENT_REQUIRED_MESSAGE = 'Please select a department before submitting'
LOCATION_REQUIRED_MESSAGE = 'Location is required. Please allow location access and try again.'
NETWORK_ERROR_MESSAGE = 'Network error: No response from server. Please check your internet connection.'


class CaptureState(enum.Enum):
    IDLE = 'idle'
    STREAMING = 'streaming'
    CAPTURED = 'captured'
    SUBMITTING = 'submitting'
    SUBMITTED = 'submitted'


class CaptureController:
    """Owns the media stream, the captured image and the location for one kiosk"""

    def __init__(self, acquirer, media_devices, gateway_client,
                 width=DEFAULT_WIDTH, height=DEFAULT_HEIGHT, jpeg_quality=0.8, rng=None):
        self.acquirer = acquirer
        self.media_devices = media_devices
        self.gateway_client = gateway_client
        self.width = width
        self.height = height
        self.jpeg_quality = jpeg_quality
        self._rng = rng

        self.state = CaptureState.IDLE
        self.user_id = generate_user_id(rng)
        self.department = ''
        self.captured_image = None
        self.location_info = None
        self.ip_address = ''
        self.upload_error = None
        self.location_error = None
        self.upload_success = False
        self.camera_loading = False
        self.location_loading = False
        self.last_response = None

        self._stream = None
        self._ip_task = None
        self._location_task = None

    # ------------------------------------------------------------------
    # Context acquisition

    def mount(self):
        """
        Start the IP lookup and the geolocation request concurrently.
        Must be called from a running event loop.
        """
        self._ip_task = asyncio.ensure_future(self._load_ip_address())
        self._location_task = asyncio.ensure_future(self.request_location())

    async def _load_ip_address(self):
        self.ip_address = await self.acquirer.resolve_public_ip()
        logger.info("IP address: %s", self.ip_address)

    async def request_location(self):
        """
        Ask for a fresh location. A failure keeps any previous result and
        sets location_error; the caller may call again to retry.
        """
        self.location_loading = True
        self.location_error = None
        try:
            self.location_info = await self.acquirer.resolve_geolocation()
        except CheckInError as e:
            self.location_error = e.message
        finally:
            self.location_loading = False

    async def wait_for_context(self):
        """Wait for the mount-time IP and location requests, if any are pending"""
        pending = [task for task in (self._ip_task, self._location_task)
                   if task is not None and not task.done()]
        if pending:
            await asyncio.gather(*pending)

    # ------------------------------------------------------------------
    # Camera

    @property
    def stream(self):
        return self._stream

    async def start_camera(self):
        """IDLE -> STREAMING. On failure the state stays IDLE."""
        if self.state != CaptureState.IDLE:
            logger.debug("start_camera ignored in state %s", self.state.value)
            return False

        self.camera_loading = True
        self.upload_error = None
        try:
            logger.info("Requesting camera access...")
            self._stream = await self.media_devices.get_user_media(
                width=self.width, height=self.height, facing_mode='user'
            )
            self.state = CaptureState.STREAMING
            self.upload_success = False
            logger.info("Camera access granted")
            return True
        except CheckInError as e:
            logger.warning("Camera error: %s", e.message)
            self.upload_error = CAMERA_DENIED_MESSAGE
            return False
        finally:
            self.camera_loading = False

    def stop_camera(self):
        """Release every track of the current stream. Safe with no stream."""
        if self._stream is not None:
            self._stream.stop()
            self._stream = None
        if self.state == CaptureState.STREAMING:
            self.state = CaptureState.IDLE

    def capture_image(self):
        """
        STREAMING -> CAPTURED. The frame is encoded before the stream is
        released, so a failed capture leaves the camera running.
        """
        if self.state != CaptureState.STREAMING or self._stream is None:
            self.upload_error = CAMERA_NOT_READY_MESSAGE
            return False

        stream = self._stream
        try:
            frame = stream.read_frame()
            image_data_url = encode_frame(
                frame,
                width=stream.video_width or self.width,
                height=stream.video_height or self.height,
                quality=self.jpeg_quality
            )
        except (CheckInError, RuntimeError, OSError, ValueError, TypeError) as e:
            logger.warning("Capture failed: %s", e)
            self.upload_error = CAPTURE_FAILED_MESSAGE
            return False

        logger.info("Image captured and encoded as base64")
        self.captured_image = image_data_url
        self.stop_camera()
        self.state = CaptureState.CAPTURED
        return True

    async def retake(self):
        """CAPTURED -> IDLE -> STREAMING, discarding the captured image"""
        if self.state != CaptureState.CAPTURED:
            return False
        self.captured_image = None
        self.state = CaptureState.IDLE
        return await self.start_camera()

    # ------------------------------------------------------------------
    # Submission

    def select_department(self, department):
        """Set the department from the fixed list (case-insensitive) or clear it"""
        canonical = normalize_department(department)
        if canonical is None:
            self.upload_error = f'Unknown department: {department}'
            return False
        self.department = canonical
        return True

    def validate_submission(self):
        """
        Raises:
            SubmissionValidationError: image, department or location missing
        """
        if not self.captured_image or not self.department:
            raise SubmissionValidationError(DEPARTMENT_REQUIRED_MESSAGE)
        if self.location_info is None:
            raise SubmissionValidationError(LOCATION_REQUIRED_MESSAGE)

    def build_record(self):
        return AttendanceRecord(
            id=self.user_id,
            image_url=self.captured_image,
            department=self.department.lower(),
            location=format_location(self.location_info.latitude, self.location_info.longitude),
            location_address=self.location_info.address,
            timestamp=utc_timestamp(),
            ip_address=self.ip_address
        )

    async def submit(self):
        """
        CAPTURED -> SUBMITTING -> SUBMITTED, or back to CAPTURED on failure.
        A no-op in any other state.

        Returns:
            bool: True when the gateway accepted the record
        """
        if self.state != CaptureState.CAPTURED:
            logger.debug("submit ignored in state %s", self.state.value)
            return False

        await self.wait_for_context()

        try:
            self.validate_submission()
        except SubmissionValidationError as e:
            logger.info("Submission blocked: %s", e.message)
            self.upload_error = e.message
            return False

        self.state = CaptureState.SUBMITTING
        self.upload_error = None
        try:
            response = await self.gateway_client.submit(self.build_record())
        except RemoteError as e:
            logger.warning("Gateway error %s: %s", e.status, e.body)
            self.upload_error = e.body_message or f'Server error: {e.status}'
        except NetworkError as e:
            logger.warning("No response from gateway: %s", e.message)
            self.upload_error = NETWORK_ERROR_MESSAGE
        except LocalError as e:
            logger.warning("Request setup error: %s", e.message)
            self.upload_error = f'Request error: {e.message}'
        else:
            self.last_response = response
            if response.status in (200, 201):
                logger.info("Attendance submitted successfully")
                self.upload_success = True
                self.captured_image = None
                self.state = CaptureState.SUBMITTED
                return True
            self.upload_error = f'Server returned status {response.status}'

        self.state = CaptureState.CAPTURED
        return False

    def take_another(self):
        """SUBMITTED -> IDLE with a fresh user id"""
        if self.state != CaptureState.SUBMITTED:
            return False
        self.upload_success = False
        self.user_id = generate_user_id(self._rng)
        self.state = CaptureState.IDLE
        return True

    def teardown(self):
        """Release the camera and drop per-attempt state"""
        self.stop_camera()
        self.location_info = None
        self.captured_image = None
