"""
Camera Access
=============

A small media API for the kiosk, shaped like the browser one:

    devices = OpenCVMediaDevices(camera_index=0)
    stream = await devices.get_user_media(width=640, height=480, facing_mode='user')
    frame = stream.read_frame()     # PIL.Image
    stream.stop()                   # releases every track

Also holds encode_frame(), which rasterises a frame and encodes it as a
base64 JPEG data URI.
"""

import asyncio
import base64
import io
import logging

import cv2
from PIL import Image

from errors import DeviceUnavailableError

logger = logging.getLogger('attendance_kiosk.camera')

DEFAULT_WIDTH = 640
DEFAULT_HEIGHT = 480


class MediaTrack:
    """One track of a media stream; stop() is idempotent"""

    kind = 'video'

    def __init__(self, label=''):
        self.label = label
        self.ready_state = 'live'

    def stop(self):
        if self.ready_state == 'ended':
            return
        self.ready_state = 'ended'
        self._release()

    def _release(self):
        pass


class MediaStream:
    """A set of tracks plus access to the latest video frame"""

    def __init__(self, tracks):
        self._tracks = list(tracks)

    def get_tracks(self):
        return list(self._tracks)

    @property
    def active(self):
        return any(track.ready_state == 'live' for track in self._tracks)

    @property
    def video_width(self):
        """Native frame width, 0 when unknown"""
        return 0

    @property
    def video_height(self):
        """Native frame height, 0 when unknown"""
        return 0

    def read_frame(self):
        raise NotImplementedError

    def stop(self):
        for track in self._tracks:
            track.stop()


class MediaDevices:
    async def get_user_media(self, width=DEFAULT_WIDTH, height=DEFAULT_HEIGHT, facing_mode='user'):
        """
        Open a video-only stream.

        Raises:
            AccessDeniedError / DeviceUnavailableError
        """
        raise NotImplementedError


class OpenCVVideoTrack(MediaTrack):
    def __init__(self, capture, label=''):
        super().__init__(label)
        self.capture = capture

    def _release(self):
        self.capture.release()


class OpenCVMediaStream(MediaStream):
    def __init__(self, capture, label=''):
        self.capture = capture
        super().__init__([OpenCVVideoTrack(capture, label)])

    @property
    def video_width(self):
        return int(self.capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)

    @property
    def video_height(self):
        return int(self.capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)

    def read_frame(self):
        if not self.active:
            raise RuntimeError('Stream is not active')
        ok, frame = self.capture.read()
        if not ok or frame is None:
            raise RuntimeError('No frame available from camera')
        try:
            return Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
        except (cv2.error, TypeError, ValueError) as e:
            raise DeviceUnavailableError(f'Unreadable camera frame: {e}') from e


class OpenCVMediaDevices(MediaDevices):
    """Webcam access through cv2.VideoCapture"""

    def __init__(self, camera_index=0):
        self.camera_index = camera_index

    def _open(self, width, height):
        capture = cv2.VideoCapture(self.camera_index)
        if not capture.isOpened():
            capture.release()
            raise DeviceUnavailableError(f'Camera {self.camera_index} could not be opened')
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        return capture

    async def get_user_media(self, width=DEFAULT_WIDTH, height=DEFAULT_HEIGHT, facing_mode='user'):
        # Desktop webcams have no facing mode; the configured index is used
        logger.info("Requesting camera %s (%sx%s, facing=%s)", self.camera_index, width, height, facing_mode)
        capture = await asyncio.to_thread(self._open, width, height)
        return OpenCVMediaStream(capture, label=f'camera-{self.camera_index}')


def encode_frame(frame, width=0, height=0, quality=0.8):
    """
    Draw a frame onto an off-screen RGB raster and encode it as JPEG.

    Args:
        frame (PIL.Image.Image): the current video frame
        width, height (int): raster size; 0 falls back to 640x480
        quality (float): JPEG quality in the range 0..1

    Returns:
        str: 'data:image/jpeg;base64,...'
    """
    width = width or DEFAULT_WIDTH
    height = height or DEFAULT_HEIGHT

    try:
        canvas = Image.new('RGB', (width, height))
        source = frame.convert('RGB')
        if source.size != (width, height):
            source = source.resize((width, height))
        canvas.paste(source, (0, 0))

        buffer = io.BytesIO()
        canvas.save(buffer, format='JPEG', quality=int(round(quality * 100)))
    except (AttributeError, OSError, TypeError, ValueError) as e:
        raise DeviceUnavailableError(f'Frame could not be encoded: {e}') from e
    img_str = base64.b64encode(buffer.getvalue()).decode()

    return f"data:image/jpeg;base64,{img_str}"
