import asyncio
import base64
import io
from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest
from PIL import Image

from camera import MediaTrack, OpenCVMediaDevices, OpenCVMediaStream, encode_frame
from errors import DeviceUnavailableError

PREFIX = "data:image/jpeg;base64,"


def _decode(data_url):
    assert data_url.startswith(PREFIX)
    return Image.open(io.BytesIO(base64.b64decode(data_url[len(PREFIX):])))


def test_encode_frame_falls_back_to_default_size():
    image = _decode(encode_frame(Image.new("RGB", (64, 48), "red")))

    assert image.format == "JPEG"
    assert image.size == (640, 480)


def test_encode_frame_uses_given_size():
    image = _decode(encode_frame(Image.new("RGBA", (320, 240)), width=320, height=240, quality=0.5))

    assert image.size == (320, 240)


def test_track_stop_is_idempotent():
    released = []

    class Track(MediaTrack):
        def _release(self):
            released.append(True)

    track = Track()
    track.stop()
    track.stop()

    assert track.ready_state == "ended"
    assert released == [True]


def test_unopened_camera_is_unavailable():
    capture = MagicMock()
    capture.isOpened.return_value = False

    with patch("camera.cv2.VideoCapture", return_value=capture):
        with pytest.raises(DeviceUnavailableError):
            asyncio.run(OpenCVMediaDevices(camera_index=3).get_user_media())

    capture.release.assert_called_once()


def test_opencv_stream_reads_rgb_frames_and_releases_once():
    bgr = np.zeros((48, 64, 3), dtype=np.uint8)
    bgr[:, :, 0] = 255
    capture = MagicMock()
    capture.isOpened.return_value = True
    capture.read.return_value = (True, bgr)

    with patch("camera.cv2.VideoCapture", return_value=capture):
        stream = asyncio.run(OpenCVMediaDevices().get_user_media(width=64, height=48))

    frame = stream.read_frame()
    assert frame.size == (64, 48)
    assert frame.getpixel((0, 0)) == (0, 0, 255)

    stream.stop()
    stream.stop()
    assert not stream.active
    capture.release.assert_called_once()
    with pytest.raises(RuntimeError):
        stream.read_frame()


def test_empty_read_raises():
    capture = MagicMock()
    capture.read.return_value = (False, None)

    with pytest.raises(RuntimeError):
        OpenCVMediaStream(capture).read_frame()


def test_conversion_failure_is_device_unavailable():
    capture = MagicMock()
    capture.read.return_value = (True, np.zeros((4, 4, 3), dtype=np.uint8))

    with patch("camera.cv2.cvtColor", side_effect=cv2.error("bad frame")):
        with pytest.raises(DeviceUnavailableError):
            OpenCVMediaStream(capture).read_frame()


def test_encode_failure_is_device_unavailable():
    with pytest.raises(DeviceUnavailableError):
        encode_frame(object())
