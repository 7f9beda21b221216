"""
Gateway Client
==============

Kiosk-side access to the submission gateway (/api/attendance). Calls run
off the event loop and raise the tagged GatewayError variants from
utils.http_client on failure.
"""

import asyncio
import logging

from utils.http_client import send_json

logger = logging.getLogger('attendance_kiosk.gateway_client')


class GatewayClient:
    def __init__(self, url, timeout=30, session=None):
        self.url = url
        self.timeout = timeout
        self.session = session

    async def submit(self, record):
        """POST one AttendanceRecord; returns JsonResponse(status, body)"""
        logger.info("Submitting attendance: %s", record.summary())
        response = await asyncio.to_thread(
            send_json, 'POST', self.url, record.to_payload(), self.timeout, self.session
        )
        logger.info("Gateway responded with status %s", response.status)
        return response

    async def list_records(self):
        """GET the stored collection; returns JsonResponse(status, body)"""
        return await asyncio.to_thread(
            send_json, 'GET', self.url, None, self.timeout, self.session
        )
