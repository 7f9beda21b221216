"""
Remote Storage Relay
====================

Forwards attendance JSON from the gateway to the remote storage API and
reads the stored collection back. Bodies are passed through unmodified.
Failures surface as RemoteError / NetworkError / LocalError.
"""

from utils.http_client import send_json


class StorageRelay:
    def __init__(self, api_url, timeout=30, session=None):
        self.api_url = api_url
        self.timeout = timeout
        self.session = session

    def submit(self, payload):
        """POST the payload as-is; returns the remote JSON body"""
        response = send_json('POST', self.api_url, payload, timeout=self.timeout, session=self.session)
        return response.body

    def list_records(self):
        """GET the stored collection; returns the remote JSON body verbatim"""
        response = send_json('GET', self.api_url, timeout=self.timeout, session=self.session)
        return response.body
