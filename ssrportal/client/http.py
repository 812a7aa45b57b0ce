# ssrportal/client/http.py
"""
Thin requests-based client for the portal's HTTP contracts.

Used by the form flows in this package and by scripts; every non-2xx
response becomes a PortalRequestError carrying the server's message.
"""
import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class PortalRequestError(Exception):

    def __init__(self, status_code, message, details=None):
        self.status_code = status_code
        self.message = message
        self.details = details or []
        super().__init__(f"{status_code}: {message}")


def _error_from(response):
    content_type = response.headers.get("Content-Type", "")
    if "application/json" in content_type:
        try:
            body = response.json()
        except ValueError:
            body = {}
        return PortalRequestError(response.status_code,
                                  body.get("error") or response.reason or "Request failed",
                                  body.get("details"))
    # upload endpoint answers errors in plain text
    return PortalRequestError(response.status_code, response.text.strip() or response.reason or "Request failed")


class PortalClient:

    def __init__(self, base_url, token=None, session=None, timeout=DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self):
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        response = self.session.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        if not 200 <= response.status_code < 300:
            err = _error_from(response)
            logger.debug(f"{method} {path} failed: {err}")
            raise err
        return response

    def login(self, email, password):
        data = self._request("POST", "/api/auth/login", json={"email": email, "password": password}).json()
        self.token = data["token"]
        return data

    def get_json(self, path, params=None):
        return self._request("GET", path, params=params).json()

    def post_json(self, path, payload):
        return self._request("POST", path, json=payload).json()

    def put_json(self, path, payload):
        return self._request("PUT", path, json=payload).json()

    def upload(self, local_file):
        """POST one file to /api/upload; returns ``{url, filename, type, size}``."""
        with local_file.open() as fh:
            files = {"file": (local_file.filename, fh, local_file.content_type)}
            return self._request("POST", "/api/upload", files=files).json()
