# services/transport.py
"""
HTTP transport for the certificate REST API.

Any connection problem, timeout, non-2xx status or non-JSON body is raised as
TransportError so the fallback layer has one thing to catch.
"""
import logging
from typing import Any, Optional

import requests

from certchain.errors import TransportError

logger = logging.getLogger(__name__)


class HttpTransport:
    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def request(self, method: str, endpoint: str, json: Any = None) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.request(
                method,
                url,
                json=json,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Could not reach {url}: {e}") from e

        if not response.ok:
            raise TransportError(
                f"API Error: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {url}: {e}", status_code=response.status_code) from e

    def get(self, endpoint: str) -> Any:
        return self.request("GET", endpoint)

    def post(self, endpoint: str, json: Any) -> Any:
        return self.request("POST", endpoint, json=json)
