"""
Authenticated REST transport for the admin console.

Wraps a ``requests.Session`` and turns the backend's
``{success, data, message}`` envelope into either a plain dict or one of the
errors in ``core.errors``.
"""
import logging
from typing import Optional

import requests

from core.config import API_BASE_URL, REQUEST_TIMEOUT
from core.errors import AuthRequired, NetworkError, ServerError
from core.session import AdminSession

logger = logging.getLogger(__name__)

TOO_LARGE_MESSAGE = "Image file is too large. Please use a smaller image (max 5MB)."


class ApiClient:
    """Small wrapper around requests that knows the backend's conventions."""

    def __init__(
        self,
        session: AdminSession,
        base_url: str = API_BASE_URL,
        http: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.timeout = timeout

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    # ===================== REQUESTS =====================

    def request(self, method: str, path: str, *, json=None, files=None, auth: bool = True) -> dict:
        """
        Send a request and return the parsed envelope.

        Raises AuthRequired when there is no token or the server answers 401,
        NetworkError when the request cannot complete, and ServerError for
        any other failure (including ``success: false``).
        """
        headers = {"Accept": "application/json"}
        if auth:
            headers.update(self.session.auth_header())

        url = self.url(path)
        logger.debug("%s %s", method, url)
        try:
            response = self.http.request(
                method,
                url,
                headers=headers,
                json=json,
                files=files,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise NetworkError() from e

        return self._handle_response(method, url, response, auth)

    def get(self, path: str, **kwargs) -> dict:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> dict:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> dict:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs) -> dict:
        return self.request("DELETE", path, **kwargs)

    # ===================== RESPONSES =====================

    def _handle_response(self, method, url, response, auth) -> dict:
        status = response.status_code
        body = _parse_body(response)

        if status == 401:
            if auth:
                self.session.expire()
            message = body.get("message") if body else None
            logger.info("%s %s -> 401, session expired", method, url)
            raise AuthRequired(message or "Session expired. Please login again.")

        if status == 413:
            raise ServerError(TOO_LARGE_MESSAGE, status=413)

        if not 200 <= status < 300:
            message = body.get("message") if body else None
            logger.warning("%s %s -> %s %s", method, url, status, message or "")
            raise ServerError(message or f"Error {status}", status=status)

        if body is None:
            if status == 204 or not response.content:
                body = {"success": True}
            else:
                raise ServerError("Invalid response from server", status=status)

        if body.get("success") is False:
            raise ServerError(body.get("message") or "Request failed", status=status)

        if auth:
            self.session.refresh()
        return body


def _parse_body(response) -> Optional[dict]:
    """Return the JSON object in the response, or None if there isn't one."""
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else {"success": True, "data": body}
