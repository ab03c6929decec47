# core/session.py
from datetime import datetime, timezone
import threading

from core.config import SESSION_TIMEOUT
from core.errors import AuthRequired


class AdminSession:
    """
    Auth capability handed to the API client at construction.

    Holds the bearer token and the signed-in admin. Nothing here is global:
    each console window (and each test) builds its own session.
    """

    def __init__(self, token: str = None, admin: dict = None, timeout: int = SESSION_TIMEOUT):
        self._lock = threading.Lock()
        self.token = token
        self.admin = admin or {}
        self.timeout = timeout
        self.expired = False
        self.last_activity = datetime.now(timezone.utc) if token else None

    @property
    def email(self):
        return self.admin.get("email")

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and not self.expired

    def start(self, token: str, admin: dict):
        """Start a new session for the admin"""
        with self._lock:
            self.token = token
            self.admin = dict(admin or {})
            self.expired = False
            self.last_activity = datetime.now(timezone.utc)

    def end(self):
        """End the session (logout)"""
        with self._lock:
            self.token = None
            self.admin = {}
            self.expired = False
            self.last_activity = None

    def expire(self):
        """Mark the token as rejected by the backend (HTTP 401)."""
        with self._lock:
            self.expired = True

    def refresh(self) -> bool:
        """Refresh the last activity timestamp"""
        with self._lock:
            if not self.token or self.expired:
                return False
            self.last_activity = datetime.now(timezone.utc)
            return True

    def is_active(self, return_remaining: bool = False):
        """
        Check if the session is still active.

        Args:
            return_remaining: If True, returns (active, remaining_seconds)
        """
        with self._lock:
            if not self.token or self.expired or self.last_activity is None:
                return (False, 0) if return_remaining else False
            elapsed = (datetime.now(timezone.utc) - self.last_activity).total_seconds()
            remaining = self.timeout - elapsed
            active = remaining > 0
            if return_remaining:
                return (active, max(0, remaining))
            return active

    def auth_header(self) -> dict:
        """Return the Authorization header, or raise AuthRequired."""
        if not self.token:
            raise AuthRequired()
        if self.expired:
            raise AuthRequired("Session expired. Please login again.")
        return {"Authorization": f"Bearer {self.token}"}
