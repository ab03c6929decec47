# core/auth_service.py
import logging
import re

from core.api_client import ApiClient
from core.errors import ServerError, ValidationError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def is_valid_email(email_str: str) -> bool:
    """Check if email format is valid"""
    return re.match(EMAIL_PATTERN, email_str or "") is not None


def login_admin(api: ApiClient, email: str, password: str) -> dict:
    """
    Log in through /api/admin/login and start the injected session.
    Returns the admin dict (id, name, email, role).
    """
    email = (email or "").strip()
    if not email or not password:
        raise ValidationError("Please enter both email and password")
    if not is_valid_email(email):
        raise ValidationError("Please enter a valid email address")

    body = api.post("/api/admin/login", json={"email": email, "password": password}, auth=False)

    token = body.get("token")
    user = body.get("user") or {}
    if not token:
        raise ServerError(body.get("message") or "Login failed. Please check your credentials.")

    admin = {
        "id": user.get("id"),
        "name": user.get("name"),
        "email": user.get("email", email),
        "role": user.get("role"),
    }
    api.session.start(token, admin)
    logger.info("Admin %s logged in", admin["email"])
    return admin


def logout_admin(api: ApiClient):
    """Drop the token; the backend keeps no server-side session."""
    email = api.session.email
    api.session.end()
    logger.info("Admin %s logged out", email)
