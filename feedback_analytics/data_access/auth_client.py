# feedback_analytics/data_access/auth_client.py
"""
Client for the external auth collaborator (Supabase GoTrue REST endpoints).
"""

from typing import Any, Dict, Optional
import logging

import httpx
from pydantic import BaseModel

from feedback_analytics.config.settings import Settings
from feedback_analytics.exceptions import AuthError, AuthErrorKind, ConfigurationError


logger = logging.getLogger(__name__)

# upstream message fragment -> classified kind, checked in order
ERROR_PATTERNS = (
    ("Invalid login credentials", AuthErrorKind.INVALID_CREDENTIALS),
    ("Email not confirmed", AuthErrorKind.EMAIL_NOT_CONFIRMED),
    ("User already registered", AuthErrorKind.ALREADY_REGISTERED),
    ("Password should be at least", AuthErrorKind.WEAK_PASSWORD),
    ("Invalid email", AuthErrorKind.INVALID_EMAIL),
    ("signup is disabled", AuthErrorKind.SIGNUP_DISABLED),
)


class AuthSession(BaseModel):
    """User and session payloads as returned by the collaborator."""
    user: Optional[Dict[str, Any]] = None
    session: Optional[Dict[str, Any]] = None

    @property
    def email_confirmed(self) -> bool:
        return bool(self.user and self.user.get("email_confirmed_at"))


def classify_auth_error(message: str) -> AuthErrorKind:
    """Map an upstream error message onto an AuthErrorKind."""
    lowered = (message or "").lower()
    for fragment, kind in ERROR_PATTERNS:
        if fragment.lower() in lowered:
            return kind
    return AuthErrorKind.UNKNOWN


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if not isinstance(body, dict):
        return str(body)
    for key in ("error_description", "msg", "message", "error"):
        if body.get(key):
            return str(body[key])
    return f"HTTP {response.status_code}"


class AuthClient:
    """Password sign-in and sign-up against the auth collaborator."""

    def __init__(self, config: Settings, http_client: Optional[httpx.Client] = None):
        self.config = config
        self._http = http_client

        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    def _client(self) -> httpx.Client:
        if not self.config.is_auth_configured:
            raise ConfigurationError("Auth collaborator URL and key are not configured")
        if self._http is None:
            self._http = httpx.Client(
                base_url=self.config.supabase_url.rstrip("/"),
                headers={
                    "apikey": self.config.supabase_anon_key,
                    "Authorization": f"Bearer {self.config.supabase_anon_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.config.auth_timeout_seconds,
            )
        return self._http

    def _post(self, path: str, payload: Dict[str, Any], params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        response = self._client().post(path, json=payload, params=params)
        if response.status_code >= 400:
            message = _error_message(response)
            kind = classify_auth_error(message)
            logger.warning(f"Auth request {path} rejected ({response.status_code}): {message}")
            raise AuthError(kind, message)
        return response.json()

    def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Sign in with email and password.

        Returns:
            AuthSession with the user and the token session

        Raises:
            AuthError: The collaborator rejected the credentials
            ConfigurationError: The collaborator is not configured
        """
        body = self._post(
            "/auth/v1/token", {"email": email, "password": password}, params={"grant_type": "password"}
        )
        user = body.get("user")
        session = {key: value for key, value in body.items() if key != "user"}
        logger.info(f"User signed in: {email}")
        return AuthSession(user=user, session=session or None)

    def sign_up(self, email: str, password: str) -> AuthSession:
        """
        Register a new account.

        The collaborator answers with a bare user object while email
        confirmation is pending and with a full session otherwise.
        """
        body = self._post("/auth/v1/signup", {"email": email, "password": password})
        if "access_token" in body:
            user = body.get("user")
            session = {key: value for key, value in body.items() if key != "user"}
        else:
            user = body
            session = None
        logger.info(f"User registered: {email}")
        return AuthSession(user=user, session=session)

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None
