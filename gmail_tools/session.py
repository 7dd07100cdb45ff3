"""
Authenticated Gmail session.

A session starts UNAUTHENTICATED and becomes AUTHENTICATED after the stored
token has been loaded and a Gmail client built from it. The dispatcher asks
for the client on every call; authentication happens at most once per process
unless the session is reset.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from googleapiclient.discovery import build

import auth
from config import ServerConfig
from services.gmail import GmailService

from .audit import AuditLogger
from .errors import AuthenticationError, AuthenticationRequiredError

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


def build_gmail_resource(credentials):
    return build("gmail", "v1", credentials=credentials, cache_discovery=False)


class GmailSession:
    """Holds the Gmail client for the lifetime of the process."""

    def __init__(
        self,
        config: ServerConfig,
        audit: AuditLogger,
        load_credentials: Callable = auth.load_credentials,
        build_resource: Callable = build_gmail_resource,
    ):
        self.config = config
        self.audit = audit
        self._load_credentials = load_credentials
        self._build_resource = build_resource
        self._gmail: Optional[GmailService] = None

    @property
    def state(self) -> SessionState:
        if self._gmail is None:
            return SessionState.UNAUTHENTICATED
        return SessionState.AUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    def authenticate(self) -> GmailService:
        """
        Load the stored token and build the Gmail client.

        Raises:
            AuthenticationRequiredError: no usable token
            AuthenticationError: credentials file missing or client build failed
        """
        try:
            credentials = self._load_credentials(
                self.config.credentials_path, self.config.token_path
            )
        except AuthenticationRequiredError as exc:
            self.audit.warn("Token validation failed, re-authentication required")
            logger.warning("%s", exc)
            raise
        except AuthenticationError as exc:
            self.audit.error(f"Authentication failed: {exc}")
            raise

        try:
            resource = self._build_resource(credentials)
        except Exception as exc:
            self.audit.error(f"Authentication failed: {exc}")
            raise AuthenticationError(
                f"Gmail authentication failed. Could not build Gmail client: {exc}"
            ) from exc

        self._gmail = GmailService(resource, audit=self.audit)
        self.audit.info("Authentication successful")
        logger.info("Gmail session authenticated")
        return self._gmail

    def ensure_authenticated(self) -> GmailService:
        """Return the Gmail client, authenticating first if needed."""
        if self._gmail is None:
            return self.authenticate()
        return self._gmail

    def reset(self) -> None:
        """Drop the client so the next call re-reads the token."""
        self._gmail = None
