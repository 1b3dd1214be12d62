"""Persistent login session storage."""

import logging
import time
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from hla.cache.base import DiskStore
from hla.models.auth import AuthSession

logger = logging.getLogger(__name__)

SESSION_KEY = "session"


class SessionStore:
    """Keeps the current login session until its token expires."""

    def __init__(self, directory: Path) -> None:
        self.store = DiskStore(directory)

    def __enter__(self) -> "SessionStore":
        return self

    def __exit__(self, *args: object) -> None:
        self.store.close()

    def save(self, session: AuthSession) -> None:
        """Store the session; DiskCache drops it once the token expires."""
        ttl = max(1.0, session.expires_at - time.time())
        self.store.save(SESSION_KEY, session.model_dump(), expire=ttl)
        logger.info(f"Saved session for {session.email}")

    def load(self) -> AuthSession | None:
        """Return the stored session, or None when absent or expired."""
        data = self.store.load(SESSION_KEY)
        if not data:
            return None
        try:
            session = AuthSession.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"Discarding unreadable stored session: {e.error_count()} invalid field(s)")
            self.store.delete(SESSION_KEY)
            return None
        if session.is_expired():
            logger.info("Stored session has expired")
            self.store.delete(SESSION_KEY)
            return None
        return session

    def clear(self) -> bool:
        """Forget the stored session.

        Returns:
            True if a session was stored
        """
        return self.store.delete(SESSION_KEY)
