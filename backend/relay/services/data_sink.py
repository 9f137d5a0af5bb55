"""
Arduino Relay - Data Sink Adapter
==================================

What:  Appends one JSON record under a fixed parent path in Firebase Realtime
       Database and reports the generated key as an explicit result.
Why:   Keeps firebase_admin behind a small interface so routes can be tested
       with an in-memory sink and the Firebase adapter can be tested with a
       patched SDK.
How:   FirebaseDataSink owns a named firebase_admin App. append() runs the
       blocking REST call on Starlette's threadpool and converts any failure
       into a WriteFailed result instead of raising.
Who:   Created by the lifespan in main.py; reached by routes via get_data_sink.
When:  connect() once at startup, append() once per accepted request.

Write semantics:
    Reference.push(value) issues a single POST to <parent>.json. The server
    generates the push key and stores the value in one operation, so a failed
    call leaves nothing behind under any key.

    No retry, no timeout, no idempotency: a resubmitted payload gets a new key.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, db
from starlette.concurrency import run_in_threadpool

from relay.config import Settings
from relay.exceptions import ConfigurationError, SinkWriteError

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Write Results
# ══════════════════════════════════════════════════════════════════════════

class WriteResult:
    """Outcome of a single append. Exactly one of the subclasses below."""

    ok: bool = False


class WriteSucceeded(WriteResult):
    """The record was stored under `key`."""

    ok = True

    def __init__(self, key: str):
        self.key = key

    def __repr__(self) -> str:
        return f"WriteSucceeded(key={self.key!r})"


class WriteFailed(WriteResult):
    """The write did not happen. `error` holds the detail for the logs."""

    ok = False

    def __init__(self, error: SinkWriteError):
        self.error = error

    def __repr__(self) -> str:
        return f"WriteFailed(error={self.error.message!r})"


# ══════════════════════════════════════════════════════════════════════════
# Sink Interface
# ══════════════════════════════════════════════════════════════════════════

class DataSink(ABC):
    """
    Abstract append-only keyed store.

    Contract:
        - append() never raises for store-side failures; it returns WriteFailed
        - Each successful append produces a fresh key
        - Implementations are safe to share across concurrent requests
    """

    @abstractmethod
    async def append(self, record: Any) -> WriteResult:
        """
        Store `record` under a newly generated child key.

        Args:
            record: Any JSON-serializable value, stored verbatim.

        Returns:
            WriteSucceeded with the generated key, or WriteFailed.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True if the store is reachable and credentials work."""
        ...

    async def close(self) -> None:
        """Release any client resources. Default: nothing to release."""
        return None


class UnavailableDataSink(DataSink):
    """
    Stand-in used when no sink was installed on the app.

    Every append fails, so the ingest route answers with its usual fixed
    500 body instead of a generic server error.
    """

    async def append(self, record: Any) -> WriteResult:
        return WriteFailed(
            SinkWriteError(
                message="Data sink has not been initialized",
                context={"error_type": "ConfigurationError"},
            )
        )

    async def health_check(self) -> bool:
        return False


# ══════════════════════════════════════════════════════════════════════════
# Firebase Implementation
# ══════════════════════════════════════════════════════════════════════════

class FirebaseDataSink(DataSink):
    """
    DataSink backed by the Firebase Realtime Database REST API.

    One firebase_admin App (credential + HTTP session) is shared by all
    requests. No locking is needed: every push targets a distinct key.
    """

    def __init__(
        self,
        database_url: str,
        credentials_path: str,
        parent_path: str,
        app_name: str = "arduino-relay",
    ):
        self.database_url = database_url
        self.credentials_path = credentials_path
        self.parent_path = parent_path
        self.app_name = app_name
        self._app: Optional[firebase_admin.App] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirebaseDataSink":
        return cls(
            database_url=settings.firebase_database_url,
            credentials_path=settings.firebase_credentials_path,
            parent_path=settings.firebase_data_path,
            app_name=settings.firebase_app_name,
        )

    @property
    def connected(self) -> bool:
        return self._app is not None

    def connect(self) -> None:
        """
        Load the service account key and register the firebase_admin App.

        Raises:
            ConfigurationError: credential file missing or invalid, or the
                SDK rejected the options.
        """
        if self._app is not None:
            return

        try:
            cred = credentials.Certificate(self.credentials_path)
            self._app = firebase_admin.initialize_app(
                cred,
                {"databaseURL": self.database_url},
                name=self.app_name,
            )
        except (ValueError, OSError) as e:
            raise ConfigurationError(
                message=f"Could not initialize Firebase: {e}",
                context={
                    "credentials_path": self.credentials_path,
                    "database_url": self.database_url,
                    "error_type": type(e).__name__,
                },
            ) from e

        logger.info(
            "Firebase app '%s' initialized for %s (path=/%s)",
            self.app_name,
            self.database_url,
            self.parent_path,
        )

    async def append(self, record: Any) -> WriteResult:
        if self._app is None:
            return WriteFailed(
                SinkWriteError(
                    message="Firebase app is not initialized",
                    context={"path": self.parent_path},
                )
            )

        try:
            ref = db.reference(self.parent_path, app=self._app)
            # push() blocks on an HTTP round trip; keep it off the event loop
            new_ref = await run_in_threadpool(ref.push, record)
        except Exception as e:
            return WriteFailed(
                SinkWriteError(
                    message=str(e) or type(e).__name__,
                    context={
                        "path": self.parent_path,
                        "error_type": type(e).__name__,
                    },
                )
            )

        logger.debug("Stored record at /%s/%s", self.parent_path, new_ref.key)
        return WriteSucceeded(new_ref.key)

    async def health_check(self) -> bool:
        """
        Read at most one key under the parent path.

        Why limit_to_first(1): Proves auth and connectivity without
        downloading the whole record history.
        """
        if self._app is None:
            return False
        try:
            query = db.reference(self.parent_path, app=self._app).order_by_key().limit_to_first(1)
            await run_in_threadpool(query.get)
            return True
        except Exception as e:
            logger.warning("Firebase health check failed: %s", str(e))
            return False

    async def close(self) -> None:
        if self._app is None:
            return
        firebase_admin.delete_app(self._app)
        self._app = None
        logger.info("Firebase app '%s' deleted", self.app_name)
