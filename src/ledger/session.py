"""
Session Binder

Bridges identity-service notifications to the Transaction Store.

STATE MACHINE:
    ANONYMOUS --sign-in(user)--> AUTHENTICATING --fetch done--> AUTHENTICATED
    AUTHENTICATED / AUTHENTICATING --sign-out--> ANONYMOUS

- On sign-in the user's whole collection is fetched and loaded into the
  store, newest first.
- On sign-out the store is cleared and the user id forgotten.
- A failed fetch is reported (last_error + log) and the binder still ends
  up AUTHENTICATED with an empty store. It is NOT retried; reload() is
  the user-initiated retry.
- A fetch that completes after the session changed underneath it is
  thrown away, so one user's data never lands in another's session.
"""

from enum import Enum
from typing import Callable, Optional

from src.events import EventLogger, EventType
from src.ledger.errors import OperationTimeoutError, bounded
from src.ledger.store import TransactionStore
from src.ledger.views import filter_and_sort
from src.models.transaction import SortKey, TransactionFilter
from src.services.auth import AuthUser
from src.services.storage import StorageError, TransactionStorageInterface


LOAD_FAILED_MESSAGE = "Failed to load transactions. Please try again."

SessionListener = Callable[[], None]


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class SessionBinder:
    """Owns the session state machine for one application instance."""

    def __init__(
        self,
        store: TransactionStore,
        storage: TransactionStorageInterface,
        timeout_seconds: float = 15.0,
        event_logger: Optional[EventLogger] = None,
    ):
        self._store = store
        self._storage = storage
        self._timeout_seconds = timeout_seconds
        self._events = event_logger or EventLogger()
        self._state = SessionState.ANONYMOUS
        self._user_id: Optional[str] = None
        self._listeners: list[SessionListener] = []
        # Bumped on every session change; a fetch only applies if it still matches
        self._generation = 0
        self.last_error: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED and self._user_id is not None

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        """Register a callback run after every load or clear."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    async def on_auth_state_changed(self, user: Optional[AuthUser]) -> None:
        """Identity-service callback: user on sign-in, None on sign-out."""
        if user is None:
            if self._state != SessionState.ANONYMOUS:
                self._end_session()
            return

        if user.uid == self._user_id:
            # Same user re-announced (e.g. token refresh)
            return

        if self._user_id is not None:
            self._end_session()

        self._user_id = user.uid
        self._state = SessionState.AUTHENTICATING
        self._store.clear()
        self._events.log_session_started(user.uid)
        await self._load(user.uid)

    async def reload(self) -> bool:
        """Fetch the collection again. Returns True on success."""
        if self._user_id is None:
            return False
        return await self._load(self._user_id)

    async def _load(self, user_id: str) -> bool:
        self._generation += 1
        generation = self._generation

        try:
            records = await bounded(
                self._storage.list_all(user_id),
                "list transactions",
                self._timeout_seconds,
            )
        except (StorageError, OperationTimeoutError) as e:
            if generation != self._generation:
                return False
            self.last_error = LOAD_FAILED_MESSAGE
            self._events.log_load_failed(user_id, str(e))
            self._state = SessionState.AUTHENTICATED
            self._notify()
            return False

        if generation != self._generation or user_id != self._user_id:
            self._events.log(EventType.STALE_LOAD_DISCARDED, user_id=user_id)
            return False

        self._store.replace_all(
            filter_and_sort(records, TransactionFilter.ALL, SortKey.NEWEST)
        )
        self.last_error = None
        self._state = SessionState.AUTHENTICATED
        self._events.log_transactions_loaded(user_id, len(self._store))
        self._notify()
        return True

    def _end_session(self) -> None:
        self._generation += 1
        cleared = len(self._store)
        previous_user = self._user_id
        self._store.clear()
        self._user_id = None
        self._state = SessionState.ANONYMOUS
        self.last_error = None
        self._events.log_session_ended(previous_user, cleared)
        self._notify()
