"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines what happens
for each user action:
1. Session (sign up / sign in / sign out -> ledger load / clear)
2. Mutations (add / delete -> document store -> ledger)
3. View parameters (filter, sort, currency, theme)
4. Rendering (ledger snapshot -> dashboard / history view models)

DESIGN DECISION: All mutable application state lives in one AppState
owned by the controller. The view engine receives snapshots and
parameters explicitly; nothing reads ambient globals.

The controller enforces the boundaries:
- Protected actions require an AUTHENTICATED session binder
- Invalid input never reaches a collaborator
- The ledger changes only after the document store confirmed
- One request in flight per action; duplicates are refused
- Collaborator failures come back as ActionResult messages
"""

from datetime import date
from typing import Awaitable, Callable, Optional, TypeVar, Union

import structlog
from pydantic import BaseModel

from src.config import AppSettings, Settings, get_settings
from src.events import EventLogger, EventType, configure_logging, create_correlation_id
from src.formatting import currency_symbol, format_currency, format_signed, is_supported_currency
from src.ledger import (
    NotAuthenticatedError,
    OperationTimeoutError,
    PersistenceFailureError,
    SessionBinder,
    TransactionStore,
    bounded,
    build_summary_view,
    compute_balance,
    filter_and_sort,
    parse_filter,
    parse_sort_key,
)
from src.models.transaction import (
    ActionResult,
    LedgerItem,
    LedgerView,
    SortKey,
    Theme,
    Transaction,
    TransactionDraft,
    TransactionFilter,
)
from src.services.auth import (
    AuthError,
    AuthServiceInterface,
    AuthSession,
    AuthUser,
    LocalAccountRegistry,
    LocalAuthService,
)
from src.services.preferences import PreferencesStore
from src.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
    InMemoryTransactionStorage,
    StorageError,
    TransactionStorageInterface,
)
from src.validation import TransactionValidator


logger = structlog.get_logger(__name__)

T = TypeVar("T")

LOGIN_REQUIRED_MESSAGE = "Please login first to add transactions"
ADD_FAILED_MESSAGE = "Failed to add transaction. Please try again."
DELETE_FAILED_MESSAGE = "Failed to delete transaction. Please try again."
SIGN_OUT_FAILED_MESSAGE = "Failed to sign out. Please try again."
IN_PROGRESS_MESSAGE = "Please wait, the previous request is still in progress."
EMPTY_LIST_MESSAGE = "No transactions yet"


class ViewParameters(BaseModel):
    """User-chosen presentation parameters."""

    filter: TransactionFilter = TransactionFilter.ALL
    sort_key: SortKey = SortKey.NEWEST
    currency: str = "USD"
    theme: Theme = Theme.LIGHT


class AppState:
    """
    The single owner of mutable application state.

    Holds the ledger, the session state machine and the view parameters.
    """

    def __init__(self, store: TransactionStore, binder: SessionBinder, view: ViewParameters):
        self.store = store
        self.binder = binder
        self.view = view
        self.cached_session_token: Optional[str] = None
        self.cached_user_id: Optional[str] = None


class ExpenseTrackerController:
    """
    Turns user actions into awaited collaborator calls and ledger updates.

    Each public coroutine corresponds to one user action and is awaited
    to completion before the presentation re-renders.
    """

    def __init__(
        self,
        auth: AuthServiceInterface,
        storage: TransactionStorageInterface,
        preferences: PreferencesStore,
        settings: Optional[AppSettings] = None,
        validator: Optional[TransactionValidator] = None,
        event_logger: Optional[EventLogger] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self._auth = auth
        self._storage = storage
        self._preferences = preferences
        self._settings = settings or get_settings().app
        self._events = event_logger or EventLogger()
        self._today = today or date.today
        self._validator = validator or TransactionValidator(today=self._today)
        self._timeout = self._settings.request_timeout_seconds

        store = TransactionStore()
        binder = SessionBinder(
            store=store,
            storage=storage,
            timeout_seconds=self._timeout,
            event_logger=self._events,
        )
        self.state = AppState(
            store=store,
            binder=binder,
            view=ViewParameters(currency=self._settings.default_currency),
        )
        self._in_flight: set[str] = set()
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._ledger_owner: Optional[str] = None
        binder.add_listener(self._on_ledger_changed)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> None:
        """Load preferences and start following the identity service."""
        prefs = self._preferences.load()
        currency = prefs.currency
        if not is_supported_currency(currency):
            logger.warning("stored_currency_unsupported", currency=currency)
            currency = self._settings.default_currency
        self.state.view = self.state.view.model_copy(
            update={"currency": currency, "theme": prefs.theme}
        )
        self.state.cached_session_token = prefs.session_token
        self.state.cached_user_id = prefs.user_id

        if self._unsubscribe is None:
            self._unsubscribe = await self._auth.subscribe_auth_state(
                self.state.binder.on_auth_state_changed
            )

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # =========================================================================
    # STATE QUERIES
    # =========================================================================

    @property
    def is_authenticated(self) -> bool:
        return self.state.binder.is_authenticated

    @property
    def has_cached_session(self) -> bool:
        """First-paint hint only; never used to authorize anything."""
        return bool(self.state.cached_session_token and self.state.cached_user_id)

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._auth.current_user

    @property
    def last_error(self) -> Optional[str]:
        """Message from the most recent failed load, if any."""
        return self.state.binder.last_error

    @property
    def view_parameters(self) -> ViewParameters:
        return self.state.view

    def is_busy(self, action: str) -> bool:
        """True while a request for this action key is outstanding."""
        return action in self._in_flight

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _require_session(self, action: str) -> str:
        user_id = self.state.binder.user_id
        if not self.state.binder.is_authenticated or user_id is None:
            raise NotAuthenticatedError(action)
        return user_id

    async def _persist(self, action: str, awaitable: Awaitable[T]) -> T:
        try:
            return await bounded(awaitable, action, self._timeout)
        except (StorageError, OperationTimeoutError) as e:
            raise PersistenceFailureError(action, e) from e

    def _save_preferences(self, **fields) -> None:
        try:
            self._preferences.update(**fields)
        except OSError as e:
            logger.warning("preferences_write_failed", error=str(e), fields=sorted(fields))
            return
        changed = {
            k: getattr(v, "value", v) for k, v in fields.items() if k != "session_token"
        }
        self._events.log(EventType.PREFERENCES_CHANGED, **changed)

    def _on_ledger_changed(self) -> None:
        # A different user's ledger starts from the default list view
        user_id = self.state.binder.user_id
        if user_id == self._ledger_owner:
            return
        self._ledger_owner = user_id
        self.state.view = self.state.view.model_copy(
            update={"filter": TransactionFilter.ALL, "sort_key": SortKey.NEWEST}
        )

    def _remember_session(self, session: AuthSession) -> None:
        self.state.cached_session_token = session.token
        self.state.cached_user_id = session.user.uid
        self._save_preferences(session_token=session.token, user_id=session.user.uid)

    def _forget_session(self) -> None:
        self.state.cached_session_token = None
        self.state.cached_user_id = None
        self._save_preferences(session_token=None, user_id=None)

    # =========================================================================
    # SESSION ACTIONS
    # =========================================================================

    async def sign_up(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> ActionResult:
        """Create an account; the identity service signs it in."""
        if not (email or "").strip() or not password:
            return ActionResult.failed("Please enter your email and password")
        if "auth" in self._in_flight:
            return ActionResult.failed(IN_PROGRESS_MESSAGE)

        self._in_flight.add("auth")
        try:
            session = await self._auth.sign_up(email, password, display_name=display_name)
        except AuthError as e:
            self._events.log(EventType.SIGN_UP_FAILED, level="warning", code=e.code)
            return ActionResult.failed(str(e))
        finally:
            self._in_flight.discard("auth")

        self._remember_session(session)
        return ActionResult.ok("Account created")

    async def sign_in(self, email: str, password: str) -> ActionResult:
        """Sign in; the session binder loads the ledger from the notification."""
        if not (email or "").strip() or not password:
            return ActionResult.failed("Please enter your email and password")
        if "auth" in self._in_flight:
            return ActionResult.failed(IN_PROGRESS_MESSAGE)

        self._in_flight.add("auth")
        try:
            session = await self._auth.sign_in(email, password)
        except AuthError as e:
            self._events.log(EventType.SIGN_IN_FAILED, level="warning", code=e.code)
            return ActionResult.failed(str(e))
        finally:
            self._in_flight.discard("auth")

        self._remember_session(session)
        if self.last_error:
            # Signed in, but the ledger could not be fetched
            return ActionResult(success=True, message=self.last_error)
        return ActionResult.ok()

    async def sign_out(self) -> ActionResult:
        """Sign out; the session binder clears the ledger from the notification."""
        try:
            await self._auth.sign_out()
        except AuthError as e:
            logger.error("sign_out_failed", error=str(e))
            return ActionResult.failed(SIGN_OUT_FAILED_MESSAGE)

        self._forget_session()
        return ActionResult.ok(redirect_to_login=True)

    async def reload(self) -> ActionResult:
        """User-initiated retry of the ledger fetch."""
        if not self.state.binder.user_id:
            return ActionResult.failed(LOGIN_REQUIRED_MESSAGE, redirect_to_login=True)
        if "load" in self._in_flight:
            return ActionResult.failed(IN_PROGRESS_MESSAGE)

        self._in_flight.add("load")
        try:
            loaded = await self.state.binder.reload()
        finally:
            self._in_flight.discard("load")

        if not loaded:
            return ActionResult.failed(self.last_error or "Failed to load transactions. Please try again.")
        return ActionResult.ok()

    # =========================================================================
    # LEDGER MUTATIONS
    # =========================================================================

    async def add_transaction(self, draft: TransactionDraft) -> ActionResult:
        """
        Validate, persist, then mirror into the ledger.

        The ledger is only touched after the document store returned an id.
        """
        correlation_id = create_correlation_id()

        try:
            user_id = self._require_session("add transactions")
        except NotAuthenticatedError:
            self._events.log_not_authenticated("add")
            return ActionResult.failed(LOGIN_REQUIRED_MESSAGE, redirect_to_login=True)

        validation = self._validator.validate(draft)
        if not validation.is_valid:
            self._events.log_validation_failed(
                sorted(validation.field_errors),
                correlation_id=correlation_id,
            )
            return ActionResult.failed(
                self._validator.get_user_friendly_summary(validation),
                field_errors=validation.field_errors,
            )

        if "add" in self._in_flight:
            self._events.log(EventType.DUPLICATE_SUBMISSION, action="add", correlation_id=correlation_id)
            return ActionResult.failed(IN_PROGRESS_MESSAGE)

        new_transaction = validation.transaction
        self._in_flight.add("add")
        try:
            transaction_id = await self._persist(
                "create transaction",
                self._storage.create(user_id, new_transaction),
            )
        except PersistenceFailureError as e:
            self._events.log_persistence_failed("add", str(e.cause), correlation_id=correlation_id)
            return ActionResult.failed(ADD_FAILED_MESSAGE)
        finally:
            self._in_flight.discard("add")

        if self.state.binder.user_id != user_id:
            self._events.log(EventType.STALE_LOAD_DISCARDED, action="add", correlation_id=correlation_id)
        elif transaction_id not in self.state.store:
            # A reload during the create may already have brought the record in
            self.state.store.add(new_transaction.with_id(transaction_id))

        self._events.log_transaction_added(
            transaction_id=transaction_id,
            transaction_type=new_transaction.type.value,
            amount=str(new_transaction.amount),
            correlation_id=correlation_id,
        )
        return ActionResult.ok("Transaction added", transaction_id=transaction_id)

    async def delete_transaction(self, transaction_id: str) -> ActionResult:
        """
        Delete from the document store, then from the ledger.

        A store reply of "no such record" means it is already gone, so the
        ledger drops it too.
        """
        correlation_id = create_correlation_id()

        try:
            user_id = self._require_session("delete transactions")
        except NotAuthenticatedError:
            self._events.log_not_authenticated("delete")
            return ActionResult.failed(LOGIN_REQUIRED_MESSAGE, redirect_to_login=True)

        key = f"delete:{transaction_id}"
        if key in self._in_flight:
            self._events.log(EventType.DUPLICATE_SUBMISSION, action=key, correlation_id=correlation_id)
            return ActionResult.failed(IN_PROGRESS_MESSAGE)

        self._in_flight.add(key)
        try:
            deleted = await self._persist(
                "delete transaction",
                self._storage.delete_by_id(user_id, transaction_id),
            )
        except PersistenceFailureError as e:
            self._events.log_persistence_failed("delete", str(e.cause), correlation_id=correlation_id)
            return ActionResult.failed(DELETE_FAILED_MESSAGE)
        finally:
            self._in_flight.discard(key)

        if not deleted:
            logger.warning("delete_target_missing", transaction_id=transaction_id)
        if self.state.binder.user_id == user_id:
            self.state.store.remove(transaction_id)

        self._events.log_transaction_deleted(transaction_id, correlation_id=correlation_id)
        return ActionResult.ok("Transaction deleted")

    # =========================================================================
    # VIEW PARAMETERS
    # =========================================================================

    def set_filter(self, value: Union[TransactionFilter, str]) -> TransactionFilter:
        selected = parse_filter(value)
        self.state.view = self.state.view.model_copy(update={"filter": selected})
        return selected

    def set_sort(self, value: Union[SortKey, str]) -> SortKey:
        key = parse_sort_key(value)
        self.state.view = self.state.view.model_copy(update={"sort_key": key})
        return key

    def set_currency(self, code: str) -> ActionResult:
        """Switch display currency and remember it."""
        if not is_supported_currency(code):
            return ActionResult.failed(f"Unsupported currency: {code}")
        normalized = code.strip().upper()
        self.state.view = self.state.view.model_copy(update={"currency": normalized})
        self._save_preferences(currency=normalized)
        return ActionResult.ok()

    def set_theme(self, theme: Union[Theme, str]) -> Theme:
        selected = Theme(theme)
        self.state.view = self.state.view.model_copy(update={"theme": selected})
        self._save_preferences(theme=selected)
        return selected

    def toggle_theme(self) -> Theme:
        current = self.state.view.theme
        return self.set_theme(Theme.LIGHT if current == Theme.DARK else Theme.DARK)

    # =========================================================================
    # RENDERING
    # =========================================================================

    def _render_items(self, records: list[Transaction]) -> list[LedgerItem]:
        currency = self.state.view.currency
        return [
            LedgerItem(
                id=record.id,
                description=record.description,
                date=record.date,
                type=record.type,
                display_amount=format_signed(record.amount, record.type, currency),
            )
            for record in records
        ]

    def _build_view(self, records: list[Transaction]) -> LedgerView:
        view = self.state.view
        balance = compute_balance(self.state.store.all())
        today = self._today()
        items = self._render_items(records)
        return LedgerView(
            currency=view.currency,
            currency_symbol=currency_symbol(view.currency),
            today=f"{today.month}/{today.day}/{today.year}",
            balance=balance,
            balance_display=format_currency(balance.net, view.currency),
            income_display=format_currency(balance.income, view.currency),
            expense_display=format_currency(-balance.expense, view.currency),
            items=items,
            empty_message=None if items else EMPTY_LIST_MESSAGE,
            filter=view.filter,
            sort_key=view.sort_key,
        )

    def dashboard_view(self) -> LedgerView:
        """Balance cards plus the most recent few transactions."""
        recent = build_summary_view(self.state.store.all(), self._settings.summary_view_limit)
        return self._build_view(recent)

    def history_view(self) -> LedgerView:
        """Balance cards plus the full list under the current filter and sort."""
        view = self.state.view
        records = filter_and_sort(self.state.store.all(), view.filter, view.sort_key)
        return self._build_view(records)


class SharedServices:
    """
    Process-wide collaborators, safe to share between browser sessions.

    Holds nothing tied to a signed-in user: per-session state lives in
    each ExpenseTrackerController.
    """

    def __init__(
        self,
        settings: AppSettings,
        storage: TransactionStorageInterface,
        accounts: LocalAccountRegistry,
    ):
        self.settings = settings
        self.storage = storage
        self.accounts = accounts


def create_shared_services(settings: Optional[Settings] = None) -> SharedServices:
    """
    Build the collaborators every session shares.

    Args:
        settings: Root settings; defaults to the cached environment settings.
                  With storage_backend=google_sheets but no Sheets
                  configuration, falls back to in-memory storage.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level)

    storage: TransactionStorageInterface
    if app_settings.storage_backend == "memory":
        storage = InMemoryTransactionStorage()
    else:
        try:
            sheets_client = GoogleSheetsClient(settings.google_sheets)
            storage = GoogleSheetsTransactionStorage(sheets_client)
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e), fallback="memory")
            storage = InMemoryTransactionStorage()

    return SharedServices(
        settings=app_settings,
        storage=storage,
        accounts=LocalAccountRegistry(),
    )


def create_app_components(
    settings: Optional[Settings] = None,
    shared: Optional[SharedServices] = None,
) -> ExpenseTrackerController:
    """
    Factory function to create one session's controller.

    Args:
        settings: Used only when `shared` is not given
        shared: Collaborators shared with other sessions

    Returns:
        A controller ready for start(), with its own identity session
        and ledger
    """
    shared = shared or create_shared_services(settings)

    preferences = PreferencesStore(
        shared.settings.preferences_path,
        default_currency=shared.settings.default_currency,
    )

    return ExpenseTrackerController(
        auth=LocalAuthService(shared.accounts),
        storage=shared.storage,
        preferences=preferences,
        settings=shared.settings,
    )
