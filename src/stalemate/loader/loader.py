"""The loader: one value, a local cache and a remote source, one state stream.

Sequence on initialize():

    Initial ─► Loading(local) ─► Loaded(local)  ─┐
                              ├► (no local data) ─┼► Loading(remote) ─► Loaded(remote)
                              └► Error(local)  ───┘                  └► Error(remote)

The remote leg runs when ``update_on_init`` is set or nothing came from the
local cache. A successful remote value is emitted first and persisted after;
persistence failures are warnings and never change the state.

Errors never escape initialize(), refresh() or reset(). They become Error
states (reads) or warnings (writes), tagged with an ErrorKind.

Concurrency:
    - refresh() calls made while one is running join it (same RefreshResult)
    - reset() and dispose() bump a generation counter; anything still in
      flight from an older generation is discarded when it completes
    - stores to the local cache run one at a time; a value stored while a
      reset() was running is removed again afterwards

Example:
    >>> loader = await StaleMateLoader.create(UserHandler())
    >>> async for state in loader.stream():
    ...     match state:
    ...         case Loaded(users, source):
    ...             render(users, stale=source is DataSource.LOCAL)
    ...         case Error(users, error):
    ...             render(users, banner=error.message)
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from stalemate.foundation.clock import Clock, default_clock
from stalemate.foundation.config import get_settings
from stalemate.foundation.errors import ErrorKind, LoaderError, NoLocalDataError, classify_exception
from stalemate.foundation.types import DataSource
from stalemate.refresh import RefreshConfig, RefreshResult, StalePeriodRefreshConfig, StaleMateRefresher
from stalemate.registry import StaleMateRegistry, get_registry
from stalemate.runtime.observability import BoundLogger, StaleMateLogLevel, get_logger

from .handler import StaleMateHandler
from .state import Error, Initial, Loaded, LoaderState, Loading
from .subject import StateSubject, StateSubscription

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Self

T = TypeVar("T")

WarningListener = Callable[[LoaderError], object]


class StaleMateLoader(Generic[T]):
    """Stale-while-revalidate loader for a single value.

    Args:
        handler: Data access for the value; owned by this loader
        update_on_init: Fetch remote data during initialize() even when the
            local cache had a value (default from settings, normally True)
        refresh_config: Automatic refresh schedule (default from settings,
            normally none)
        clock: Time source for refresh timing
        log_level: Log level for this loader (default from the registry,
            then settings)
        registry: Registry to join (default: the global registry)
        name: Name used in log context (default: class name)
    """

    def __init__(
        self,
        handler: StaleMateHandler[T],
        *,
        update_on_init: bool | None = None,
        refresh_config: RefreshConfig | None = None,
        clock: Clock | None = None,
        log_level: StaleMateLogLevel | str | None = None,
        registry: StaleMateRegistry | None = None,
        name: str | None = None,
    ) -> None:
        settings = get_settings()
        self._handler = handler
        self._clock = clock or default_clock()
        self._registry = registry if registry is not None else get_registry()
        self.name = name or type(self).__name__
        self.update_on_init = settings.update_on_init if update_on_init is None else update_on_init

        if refresh_config is None and settings.refresh.stale_period is not None:
            refresh_config = StalePeriodRefreshConfig(settings.refresh.stale_period, clock=self._clock)

        level = log_level if log_level is not None else self._registry.default_log_level
        self._log: BoundLogger = get_logger(
            "stalemate.loader", level=level, loader=self.name, handler=type(handler).__name__,
        )

        self._supports_local = handler.supports_local
        self._supports_remote = handler.supports_remote
        self._subject: StateSubject[LoaderState[T]] = StateSubject(Initial(handler.empty_value))
        self._refresher: StaleMateRefresher[RefreshResult[T]] = StaleMateRefresher(
            self._load_remote, refresh_config, clock=self._clock,
        )
        self._warning_listeners: list[WarningListener] = []
        self._generation = 0
        self._resets = 0
        self._store_lock = asyncio.Lock()
        self._initialized = False
        self._disposed = False

        self._registry.register(self)  # type: ignore[arg-type]

    @classmethod
    async def create(cls, handler: StaleMateHandler[T], **kwargs: object) -> Self:
        """Construct and initialize in one step."""
        loader = cls(handler, **kwargs)  # type: ignore[arg-type]
        await loader.initialize()
        return loader

    # ─────────────────────────────────────────────────────────────────
    # State access
    # ─────────────────────────────────────────────────────────────────

    @property
    def handler(self) -> StaleMateHandler[T]:
        return self._handler

    @property
    def state(self) -> LoaderState[T]:
        return self._subject.value

    @property
    def value(self) -> T:
        """Last known good value (the empty value before any load)."""
        return self._subject.value.value

    @property
    def empty_value(self) -> T:
        return self._handler.empty_value

    @property
    def is_empty(self) -> bool:
        return self.value == self._handler.empty_value

    @property
    def is_refreshing(self) -> bool:
        return self._refresher.is_refreshing

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def supports_local(self) -> bool:
        return self._supports_local

    @property
    def supports_remote(self) -> bool:
        return self._supports_remote

    @property
    def refresher(self) -> StaleMateRefresher[RefreshResult[T]]:
        return self._refresher

    @property
    def log_level(self) -> StaleMateLogLevel:
        return self._log.level

    def stream(self) -> StateSubscription[LoaderState[T]]:
        """Async iterator of states. Starts with the current state."""
        return self._subject.stream()

    def listen(self, listener: Callable[[LoaderState[T]], object]) -> Callable[[], None]:
        """Call listener with the current state and every later one. Returns unsubscribe."""
        return self._subject.listen(listener)

    def add_warning_listener(self, listener: WarningListener) -> Callable[[], None]:
        """Receive persistence failures and other non-fatal problems."""
        self._warning_listeners.append(listener)

        def remove() -> None:
            if listener in self._warning_listeners:
                self._warning_listeners.remove(listener)

        return remove

    def set_log_level(self, level: StaleMateLogLevel | str) -> None:
        self._log = self._log.with_level(level)

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    async def initialize(self) -> RefreshResult[T] | None:
        """Load local data, then remote data if needed, then start auto refresh.

        Returns:
            Result of the initial refresh, or None if none was needed
        """
        if self._initialized:
            raise RuntimeError(f"{self.name} is already initialized")
        self._initialized = True

        loaded_local = await self._load_local()
        result: RefreshResult[T] | None = None
        if self.update_on_init or not loaded_local:
            if loaded_local:
                self._log.info("local data loaded, updating from remote")
            else:
                self._log.info("no local data, loading from remote")
            result = await self.refresh()
        else:
            self._log.info("local data loaded, update_on_init disabled")

        if isinstance(self.state, Loading) and not self._disposed:
            self._emit(Initial(self._handler.empty_value))
        self._refresher.start()
        return result

    async def refresh(self) -> RefreshResult[T]:
        """Fetch remote data, or join the fetch already in flight.

        Never raises for handler failures; inspect the result or the stream.
        """
        result = await self._refresher.refresh()
        if result.is_failure:
            self._log.warning("refresh failed", error=result.require_error.message)
        return result

    async def reset(self) -> None:
        """Clear the local cache and return to Initial(empty).

        Any in-flight fetch is invalidated first; its result is discarded.
        A store already running when reset() is called is not waited for;
        once it finishes, the value it wrote is removed again.
        """
        self._invalidate()
        self._resets += 1
        self._log.info("resetting")
        if self._supports_local:
            try:
                await self._handler.remove_local_data()
            except Exception as exc:
                self._on_persist_error(exc, "remove local data failed")
        self._emit(Initial(self._handler.empty_value))

    async def add_data(self, value: T, *, source: DataSource = DataSource.LOCAL) -> LoaderError | None:
        """Push value into the stream and persist it (best effort).

        Returns:
            The persistence warning, if storing failed
        """
        if not self._emit(Loaded(value, source)):
            return None
        return await self._persist(value, self._generation)

    def dispose(self) -> None:
        """Stop everything. Later emissions are no-ops and streams end."""
        if self._disposed:
            return
        self._disposed = True
        self._invalidate()
        self._refresher.dispose()
        self._registry.unregister(self)  # type: ignore[arg-type]
        self._subject.close()
        self._log.debug("disposed")

    async def __aenter__(self) -> Self:
        if not self._initialized:
            await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()

    # ─────────────────────────────────────────────────────────────────
    # Sequence steps
    # ─────────────────────────────────────────────────────────────────

    async def _load_local(self) -> bool:
        """Read the local cache. Returns True if a non-empty value was emitted."""
        if not self._supports_local:
            return False
        generation = self._generation
        self._emit_loading(DataSource.LOCAL)
        try:
            data = await self._handler.get_local_data()
        except NoLocalDataError:
            self._log.debug("no local data")
            return False
        except Exception as exc:
            if generation != self._generation:
                return False
            error = self._read_error(exc, DataSource.LOCAL)
            self._emit(Error(self._handler.empty_value, error, DataSource.LOCAL))
            return False

        if generation != self._generation:
            return False
        if data == self._handler.empty_value:
            self._log.debug("local data is empty")
            return False
        self._emit(Loaded(data, DataSource.LOCAL))
        self._log.info("local data loaded")
        return True

    async def _load_remote(self) -> RefreshResult[T]:
        """One remote fetch. Runs inside the refresher's single in-flight task."""
        initiated_at = self._clock.now()
        if self._disposed:
            return RefreshResult.discarded(initiated_at=initiated_at, finished_at=initiated_at)
        if not self._supports_remote:
            return RefreshResult.not_supported(None, initiated_at=initiated_at, finished_at=self._clock.now())

        generation = self._generation
        self._emit_loading(DataSource.REMOTE)
        self._log.debug("fetching remote data", generation=generation)
        try:
            data = await self._handler.get_remote_data()
        except Exception as exc:
            if generation != self._generation:
                self._log.debug("discarding stale remote failure", generation=generation)
                return RefreshResult.discarded(initiated_at=initiated_at, finished_at=self._clock.now())
            error = self._read_error(exc, DataSource.REMOTE)
            self._emit(Error(self.value, error, DataSource.REMOTE))
            finished_at = self._clock.now()
            if error.kind is ErrorKind.NOT_SUPPORTED:
                return RefreshResult.not_supported(error, initiated_at=initiated_at, finished_at=finished_at)
            return RefreshResult.failure(error, initiated_at=initiated_at, finished_at=finished_at)

        if generation != self._generation:
            self._log.debug("discarding stale remote data", generation=generation)
            return RefreshResult.discarded(initiated_at=initiated_at, finished_at=self._clock.now())

        self._emit(Loaded(data, DataSource.REMOTE))
        self._log.info("remote data loaded")
        persist_error = await self._persist(data, generation)
        if generation != self._generation:
            return RefreshResult.discarded(initiated_at=initiated_at, finished_at=self._clock.now())
        return RefreshResult.success(
            data, initiated_at=initiated_at, finished_at=self._clock.now(), persist_error=persist_error,
        )

    async def _persist(self, value: T, generation: int) -> LoaderError | None:
        """Store value unless generation was invalidated.

        Stores run one at a time, so an invalidated store always finishes
        before a newer one starts.
        """
        if not self._supports_local:
            return None
        async with self._store_lock:
            if generation != self._generation:
                self._log.debug("skipping store for invalidated value", generation=generation)
                return None
            resets = self._resets
            try:
                await self._handler.store_local_data(value)
            except Exception as exc:
                return self._on_persist_error(exc, "store local data failed")
            if resets != self._resets and self._supports_local:
                # reset() ran while storing and its removal may have come first
                self._log.debug("removing value stored across a reset", generation=generation)
                try:
                    await self._handler.remove_local_data()
                except Exception as exc:
                    return self._on_persist_error(exc, "remove local data failed")
        return None

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    def _emit(self, state: LoaderState[T]) -> bool:
        return self._subject.emit(state)

    def _emit_loading(self, source: DataSource) -> None:
        current = self.state
        if isinstance(current, Loading) and current.source is source:
            return
        self._emit(Loading(current.value, source, self._generation))

    def _invalidate(self) -> None:
        self._generation += 1
        self._refresher.invalidate()

    def _read_error(self, exc: Exception, source: DataSource) -> LoaderError:
        error = LoaderError.from_exception(exc, source=source)
        if error.kind is ErrorKind.NOT_SUPPORTED:
            self._disable(source)
            self._log.error("operation not supported by handler", source=source, error=error.message)
        else:
            self._log.error("read failed", source=source, error=error.message, kind=error.kind)
        return error

    def _on_persist_error(self, exc: Exception, event: str) -> LoaderError:
        kind = ErrorKind.NOT_SUPPORTED if classify_exception(exc) is ErrorKind.NOT_SUPPORTED else ErrorKind.PERSIST_FAILED
        error = LoaderError.from_exception(exc, source=DataSource.LOCAL, kind=kind)
        if kind is ErrorKind.NOT_SUPPORTED:
            self._disable(DataSource.LOCAL)
        self._log.warning(event, error=error.message, kind=error.kind)
        for listener in tuple(self._warning_listeners):
            try:
                listener(error)
            except Exception as listener_exc:
                self._log.exception("warning listener raised", listener_exc)
        return error

    def _disable(self, source: DataSource) -> None:
        if source is DataSource.REMOTE:
            self._supports_remote = False
            self._refresher.disable_auto_refresh()
        else:
            self._supports_local = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, state={self.state!r})"
