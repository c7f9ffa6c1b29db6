"""Process-wide registry of live loaders.

Loaders register themselves on construction and unregister on dispose, which
lets application code act on every loader at once: refresh everything after
a login, reset everything on logout, or turn up logging while debugging.

Example:
    >>> registry = get_registry()
    >>> results = await registry.refresh_all()
    >>> failed = [r.unwrap() for r in results if r.is_ok() and r.unwrap().is_failure]
    >>> await registry.reset_with_handler(UserHandler)
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from stalemate.foundation.errors import Result
from stalemate.runtime.concurrency import execute_concurrently
from stalemate.runtime.observability import StaleMateLogLevel

if TYPE_CHECKING:
    from stalemate.loader.handler import StaleMateHandler
    from stalemate.loader.loader import StaleMateLoader
    from stalemate.refresh import RefreshResult


class StaleMateRegistry:
    """Ordered collection of live loaders.

    Batch operations fan out concurrently and report one Result per loader,
    in registration order, so one misbehaving loader never hides the others.
    """

    __slots__ = ("_loaders", "default_log_level")

    def __init__(self) -> None:
        self._loaders: list[StaleMateLoader[object]] = []
        self.default_log_level: StaleMateLogLevel | None = None

    def register(self, loader: StaleMateLoader[object]) -> None:
        """Add loader (no-op if already registered)."""
        if loader not in self._loaders:
            self._loaders.append(loader)

    def unregister(self, loader: StaleMateLoader[object]) -> bool:
        """Remove loader. Returns True if it was registered."""
        if loader in self._loaders:
            self._loaders.remove(loader)
            return True
        return False

    def unregister_all(self) -> None:
        self._loaders.clear()

    @property
    def loaders(self) -> list[StaleMateLoader[object]]:
        """Snapshot of registered loaders in registration order."""
        return list(self._loaders)

    def __len__(self) -> int:
        return len(self._loaders)

    def __iter__(self) -> Iterator[StaleMateLoader[object]]:
        return iter(list(self._loaders))

    def __contains__(self, loader: object) -> bool:
        return loader in self._loaders

    # ─────────────────────────────────────────────────────────────────
    # Queries by handler type
    # ─────────────────────────────────────────────────────────────────

    def loaders_with_handler(self, handler_type: type[StaleMateHandler[object]]) -> list[StaleMateLoader[object]]:
        """Loaders whose handler is an instance of handler_type (subclasses included)."""
        return [loader for loader in self._loaders if isinstance(loader.handler, handler_type)]

    def has_loader_with_handler(self, handler_type: type[StaleMateHandler[object]]) -> bool:
        return any(isinstance(loader.handler, handler_type) for loader in self._loaders)

    def count_loaders_with_handler(self, handler_type: type[StaleMateHandler[object]]) -> int:
        return len(self.loaders_with_handler(handler_type))

    # ─────────────────────────────────────────────────────────────────
    # Batch operations
    # ─────────────────────────────────────────────────────────────────

    async def refresh_all(self) -> list[Result[RefreshResult[object], Exception]]:
        """Refresh every registered loader concurrently."""
        return await execute_concurrently([loader.refresh() for loader in self.loaders])

    async def refresh_with_handler(
        self, handler_type: type[StaleMateHandler[object]],
    ) -> list[Result[RefreshResult[object], Exception]]:
        """Refresh the loaders whose handler is an instance of handler_type."""
        return await execute_concurrently([loader.refresh() for loader in self.loaders_with_handler(handler_type)])

    async def reset_all(self) -> list[Result[None, Exception]]:
        """Reset every registered loader concurrently."""
        return await execute_concurrently([loader.reset() for loader in self.loaders])

    async def reset_with_handler(self, handler_type: type[StaleMateHandler[object]]) -> list[Result[None, Exception]]:
        return await execute_concurrently([loader.reset() for loader in self.loaders_with_handler(handler_type)])

    def set_log_level(self, level: StaleMateLogLevel | str) -> None:
        """Apply level to every registered loader and to loaders created later."""
        resolved = StaleMateLogLevel.parse(level)
        self.default_log_level = resolved
        for loader in self._loaders:
            loader.set_log_level(resolved)

    def __repr__(self) -> str:
        return f"StaleMateRegistry(loaders={len(self._loaders)})"


# ─────────────────────────────────────────────────────────────────────────────
# Global Registry
# ─────────────────────────────────────────────────────────────────────────────

_registry: StaleMateRegistry | None = None


def get_registry() -> StaleMateRegistry:
    """Get the global registry, creating it on first use."""
    global _registry
    if _registry is None:
        _registry = StaleMateRegistry()
    return _registry


def set_registry(registry: StaleMateRegistry) -> None:
    """Replace the global registry."""
    global _registry
    _registry = registry


def reset_registry() -> None:
    """Drop the global registry (useful for testing)."""
    global _registry
    _registry = None
