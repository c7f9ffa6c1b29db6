"""Registry of live loaders for application-wide refresh, reset and log level."""

from .registry import StaleMateRegistry, get_registry, reset_registry, set_registry

__all__ = ["StaleMateRegistry", "get_registry", "set_registry", "reset_registry"]
