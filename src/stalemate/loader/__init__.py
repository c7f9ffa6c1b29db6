"""Loader, handler contract and state model."""

from .batch import BatchedRemoteHandler
from .handler import LocalOnlyHandler, RemoteOnlyHandler, StaleMateHandler
from .loader import StaleMateLoader, WarningListener
from .state import Error, Initial, Loaded, LoaderState, Loading, StateStatus
from .subject import StateSubject, StateSubscription

__all__ = [
    # Handlers
    "StaleMateHandler", "LocalOnlyHandler", "RemoteOnlyHandler", "BatchedRemoteHandler",
    # Loader
    "StaleMateLoader", "WarningListener",
    # States
    "LoaderState", "Initial", "Loading", "Loaded", "Error", "StateStatus",
    # Broadcast
    "StateSubject", "StateSubscription",
]
