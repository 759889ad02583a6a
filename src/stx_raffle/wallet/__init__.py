"""Wallet pairing, session persistence and lifecycle events."""

from .config import PairingConfig
from .events import EVENT_CONNECTED, EVENT_DISCONNECTED, EVENT_SESSION_UPDATED, EventChannel
from .pairing import LoggingPresenter, PairingClient, PairingState, SignClientFactory
from .session import WalletSession
from .store import SessionRecord, SessionStore

__all__ = [
    "EVENT_CONNECTED",
    "EVENT_DISCONNECTED",
    "EVENT_SESSION_UPDATED",
    "EventChannel",
    "LoggingPresenter",
    "PairingClient",
    "PairingConfig",
    "PairingState",
    "SessionRecord",
    "SessionStore",
    "SignClientFactory",
    "WalletSession",
]
