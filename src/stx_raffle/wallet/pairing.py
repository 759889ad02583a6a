"""Wallet pairing lifecycle on top of a WalletConnect-style sign client."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from typing import Any

from ..base import PairingPresenter, SignClientBase
from ..constants import (
    PAIRING_EVENTS,
    PAIRING_METHODS,
    STACKS_NAMESPACE,
    USER_DISCONNECTED_CODE,
    USER_DISCONNECTED_MESSAGE,
)
from ..exceptions import NetworkError, SessionError
from ..types import WalletState
from .config import PairingConfig
from .events import EVENT_CONNECTED, EVENT_DISCONNECTED, EVENT_SESSION_UPDATED, EventChannel
from .session import WalletSession
from .store import SessionRecord, SessionStore

logger = logging.getLogger(__name__)

SignClientFactory = Callable[[PairingConfig], Awaitable[SignClientBase]]


class PairingState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    IDLE = "idle"
    CONNECTED = "connected"


class LoggingPresenter(PairingPresenter):
    """Write the pairing URI to the log for the user to copy or scan."""

    def open(self, uri: str) -> None:
        logger.info("Approve the pairing request in your wallet: %s", uri)

    def close(self) -> None:
        logger.debug("Pairing prompt closed")


class PairingClient:
    """Own the single wallet session slot and its durable mirror."""

    def __init__(
        self,
        config: PairingConfig,
        client_factory: SignClientFactory,
        *,
        store: SessionStore | None = None,
        presenter: PairingPresenter | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory
        self._store = store or SessionStore(config.resolved_storage_path())
        self._presenter = presenter or LoggingPresenter()
        self._events = EventChannel()
        self._client: SignClientBase | None = None
        self._session: WalletSession | None = None
        self._initializing = False
        self._init_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def ensure_client(self) -> SignClientBase:
        """Construct the sign client once and restore any live session."""

        if self._client is not None:
            return self._client

        async with self._init_lock:
            if self._client is not None:
                return self._client

            self._initializing = True
            try:
                client = await self._client_factory(self._config)
            except Exception as exc:
                logger.error("Failed to initialise sign client: %s", exc)
                raise NetworkError(
                    "Failed to initialise sign client", details={"error": str(exc)}
                ) from exc
            finally:
                self._initializing = False

            client.on("session_delete", self._on_session_delete)
            client.on("session_update", self._on_session_update)
            self._client = client
            logger.info("Sign client initialised for %s", self._config.chain_id)

            self._restore(client)
            return client

    async def connect(self) -> WalletState:
        """Reuse a live session or negotiate a new one; never raises."""

        try:
            client = await self.ensure_client()

            existing = self._resume(client)
            if existing is not None:
                return WalletState(connected=True, address=existing.address)

            expected_topic = self._topic()
            proposal = await client.connect(self._required_namespaces())

            presenting = False
            if proposal.uri:
                self._presenter.open(proposal.uri)
                presenting = True
            try:
                struct = await proposal.approval()
            finally:
                if presenting:
                    self._close_presenter()

            session = WalletSession.from_struct(struct)
            if session is None or session.address is None:
                logger.warning("Approved session carried no Stacks account")
                return WalletState.disconnected()

            if not self._commit(session, expected_topic=expected_topic):
                current = self._session
                if current is not None and current.address:
                    return WalletState(connected=True, address=current.address)
                return WalletState.disconnected()

            logger.info("Wallet connected: %s", session.address)
            self._events.publish(EVENT_CONNECTED, session.address)
            return WalletState(connected=True, address=session.address)

        except Exception as exc:
            logger.error("Wallet connection failed: %s", exc)
            return WalletState.disconnected()

    def start_connect(self) -> asyncio.Task[WalletState]:
        """Run :meth:`connect` as a task the caller may abandon or cancel."""

        return asyncio.create_task(self.connect())

    async def disconnect(self) -> None:
        session = self._session
        client = self._client
        if session is not None and client is not None:
            try:
                await client.disconnect(
                    session.topic,
                    {"code": USER_DISCONNECTED_CODE, "message": USER_DISCONNECTED_MESSAGE},
                )
            except Exception as exc:
                logger.warning("Remote disconnect failed for %s: %s", session.topic, exc)

        self._session = None
        self._store.clear()
        if session is not None:
            logger.info("Wallet disconnected")
            self._events.publish(EVENT_DISCONNECTED, session.topic)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> PairingState:
        if self._initializing:
            return PairingState.INITIALIZING
        if self._client is None:
            return PairingState.UNINITIALIZED
        if self._session is not None:
            return PairingState.CONNECTED
        return PairingState.IDLE

    @property
    def current_session(self) -> WalletSession | None:
        return self._session

    @property
    def chain_id(self) -> str:
        if self._session is not None and self._session.chain_id:
            return self._session.chain_id
        return self._config.chain_id

    def current_address(self) -> str | None:
        """In-memory session address first, then the persisted one."""

        if self._session is not None and self._session.address:
            return self._session.address

        record = self._store.load()
        return record.address if record is not None else None

    def is_connected(self) -> bool:
        """Whether the known session topic is still live on the sign client."""

        if self._client is None:
            return False

        topic = self._topic()
        if topic is None:
            record = self._store.load()
            topic = record.topic if record is not None else None
        if topic is None:
            return False

        return any(session.topic == topic for session in self._live_sessions(self._client))

    def subscribe(self, event: str, listener: Callable[..., Any]) -> Callable[[], None]:
        return self._events.subscribe(event, listener)

    async def request(self, method: str, params: Mapping[str, Any]) -> Any:
        """Forward a request to the wallet over the active session."""

        session = self._session
        if session is None:
            raise NetworkError("No active wallet session")

        client = await self.ensure_client()
        chain_id = session.chain_id or self._config.chain_id
        logger.debug("Requesting %s on %s (topic=%s)", method, chain_id, session.topic)
        return await client.request(session.topic, chain_id, method, params)

    # ------------------------------------------------------------------
    # Remote events
    # ------------------------------------------------------------------
    def _on_session_delete(self, payload: Mapping[str, Any]) -> None:
        topic = payload.get("topic") if isinstance(payload, Mapping) else None
        if topic is None or topic != self._topic():
            logger.debug("Ignoring session_delete for foreign topic %s", topic)
            return

        self._session = None
        self._store.clear()
        logger.info("Wallet session %s deleted remotely", topic)
        self._events.publish(EVENT_DISCONNECTED, topic)

    def _on_session_update(self, payload: Mapping[str, Any]) -> None:
        topic = payload.get("topic") if isinstance(payload, Mapping) else None
        client = self._client
        if topic is None or client is None or topic != self._topic():
            logger.debug("Ignoring session_update for foreign topic %s", topic)
            return

        refreshed = next(
            (session for session in self._live_sessions(client) if session.topic == topic), None
        )
        if refreshed is None:
            logger.warning("Updated session %s not found on sign client", topic)
            return

        previous = self._session
        if previous is None or previous.topic != topic:
            return

        self._session = refreshed
        if not refreshed.address:
            logger.warning("Wallet session %s no longer authorises an account", topic)
            self._store.clear()
        elif refreshed.address != previous.address:
            self._persist(refreshed)
        self._events.publish(EVENT_SESSION_UPDATED, refreshed)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _topic(self) -> str | None:
        return self._session.topic if self._session is not None else None

    def _required_namespaces(self) -> dict[str, Any]:
        return {
            STACKS_NAMESPACE: {
                "methods": list(PAIRING_METHODS),
                "chains": [self._config.chain_id],
                "events": list(PAIRING_EVENTS),
            }
        }

    def _live_sessions(self, client: SignClientBase) -> list[WalletSession]:
        try:
            structs = client.sessions()
        except Exception as exc:
            logger.warning("Unable to list sign client sessions: %s", exc)
            return []

        sessions = []
        for struct in structs or []:
            session = WalletSession.from_struct(struct)
            if session is not None:
                sessions.append(session)
        return sessions

    def _resume(self, client: SignClientBase) -> WalletSession | None:
        if self._session is not None and self._session.address:
            return self._session
        return self._restore(client)

    def _restore(self, client: SignClientBase) -> WalletSession | None:
        live = [session for session in self._live_sessions(client) if session.address]
        current_topic = self._topic()
        if current_topic is not None:
            for session in live:
                if session.topic == current_topic:
                    return self._session

        record = self._store.load()
        chosen = None
        if record is not None:
            chosen = next((session for session in live if session.topic == record.topic), None)
        if chosen is None and live:
            chosen = live[-1]

        if chosen is None:
            if record is not None:
                logger.info("Stored wallet session %s is no longer live", record.topic)
                self._store.clear()
            return None

        if not self._commit(chosen, expected_topic=current_topic):
            return None
        logger.info("Restored wallet session for %s", chosen.address)
        return chosen

    def _commit(self, session: WalletSession, *, expected_topic: str | None) -> bool:
        """Install ``session`` if the slot still holds ``expected_topic``."""

        if self._topic() != expected_topic:
            logger.warning("Discarding superseded wallet session %s", session.topic)
            return False

        self._session = session
        self._persist(session)
        return True

    def _persist(self, session: WalletSession) -> None:
        if not session.address:
            return
        try:
            self._store.save(SessionRecord(topic=session.topic, address=session.address))
        except SessionError:
            logger.warning("Wallet session %s kept in memory only", session.topic)

    def _close_presenter(self) -> None:
        try:
            self._presenter.close()
        except Exception as exc:
            logger.warning("Failed to close pairing prompt: %s", exc)
