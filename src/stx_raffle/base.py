"""Interfaces for the pairing transport the wallet client drives."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

SessionStruct = Mapping[str, Any]
EventHandler = Callable[[Mapping[str, Any]], Any]


@dataclass
class PairingProposal:
    """A pending pairing negotiation.

    ``uri`` is shown to the user (for example as a QR code); ``approval``
    resolves with the approved session struct or raises on rejection.
    """

    uri: str | None
    approval: Callable[[], Awaitable[SessionStruct]]


class SignClientBase(ABC):
    """WalletConnect-style sign client.

    Implementations own the relay connection and cryptography; the wallet
    client only asks for approvals and forwards requests.
    """

    @abstractmethod
    async def connect(self, required_namespaces: Mapping[str, Any]) -> PairingProposal:
        pass

    @abstractmethod
    def sessions(self) -> list[SessionStruct]:
        """Return live sessions, oldest first."""

    @abstractmethod
    async def request(
        self, topic: str, chain_id: str, method: str, params: Mapping[str, Any]
    ) -> Any:
        pass

    @abstractmethod
    async def disconnect(self, topic: str, reason: Mapping[str, Any]) -> None:
        pass

    @abstractmethod
    def on(self, event: str, handler: EventHandler) -> None:
        pass


class PairingPresenter(ABC):
    """Displays a pairing URI until the negotiation settles."""

    @abstractmethod
    def open(self, uri: str) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass
