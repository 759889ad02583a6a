from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from stx_raffle.base import PairingPresenter, PairingProposal, SignClientBase
from stx_raffle.wallet import PairingClient, PairingConfig, SessionStore

ADDRESS_A = "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"
ADDRESS_B = "SP000000000000000000002Q6VF78"
TESTNET_ADDRESS = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
CONTRACT_ADDRESS = "SP000000000000000000002Q6VF78"


def session_struct(topic: str, address: str, chain: str = "stacks:1") -> dict[str, Any]:
    return {
        "topic": topic,
        "expiry": 1_900_000_000,
        "namespaces": {
            "stacks": {
                "accounts": [f"{chain}:{address}"],
                "methods": ["stacks_signMessage", "stacks_contractCall"],
                "events": ["accountsChanged", "chainChanged"],
            }
        },
    }


class FakeSignClient(SignClientBase):
    def __init__(self, sessions: list[dict[str, Any]] | None = None) -> None:
        self.live: list[dict[str, Any]] = list(sessions or [])
        self.handlers: dict[str, Any] = {}
        self.connect_calls: list[Mapping[str, Any]] = []
        self.requests: list[tuple[str, str, str, Mapping[str, Any]]] = []
        self.disconnects: list[tuple[str, Mapping[str, Any]]] = []
        self.approval_result: Any = None
        self.approval_error: Exception | None = None
        self.request_result: Any = None
        self.request_error: Exception | None = None
        self.disconnect_error: Exception | None = None

    async def connect(self, required_namespaces: Mapping[str, Any]) -> PairingProposal:
        self.connect_calls.append(required_namespaces)

        async def approval() -> Any:
            if self.approval_error is not None:
                raise self.approval_error
            if isinstance(self.approval_result, dict):
                self.live.append(self.approval_result)
            return self.approval_result

        return PairingProposal(uri="wc:pairing@2?relay-protocol=irn", approval=approval)

    def sessions(self) -> list[dict[str, Any]]:
        return list(self.live)

    async def request(
        self, topic: str, chain_id: str, method: str, params: Mapping[str, Any]
    ) -> Any:
        self.requests.append((topic, chain_id, method, params))
        if self.request_error is not None:
            raise self.request_error
        return self.request_result

    async def disconnect(self, topic: str, reason: Mapping[str, Any]) -> None:
        self.disconnects.append((topic, reason))
        if self.disconnect_error is not None:
            raise self.disconnect_error
        self.live = [struct for struct in self.live if struct["topic"] != topic]

    def on(self, event: str, handler: Any) -> None:
        self.handlers[event] = handler

    def emit(self, event: str, payload: Mapping[str, Any]) -> None:
        self.handlers[event](payload)


class RecordingPresenter(PairingPresenter):
    def __init__(self) -> None:
        self.opened: list[str] = []
        self.closed = 0

    def open(self, uri: str) -> None:
        self.opened.append(uri)

    def close(self) -> None:
        self.closed += 1


class CountingFactory:
    def __init__(self, client: FakeSignClient) -> None:
        self.client = client
        self.calls = 0

    async def __call__(self, config: PairingConfig) -> FakeSignClient:
        self.calls += 1
        return self.client


@pytest.fixture
def sign_client() -> FakeSignClient:
    return FakeSignClient()


@pytest.fixture
def store(tmp_path) -> SessionStore:
    return SessionStore(tmp_path / "walletconnect_session.json")


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def factory(sign_client: FakeSignClient) -> CountingFactory:
    return CountingFactory(sign_client)


@pytest.fixture
def pairing(
    factory: CountingFactory, store: SessionStore, presenter: RecordingPresenter
) -> PairingClient:
    return PairingClient(PairingConfig(), factory, store=store, presenter=presenter)
