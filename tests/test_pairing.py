from __future__ import annotations

import asyncio

import pytest
from conftest import (
    ADDRESS_A,
    ADDRESS_B,
    CountingFactory,
    FakeSignClient,
    RecordingPresenter,
    session_struct,
)

from stx_raffle.base import PairingProposal
from stx_raffle.exceptions import NetworkError, WalletRejectedError
from stx_raffle.wallet import (
    EVENT_DISCONNECTED,
    EVENT_SESSION_UPDATED,
    PairingClient,
    PairingConfig,
    PairingState,
    SessionRecord,
    SessionStore,
)


@pytest.mark.asyncio
async def test_ensure_client_is_single_flight(store: SessionStore) -> None:
    client = FakeSignClient()
    calls = 0

    async def slow_factory(config: PairingConfig) -> FakeSignClient:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return client

    pairing = PairingClient(PairingConfig(), slow_factory, store=store)
    results = await asyncio.gather(*(pairing.ensure_client() for _ in range(5)))

    assert calls == 1
    assert all(result is client for result in results)
    assert pairing.state is PairingState.IDLE
    assert set(client.handlers) == {"session_delete", "session_update"}


@pytest.mark.asyncio
async def test_ensure_client_failure_can_be_retried(store: SessionStore) -> None:
    client = FakeSignClient()
    attempts = 0

    async def flaky_factory(config: PairingConfig) -> FakeSignClient:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise RuntimeError("relay unavailable")
        return client

    pairing = PairingClient(PairingConfig(), flaky_factory, store=store)

    with pytest.raises(NetworkError):
        await pairing.ensure_client()
    assert pairing.state is PairingState.UNINITIALIZED

    assert await pairing.ensure_client() is client
    assert attempts == 2


@pytest.mark.asyncio
async def test_ensure_client_restores_latest_remote_session(
    sign_client: FakeSignClient, pairing: PairingClient, store: SessionStore
) -> None:
    sign_client.live = [session_struct("old", ADDRESS_B), session_struct("new", ADDRESS_A)]

    await pairing.ensure_client()

    assert pairing.state is PairingState.CONNECTED
    assert pairing.current_session.topic == "new"
    assert store.load() == SessionRecord(topic="new", address=ADDRESS_A)


@pytest.mark.asyncio
async def test_ensure_client_prefers_stored_topic(
    sign_client: FakeSignClient, pairing: PairingClient, store: SessionStore
) -> None:
    sign_client.live = [session_struct("stored", ADDRESS_B), session_struct("other", ADDRESS_A)]
    store.save(SessionRecord(topic="stored", address=ADDRESS_B))

    await pairing.ensure_client()

    assert pairing.current_session.topic == "stored"
    assert pairing.current_address() == ADDRESS_B


@pytest.mark.asyncio
async def test_stale_stored_record_is_cleared(pairing: PairingClient, store: SessionStore) -> None:
    store.save(SessionRecord(topic="gone", address=ADDRESS_A))

    await pairing.ensure_client()

    assert pairing.state is PairingState.IDLE
    assert store.load() is None
    assert pairing.current_address() is None


@pytest.mark.asyncio
async def test_connect_reuses_restored_session_without_negotiation(
    sign_client: FakeSignClient, pairing: PairingClient, store: SessionStore
) -> None:
    sign_client.live = [session_struct("topic-1", ADDRESS_A)]
    store.save(SessionRecord(topic="topic-1", address=ADDRESS_A))

    state = await pairing.connect()

    assert state.connected is True
    assert state.address == ADDRESS_A
    assert sign_client.connect_calls == []


@pytest.mark.asyncio
async def test_connect_negotiates_and_persists(
    sign_client: FakeSignClient,
    pairing: PairingClient,
    store: SessionStore,
    presenter: RecordingPresenter,
) -> None:
    sign_client.approval_result = session_struct("fresh", ADDRESS_A)
    connected: list[str] = []
    pairing.subscribe("connected", connected.append)

    state = await pairing.connect()

    assert state.connected is True
    assert state.address == ADDRESS_A
    assert store.load() == SessionRecord(topic="fresh", address=ADDRESS_A)
    assert presenter.opened == ["wc:pairing@2?relay-protocol=irn"]
    assert presenter.closed == 1
    assert connected == [ADDRESS_A]

    namespaces = sign_client.connect_calls[0]["stacks"]
    assert namespaces["chains"] == ["stacks:1"]
    assert namespaces["methods"] == [
        "stacks_signMessage",
        "stacks_stxTransfer",
        "stacks_contractCall",
        "stacks_contractDeploy",
    ]
    assert namespaces["events"] == ["accountsChanged", "chainChanged"]


@pytest.mark.asyncio
async def test_connect_uses_testnet_chain(store: SessionStore) -> None:
    client = FakeSignClient()
    client.approval_result = session_struct("t", ADDRESS_A, chain="stacks:2147483648")
    pairing = PairingClient(PairingConfig(network="testnet"), CountingFactory(client), store=store)

    state = await pairing.connect()

    assert state.connected is True
    assert client.connect_calls[0]["stacks"]["chains"] == ["stacks:2147483648"]
    assert pairing.chain_id == "stacks:2147483648"


@pytest.mark.asyncio
async def test_connect_rejection_returns_not_connected(
    sign_client: FakeSignClient,
    pairing: PairingClient,
    store: SessionStore,
    presenter: RecordingPresenter,
) -> None:
    sign_client.approval_error = WalletRejectedError("User rejected", code=5000)

    state = await pairing.connect()

    assert state.connected is False
    assert state.address is None
    assert store.load() is None
    assert presenter.closed == 1
    assert pairing.state is PairingState.IDLE


@pytest.mark.asyncio
async def test_connect_without_account_is_not_connected(
    sign_client: FakeSignClient, pairing: PairingClient
) -> None:
    sign_client.approval_result = {"topic": "empty", "namespaces": {"stacks": {"accounts": []}}}

    state = await pairing.connect()

    assert state.connected is False
    assert pairing.current_session is None


@pytest.mark.asyncio
async def test_connect_never_raises_when_init_fails(store: SessionStore) -> None:
    async def broken_factory(config: PairingConfig) -> FakeSignClient:
        raise RuntimeError("no relay")

    pairing = PairingClient(PairingConfig(), broken_factory, store=store)

    state = await pairing.connect()

    assert state.connected is False


@pytest.mark.asyncio
async def test_late_approval_for_superseded_slot_is_discarded(
    sign_client: FakeSignClient, pairing: PairingClient, store: SessionStore
) -> None:
    release = asyncio.Event()

    async def slow_connect(required_namespaces):
        sign_client.connect_calls.append(required_namespaces)

        async def approval():
            await release.wait()
            return session_struct("late", ADDRESS_B)

        return PairingProposal(uri=None, approval=approval)

    sign_client.connect = slow_connect  # type: ignore[method-assign]
    task = pairing.start_connect()
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    # Another session wins the slot while the negotiation is pending.
    sign_client.live = [session_struct("winner", ADDRESS_A)]
    store.save(SessionRecord(topic="winner", address=ADDRESS_A))
    pairing._restore(sign_client)
    release.set()

    state = await task

    assert state.address == ADDRESS_A
    assert pairing.current_session.topic == "winner"
    assert store.load() == SessionRecord(topic="winner", address=ADDRESS_A)


@pytest.mark.asyncio
async def test_disconnect_swallows_remote_failure(
    sign_client: FakeSignClient, pairing: PairingClient, store: SessionStore
) -> None:
    sign_client.approval_result = session_struct("t1", ADDRESS_A)
    await pairing.connect()
    sign_client.disconnect_error = RuntimeError("relay closed")

    await pairing.disconnect()

    assert sign_client.disconnects[0][0] == "t1"
    assert sign_client.disconnects[0][1] == {"code": 6000, "message": "User disconnected"}
    assert pairing.current_session is None
    assert pairing.state is PairingState.IDLE
    assert store.load() is None


@pytest.mark.asyncio
async def test_disconnect_when_idle_clears_store(pairing: PairingClient, store: SessionStore) -> None:
    store.save(SessionRecord(topic="orphan", address=ADDRESS_A))

    await pairing.disconnect()

    assert store.load() is None


@pytest.mark.asyncio
async def test_remote_delete_clears_session_and_notifies(
    sign_client: FakeSignClient, pairing: PairingClient, store: SessionStore
) -> None:
    sign_client.approval_result = session_struct("t1", ADDRESS_A)
    await pairing.connect()
    notified: list[str] = []
    pairing.subscribe(EVENT_DISCONNECTED, notified.append)

    sign_client.emit("session_delete", {"topic": "t1"})

    assert pairing.current_session is None
    assert store.load() is None
    assert notified == ["t1"]


@pytest.mark.asyncio
async def test_foreign_delete_event_is_ignored(
    sign_client: FakeSignClient, pairing: PairingClient, store: SessionStore
) -> None:
    sign_client.approval_result = session_struct("t1", ADDRESS_A)
    await pairing.connect()
    notified: list[str] = []
    pairing.subscribe(EVENT_DISCONNECTED, notified.append)

    sign_client.emit("session_delete", {"topic": "someone-else"})

    assert pairing.current_session.topic == "t1"
    assert store.load() == SessionRecord(topic="t1", address=ADDRESS_A)
    assert notified == []


@pytest.mark.asyncio
async def test_session_update_refreshes_accounts(
    sign_client: FakeSignClient, pairing: PairingClient, store: SessionStore
) -> None:
    sign_client.approval_result = session_struct("t1", ADDRESS_A)
    await pairing.connect()
    updates = []
    pairing.subscribe(EVENT_SESSION_UPDATED, updates.append)

    sign_client.live = [session_struct("t1", ADDRESS_B)]
    sign_client.emit("session_update", {"topic": "t1"})

    assert pairing.state is PairingState.CONNECTED
    assert pairing.current_address() == ADDRESS_B
    assert store.load() == SessionRecord(topic="t1", address=ADDRESS_B)
    assert len(updates) == 1


@pytest.mark.asyncio
async def test_session_update_without_accounts_clears_stored_address(
    sign_client: FakeSignClient, pairing: PairingClient, store: SessionStore
) -> None:
    sign_client.approval_result = session_struct("t1", ADDRESS_A)
    await pairing.connect()

    sign_client.live = [{"topic": "t1", "namespaces": {"stacks": {"accounts": []}}}]
    sign_client.emit("session_update", {"topic": "t1"})

    assert pairing.current_session.topic == "t1"
    assert pairing.current_session.address is None
    assert store.load() is None
    assert pairing.current_address() is None


@pytest.mark.asyncio
async def test_foreign_update_event_is_ignored(
    sign_client: FakeSignClient, pairing: PairingClient
) -> None:
    sign_client.approval_result = session_struct("t1", ADDRESS_A)
    await pairing.connect()

    sign_client.live.append(session_struct("t2", ADDRESS_B))
    sign_client.emit("session_update", {"topic": "t2"})

    assert pairing.current_address() == ADDRESS_A


@pytest.mark.asyncio
async def test_in_memory_address_wins_over_stored(
    sign_client: FakeSignClient, pairing: PairingClient, store: SessionStore
) -> None:
    sign_client.approval_result = session_struct("t1", ADDRESS_A)
    await pairing.connect()

    store.save(SessionRecord(topic="stale", address=ADDRESS_B))

    assert pairing.current_address() == ADDRESS_A


def test_current_address_falls_back_to_store(pairing: PairingClient, store: SessionStore) -> None:
    assert pairing.current_address() is None

    store.save(SessionRecord(topic="t1", address=ADDRESS_B))

    assert pairing.state is PairingState.UNINITIALIZED
    assert pairing.current_address() == ADDRESS_B


@pytest.mark.asyncio
async def test_is_connected_checks_live_sessions(
    sign_client: FakeSignClient, pairing: PairingClient
) -> None:
    assert pairing.is_connected() is False

    sign_client.approval_result = session_struct("t1", ADDRESS_A)
    await pairing.connect()
    assert pairing.is_connected() is True

    sign_client.live = []
    assert pairing.is_connected() is False


@pytest.mark.asyncio
async def test_request_without_session_raises(pairing: PairingClient) -> None:
    with pytest.raises(NetworkError):
        await pairing.request("stacks_contractCall", {})
