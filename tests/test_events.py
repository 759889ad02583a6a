from __future__ import annotations

import pytest
from conftest import ADDRESS_A, session_struct

from stx_raffle.wallet import EVENT_CONNECTED, EVENT_DISCONNECTED, EventChannel, PairingClient


def test_publish_fans_out_in_subscription_order() -> None:
    channel = EventChannel()
    seen: list[tuple[str, str]] = []
    channel.subscribe("connected", lambda address: seen.append(("first", address)))
    channel.subscribe("connected", lambda address: seen.append(("second", address)))

    channel.publish("connected", "SP1")

    assert seen == [("first", "SP1"), ("second", "SP1")]


def test_unsubscribe_is_idempotent() -> None:
    channel = EventChannel()
    seen: list[str] = []
    unsubscribe = channel.subscribe("disconnected", seen.append)

    unsubscribe()
    unsubscribe()
    channel.publish("disconnected", "topic")

    assert seen == []
    assert channel.listener_count("disconnected") == 0


def test_failing_listener_does_not_block_others() -> None:
    channel = EventChannel()
    seen: list[str] = []

    def broken(_address: str) -> None:
        raise RuntimeError("listener bug")

    channel.subscribe("connected", broken)
    channel.subscribe("connected", seen.append)

    channel.publish("connected", "SP1")

    assert seen == ["SP1"]


@pytest.mark.asyncio
async def test_pairing_publishes_lifecycle(pairing: PairingClient, sign_client) -> None:
    connected: list[str] = []
    disconnected: list[str] = []
    pairing.subscribe(EVENT_CONNECTED, connected.append)
    pairing.subscribe(EVENT_DISCONNECTED, disconnected.append)
    sign_client.approval_result = session_struct("t1", ADDRESS_A)

    await pairing.connect()
    await pairing.disconnect()

    assert connected == [ADDRESS_A]
    assert disconnected == ["t1"]
