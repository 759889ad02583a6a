"""Basic usage example for the STX raffle client.

The read-only half runs as-is against the configured Stacks API.

The write half needs a wallet. The package does not ship a WalletConnect
relay, so ``create_sign_client`` below must be replaced with a factory that
returns your platform's sign client wrapped in a ``SignClientBase``
subclass (implementing ``connect``, ``sessions``, ``request``,
``disconnect`` and ``on``). Until then ``connect()`` logs the factory
error and the example prints "Wallet not connected".
"""

import asyncio
import logging

from dotenv import load_dotenv

from stx_raffle import RaffleClient, RaffleClientConfig, micro_to_stx, stx_to_micro
from stx_raffle.wallet import EVENT_CONNECTED, EVENT_DISCONNECTED, PairingConfig

# Load environment variables from .env file
load_dotenv()


async def create_sign_client(config: PairingConfig):
    """Return a connected WalletConnect sign client implementing SignClientBase."""

    raise NotImplementedError("Plug in a WalletConnect sign client for your platform")


async def example_reads(client: RaffleClient) -> None:
    """Read-only queries need no wallet connection."""

    overview = await client.fetch_overview(limit=5)
    print(f"Raffles: {overview.raffle_count}")
    print(f"Total prize pool: {micro_to_stx(overview.stats.total_prize_pool)} STX")

    for raffle in overview.raffles:
        print(
            f"#{raffle.id} {raffle.title}: {raffle.tickets_sold}/{raffle.max_tickets} tickets, "
            f"{micro_to_stx(raffle.ticket_price)} STX each, status={raffle.status}"
        )


async def example_writes(client: RaffleClient) -> None:
    """Contract calls are signed by the paired wallet."""

    client.subscribe(EVENT_CONNECTED, lambda address: print(f"Connected as {address}"))
    client.subscribe(EVENT_DISCONNECTED, lambda topic: print(f"Session {topic} ended"))

    state = await client.connect()
    if not state.connected:
        print("Wallet not connected")
        return

    result = await client.create_raffle(
        title="Weekly draw",
        ticket_price=stx_to_micro("0.5"),
        max_tickets=100,
        duration_seconds=7 * 24 * 60 * 60,
    )
    if result.success:
        print(f"Raffle submitted: {result.tx_id}")
    else:
        print(f"Create failed ({result.reason}): {result.error}")

    result = await client.buy_tickets(raffle_id=1, quantity=2)
    if result.success:
        print(f"Tickets bought: {result.tx_id}")
    else:
        print(f"Purchase failed: {result.error}")


async def main() -> None:
    logging.basicConfig(level=logging.INFO)

    config = RaffleClientConfig.from_env()
    async with RaffleClient(config, create_sign_client) as client:
        await example_reads(client)
        try:
            await example_writes(client)
        finally:
            await client.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
