"""Raffle contract operations composed from wallet calls and read-only queries."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import requests

from .base import PairingPresenter
from .clarity import (
    ClarityValue,
    known_bool,
    known_int,
    known_optional_text,
    known_text,
    principal_cv,
    string_ascii_cv,
    uint_cv,
)
from .config import RaffleClientConfig
from .contract import ContractCallDispatcher, ContractReader
from .exceptions import ValidationError
from .types import (
    AggregateStats,
    FailureReason,
    Raffle,
    RaffleOverview,
    TransactionResult,
    WalletState,
)
from .wallet import PairingClient, SessionStore, SignClientFactory

logger = logging.getLogger(__name__)

DEFAULT_OVERVIEW_LIMIT = 10


class RaffleClient:
    """Create raffles, buy tickets, draw winners and read raffle state."""

    def __init__(
        self,
        config: RaffleClientConfig,
        client_factory: SignClientFactory,
        *,
        store: SessionStore | None = None,
        presenter: PairingPresenter | None = None,
        http_session: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._pairing = PairingClient(
            config.pairing, client_factory, store=store, presenter=presenter
        )
        self._dispatcher = ContractCallDispatcher(self._pairing, config.contract)
        self._reader = ContractReader(config.contract, http_session)

    async def __aenter__(self) -> RaffleClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._reader.close()

    @property
    def pairing(self) -> PairingClient:
        return self._pairing

    # ------------------------------------------------------------------
    # Wallet
    # ------------------------------------------------------------------
    async def connect(self) -> WalletState:
        return await self._pairing.connect()

    async def disconnect(self) -> None:
        await self._pairing.disconnect()

    def current_address(self) -> str | None:
        return self._pairing.current_address()

    def is_connected(self) -> bool:
        return self._pairing.is_connected()

    def subscribe(self, event: str, listener: Callable[..., Any]) -> Callable[[], None]:
        return self._pairing.subscribe(event, listener)

    # ------------------------------------------------------------------
    # Contract calls
    # ------------------------------------------------------------------
    async def create_raffle(
        self,
        title: str,
        ticket_price: int,
        max_tickets: int,
        duration_seconds: int,
    ) -> TransactionResult:
        """Create a raffle; ``ticket_price`` is in micro-STX."""

        return await self._invoke(
            "create-raffle",
            lambda: [
                string_ascii_cv(title),
                uint_cv(ticket_price),
                uint_cv(max_tickets),
                uint_cv(duration_seconds),
            ],
        )

    async def buy_tickets(self, raffle_id: int, quantity: int) -> TransactionResult:
        return await self._invoke(
            "buy-tickets", lambda: [uint_cv(raffle_id), uint_cv(quantity)]
        )

    async def draw_winner(self, raffle_id: int) -> TransactionResult:
        return await self._invoke("draw-winner", lambda: [uint_cv(raffle_id)])

    async def _invoke(
        self, function_name: str, build_args: Callable[[], list[ClarityValue]]
    ) -> TransactionResult:
        try:
            args = build_args()
        except ValidationError as exc:
            logger.error("Invalid arguments for %s: %s", function_name, exc.message)
            return TransactionResult.failed(FailureReason.INVALID_ARGUMENT, exc.message)
        return await self._dispatcher.invoke(function_name, args)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def fetch_raffle(self, raffle_id: int) -> Raffle | None:
        args = _read_args(lambda: [uint_cv(raffle_id)])
        if args is None:
            return None

        decoded = await self._reader.query("get-raffle", args)
        if not isinstance(decoded, Mapping):
            return None
        return _project_raffle(raffle_id, decoded)

    async def fetch_raffle_count(self) -> int:
        return known_int(await self._reader.query("get-raffle-count"), 0)

    async def fetch_stats(self) -> AggregateStats:
        decoded = await self._reader.query("get-total-stats")
        if not isinstance(decoded, Mapping):
            return AggregateStats()
        return AggregateStats(
            raffle_count=known_int(decoded.get("total-raffles"), 0),
            ticket_count=known_int(decoded.get("total-tickets-sold"), 0),
            total_prize_pool=known_int(decoded.get("total-prize-pool"), 0),
        )

    async def fetch_user_tickets(self, raffle_id: int, account: str) -> int:
        args = _read_args(lambda: [uint_cv(raffle_id), principal_cv(account)])
        if args is None:
            return 0
        return known_int(await self._reader.query("get-user-tickets", args), 0)

    async def is_active(self, raffle_id: int) -> bool:
        return await self._read_flag("is-raffle-active", raffle_id)

    async def is_drawable(self, raffle_id: int) -> bool:
        return await self._read_flag("can-draw-winner", raffle_id)

    async def fetch_time_remaining(self, raffle_id: int) -> int:
        args = _read_args(lambda: [uint_cv(raffle_id)])
        if args is None:
            return 0
        return known_int(await self._reader.query("get-time-remaining", args), 0)

    async def fetch_raffles(self, raffle_ids: Iterable[int]) -> list[Raffle]:
        """Fetch several raffles concurrently, skipping ones that cannot be read."""

        results = await asyncio.gather(*(self.fetch_raffle(raffle_id) for raffle_id in raffle_ids))
        return [raffle for raffle in results if raffle is not None]

    async def fetch_overview(self, limit: int = DEFAULT_OVERVIEW_LIMIT) -> RaffleOverview:
        """Load totals and the newest ``limit`` raffles."""

        count, stats = await asyncio.gather(self.fetch_raffle_count(), self.fetch_stats())
        newest_ids = range(count, max(0, count - limit), -1)
        raffles = await self.fetch_raffles(newest_ids)
        return RaffleOverview(raffle_count=count, stats=stats, raffles=raffles)

    async def _read_flag(self, function_name: str, raffle_id: int) -> bool:
        args = _read_args(lambda: [uint_cv(raffle_id)])
        if args is None:
            return False
        return known_bool(await self._reader.query(function_name, args), False)


def _read_args(build_args: Callable[[], list[ClarityValue]]) -> list[ClarityValue] | None:
    try:
        return build_args()
    except ValidationError as exc:
        logger.warning("Skipping read with invalid arguments: %s", exc.message)
        return None


def _project_raffle(raffle_id: int, fields: Mapping[str, Any]) -> Raffle:
    status = fields.get("status")
    if isinstance(status, int) and not isinstance(status, bool):
        status = str(status)

    return Raffle(
        id=raffle_id,
        creator=known_text(fields.get("creator"), ""),
        title=known_text(fields.get("title"), ""),
        ticket_price=known_int(fields.get("ticket-price"), 0),
        max_tickets=known_int(fields.get("max-tickets"), 0),
        tickets_sold=known_int(fields.get("tickets-sold"), 0),
        prize_pool=known_int(fields.get("prize-pool"), 0),
        start_time=known_int(fields.get("start-time"), 0),
        end_time=known_int(fields.get("end-time"), 0),
        winner=known_optional_text(fields.get("winner")),
        status=known_text(status, "unknown"),
    )
