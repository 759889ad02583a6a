"""Type definitions and data models for the STX raffle client."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

Address = str  # c32check Stacks address
MicroStx = int  # Amount in the smallest currency unit


class FailureReason(str, Enum):
    """Why a contract call did not produce a transaction."""

    NOT_CONNECTED = "not_connected"
    REJECTED = "rejected"
    TRANSPORT = "transport"
    INVALID_ARGUMENT = "invalid_argument"


@dataclass(frozen=True)
class WalletState:
    """Outcome of a wallet connection attempt."""

    connected: bool
    address: Address | None = None

    @classmethod
    def disconnected(cls) -> "WalletState":
        return cls(connected=False, address=None)


@dataclass
class TransactionResult:
    """Normalised result of a signed contract call.

    ``tx_id`` is only set on success and ``error`` only on failure.
    """

    success: bool
    tx_id: str | None = None
    error: str | None = None
    reason: FailureReason | None = None
    raw_response: Any | None = None

    @classmethod
    def ok(cls, tx_id: str, raw_response: Any | None = None) -> "TransactionResult":
        return cls(success=True, tx_id=tx_id, raw_response=raw_response)

    @classmethod
    def failed(
        cls, reason: FailureReason, error: str, raw_response: Any | None = None
    ) -> "TransactionResult":
        return cls(success=False, error=error, reason=reason, raw_response=raw_response)

    @property
    def not_connected(self) -> bool:
        return self.reason is FailureReason.NOT_CONNECTED


@dataclass(frozen=True)
class Raffle:
    """Snapshot of a raffle as stored by the contract."""

    id: int
    creator: Address
    title: str
    ticket_price: MicroStx
    max_tickets: int
    tickets_sold: int
    prize_pool: MicroStx
    start_time: int
    end_time: int
    winner: Address | None
    status: str

    @property
    def tickets_remaining(self) -> int:
        return max(0, self.max_tickets - self.tickets_sold)


@dataclass(frozen=True)
class AggregateStats:
    """Contract-wide totals."""

    raffle_count: int = 0
    ticket_count: int = 0
    total_prize_pool: MicroStx = 0


@dataclass(frozen=True)
class RaffleOverview:
    """Totals plus the most recent raffles, loaded together."""

    raffle_count: int
    stats: AggregateStats
    raffles: list[Raffle]
