"""STX Raffle client - wallet pairing and contract calls for a Stacks raffle.

This library connects an external Stacks wallet over a WalletConnect-style
pairing protocol, submits signed calls to the raffle contract, and decodes
read-only contract queries into typed records.
"""

from .base import PairingPresenter, PairingProposal, SignClientBase
from .clarity import ABSENT, MALFORMED, decode_envelope, encode
from .config import RaffleClientConfig
from .contract import ContractCallDispatcher, ContractConfig, ContractReader
from .exceptions import (
    NetworkError,
    RaffleClientError,
    SessionError,
    ValidationError,
    WalletRejectedError,
)
from .raffle import RaffleClient
from .types import (
    Address,
    AggregateStats,
    FailureReason,
    MicroStx,
    Raffle,
    RaffleOverview,
    TransactionResult,
    WalletState,
)
from .utils import address_from_account, micro_to_stx, stx_to_micro
from .wallet import (
    EVENT_CONNECTED,
    EVENT_DISCONNECTED,
    EVENT_SESSION_UPDATED,
    PairingClient,
    PairingConfig,
    PairingState,
    SessionRecord,
    SessionStore,
    WalletSession,
)

__version__ = "0.1.0"

__all__ = [
    # Clients
    "RaffleClient",
    "PairingClient",
    "ContractCallDispatcher",
    "ContractReader",
    # Interfaces
    "SignClientBase",
    "PairingPresenter",
    "PairingProposal",
    # Configuration
    "RaffleClientConfig",
    "ContractConfig",
    "PairingConfig",
    # Session state
    "PairingState",
    "SessionRecord",
    "SessionStore",
    "WalletSession",
    "EVENT_CONNECTED",
    "EVENT_DISCONNECTED",
    "EVENT_SESSION_UPDATED",
    # Types
    "Address",
    "AggregateStats",
    "FailureReason",
    "MicroStx",
    "Raffle",
    "RaffleOverview",
    "TransactionResult",
    "WalletState",
    # Codec
    "ABSENT",
    "MALFORMED",
    "decode_envelope",
    "encode",
    # Exceptions
    "RaffleClientError",
    "NetworkError",
    "ValidationError",
    "SessionError",
    "WalletRejectedError",
    # Utility functions
    "stx_to_micro",
    "micro_to_stx",
    "address_from_account",
]
