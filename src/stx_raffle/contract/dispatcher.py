"""Signed contract-call dispatch through the paired wallet."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..clarity import ClarityValue, to_hex
from ..constants import METHOD_CONTRACT_CALL
from ..exceptions import RaffleClientError, WalletRejectedError
from ..types import FailureReason, TransactionResult
from ..wallet.pairing import PairingClient
from .config import ContractConfig

logger = logging.getLogger(__name__)


class ContractCallDispatcher:
    """Encode contract calls and submit them for signing."""

    def __init__(self, pairing: PairingClient, contract: ContractConfig) -> None:
        self._pairing = pairing
        self._contract = contract

    async def invoke(self, function_name: str, args: Sequence[ClarityValue]) -> TransactionResult:
        session = self._pairing.current_session
        if session is None:
            return TransactionResult.failed(
                FailureReason.NOT_CONNECTED, "No active WalletConnect session"
            )

        # Only an address the live session authorises may sign.
        address = session.address
        if not address:
            return TransactionResult.failed(FailureReason.NOT_CONNECTED, "No address found")

        try:
            function_args = [to_hex(arg) for arg in args]
        except (RaffleClientError, AttributeError, TypeError, ValueError) as exc:
            logger.error("Failed to encode arguments for %s: %s", function_name, exc)
            return TransactionResult.failed(FailureReason.INVALID_ARGUMENT, str(exc))

        params = {
            "pubkey": address,
            "contractAddress": self._contract.address,
            "contractName": self._contract.name,
            "functionName": function_name,
            "functionArgs": function_args,
            "network": self._contract.network,
            "postConditions": [],
        }
        logger.info("Dispatching %s on %s", function_name, self._contract.identifier)

        try:
            result = await self._pairing.request(METHOD_CONTRACT_CALL, params)
        except WalletRejectedError as exc:
            logger.warning("Contract call %s rejected: %s", function_name, exc.message)
            return TransactionResult.failed(
                FailureReason.REJECTED, exc.message or "Transaction rejected"
            )
        except Exception as exc:
            logger.error("Contract call error: %s", exc)
            return TransactionResult.failed(FailureReason.TRANSPORT, str(exc) or "Transaction failed")

        tx_id = _extract_tx_id(result)
        if tx_id is None:
            logger.warning("Contract call %s returned no transaction id", function_name)
            return TransactionResult.failed(
                FailureReason.REJECTED, "Transaction cancelled or failed", raw_response=result
            )

        logger.info("Transaction submitted for %s txid=%s", function_name, tx_id)
        return TransactionResult.ok(tx_id, raw_response=result)


def _extract_tx_id(result: Any) -> str | None:
    if not isinstance(result, Mapping):
        return None
    tx_id = result.get("txId") or result.get("txid")
    return tx_id if isinstance(tx_id, str) and tx_id else None
