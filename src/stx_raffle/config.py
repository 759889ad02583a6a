"""Top-level configuration for the raffle client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .contract.config import DEFAULT_CONTRACT_NAME, DEFAULT_REQUEST_TIMEOUT, ContractConfig
from .exceptions import ValidationError
from .wallet.config import PairingConfig


@dataclass(frozen=True)
class RaffleClientConfig:
    """Aggregated configuration used to construct :class:`RaffleClient`."""

    contract: ContractConfig
    pairing: PairingConfig = field(default_factory=PairingConfig)

    def __post_init__(self) -> None:
        if self.contract.network != self.pairing.network:
            raise ValidationError(
                "Contract and pairing networks differ",
                field="network",
                value=(self.contract.network, self.pairing.network),
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RaffleClientConfig:
        """Build a config from ``STX_RAFFLE_*`` and ``WALLETCONNECT_PROJECT_ID``."""

        env = os.environ if environ is None else environ

        address = env.get("STX_RAFFLE_CONTRACT_ADDRESS")
        if not address:
            raise ValidationError(
                "STX_RAFFLE_CONTRACT_ADDRESS not found in environment",
                field="STX_RAFFLE_CONTRACT_ADDRESS",
            )

        network = env.get("STX_RAFFLE_NETWORK", "mainnet").lower()
        timeout = env.get("STX_RAFFLE_REQUEST_TIMEOUT")
        try:
            request_timeout = float(timeout) if timeout else DEFAULT_REQUEST_TIMEOUT
        except ValueError as exc:
            raise ValidationError(
                "STX_RAFFLE_REQUEST_TIMEOUT must be a number",
                field="STX_RAFFLE_REQUEST_TIMEOUT",
                value=timeout,
            ) from exc

        session_path = env.get("STX_RAFFLE_SESSION_PATH")

        return cls(
            contract=ContractConfig(
                address=address,
                name=env.get("STX_RAFFLE_CONTRACT_NAME") or DEFAULT_CONTRACT_NAME,
                network=network,
                api_url=env.get("STX_RAFFLE_API_URL") or None,
                request_timeout=request_timeout,
            ),
            pairing=PairingConfig(
                project_id=env.get("WALLETCONNECT_PROJECT_ID", ""),
                network=network,
                storage_path=Path(session_path) if session_path else None,
            ),
        )
