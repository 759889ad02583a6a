"""Configuration containers for contract calls and read-only queries."""

from __future__ import annotations

from dataclasses import dataclass, replace

from ..constants import get_api_url
from ..exceptions import ValidationError

DEFAULT_CONTRACT_NAME = "raffle"
DEFAULT_REQUEST_TIMEOUT = 10.0


@dataclass(frozen=True)
class ContractConfig:
    """The deployed contract and the network it lives on."""

    address: str
    name: str = DEFAULT_CONTRACT_NAME
    network: str = "mainnet"
    api_url: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if not self.address:
            raise ValidationError("Contract address is required", field="address")
        if not self.name:
            raise ValidationError("Contract name is required", field="name")
        try:
            get_api_url(self.network)
        except ValueError as exc:
            raise ValidationError(str(exc), field="network", value=self.network) from exc

    @property
    def identifier(self) -> str:
        return f"{self.address}.{self.name}"

    def with_defaulted_urls(self) -> ContractConfig:
        """Return a copy with the Stacks API URL resolved from the network."""

        api_url = self.api_url or get_api_url(self.network)
        return replace(self, api_url=api_url.rstrip("/"))
