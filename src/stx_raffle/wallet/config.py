"""Configuration containers for the wallet pairing client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..constants import SESSION_SLOT, get_chain_id
from ..exceptions import ValidationError

DEFAULT_STORAGE_DIR = Path.home() / ".stx_raffle"

DEFAULT_METADATA: Mapping[str, Any] = {
    "name": "STX Raffle",
    "description": "Provably fair lottery system on Stacks",
    "url": "https://localhost:3001",
    "icons": ["https://avatars.githubusercontent.com/u/45615063"],
}


@dataclass(frozen=True)
class PairingConfig:
    """Settings for the sign client and the persisted session slot."""

    project_id: str = ""
    network: str = "mainnet"
    metadata: Mapping[str, Any] = field(default_factory=lambda: dict(DEFAULT_METADATA))
    storage_path: Path | None = None

    def __post_init__(self) -> None:
        try:
            get_chain_id(self.network)
        except ValueError as exc:
            raise ValidationError(str(exc), field="network", value=self.network) from exc

    @property
    def chain_id(self) -> str:
        return get_chain_id(self.network)

    def resolved_storage_path(self) -> Path:
        """Return the session slot file, defaulting under the user's home."""

        if self.storage_path is not None:
            return Path(self.storage_path)
        return DEFAULT_STORAGE_DIR / f"{SESSION_SLOT}.json"
