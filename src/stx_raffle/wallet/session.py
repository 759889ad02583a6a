"""In-memory view of an approved pairing session."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..constants import STACKS_NAMESPACE
from ..utils import address_from_account


def _strings(values: Any) -> tuple[str, ...]:
    if not isinstance(values, list | tuple):
        return ()
    return tuple(value for value in values if isinstance(value, str))


@dataclass(frozen=True)
class WalletSession:
    """Accounts, methods and chains a wallet authorised for one topic."""

    topic: str
    accounts: tuple[str, ...] = ()
    methods: tuple[str, ...] = ()
    chains: tuple[str, ...] = ()
    expiry: int | None = None

    @classmethod
    def from_struct(cls, struct: Any) -> WalletSession | None:
        """Build a session from a sign client session struct, or ``None`` if unusable."""

        if not isinstance(struct, Mapping):
            return None

        topic = struct.get("topic")
        if not isinstance(topic, str) or not topic:
            return None

        namespaces = struct.get("namespaces")
        stacks = namespaces.get(STACKS_NAMESPACE) if isinstance(namespaces, Mapping) else None
        if not isinstance(stacks, Mapping):
            stacks = {}

        accounts = _strings(stacks.get("accounts"))
        chains = _strings(stacks.get("chains"))
        if not chains:
            derived: list[str] = []
            for account in accounts:
                chain = ":".join(account.split(":")[:2])
                if chain.count(":") == 1 and chain not in derived:
                    derived.append(chain)
            chains = tuple(derived)

        expiry = struct.get("expiry")
        return cls(
            topic=topic,
            accounts=accounts,
            methods=_strings(stacks.get("methods")),
            chains=chains,
            expiry=expiry if isinstance(expiry, int) and not isinstance(expiry, bool) else None,
        )

    @property
    def address(self) -> str | None:
        if not self.accounts:
            return None
        return address_from_account(self.accounts[0])

    @property
    def chain_id(self) -> str | None:
        return self.chains[0] if self.chains else None
