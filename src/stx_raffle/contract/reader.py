"""Read-only contract queries against the Stacks node API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

import requests

from ..clarity import ABSENT, MALFORMED, ClarityValue, decode_envelope, deserialize_cv, to_hex
from ..exceptions import NetworkError, RaffleClientError
from .config import ContractConfig

logger = logging.getLogger(__name__)


class ContractReader:
    """Call read-only contract functions and decode their results.

    Read-only calls need a sender principal but no signature, so the
    contract's own address is used as the sender.
    """

    def __init__(
        self,
        contract: ContractConfig,
        session: requests.Session | None = None,
    ) -> None:
        self._contract = contract.with_defaulted_urls()
        self._owns_session = session is None
        self._session = session or requests.Session()

    @property
    def contract(self) -> ContractConfig:
        return self._contract

    async def query(self, function_name: str, args: Sequence[ClarityValue] = ()) -> Any:
        """Return the decoded result, or ``ABSENT`` when no data is available."""

        try:
            body = {
                "sender": self._contract.address,
                "arguments": [to_hex(arg) for arg in args],
            }
            payload = await asyncio.to_thread(self._post, function_name, body)
            decoded = decode_envelope(self._parse(function_name, payload))
        except (RaffleClientError, requests.RequestException, ValueError) as exc:
            logger.error("Read error for %s: %s", function_name, exc)
            return ABSENT

        if decoded is MALFORMED:
            logger.warning("Read of %s returned an undecodable value", function_name)
            return ABSENT
        return decoded

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _endpoint(self, function_name: str) -> str:
        contract = self._contract
        return (
            f"{contract.api_url}/v2/contracts/call-read/"
            f"{contract.address}/{contract.name}/{function_name}"
        )

    def _post(self, function_name: str, body: Mapping[str, Any]) -> Any:
        url = self._endpoint(function_name)
        response = self._session.post(
            url,
            json=body,
            timeout=self._contract.request_timeout,
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()
        return response.json()

    def _parse(self, function_name: str, payload: Any) -> dict[str, Any]:
        if not isinstance(payload, Mapping):
            raise NetworkError("Unexpected read-only response", endpoint=function_name)

        if payload.get("okay") is not True:
            raise NetworkError(
                f"Read-only call rejected: {payload.get('cause', 'unknown cause')}",
                endpoint=function_name,
                details=dict(payload),
            )

        result = payload.get("result")
        if not isinstance(result, str):
            raise NetworkError("Read-only response missing result", endpoint=function_name)
        return deserialize_cv(result)
