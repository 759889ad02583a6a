"""Decoding of tagged Clarity envelopes into plain Python values."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from web3 import Web3

logger = logging.getLogger(__name__)

MAX_DEPTH = 32

_NODE_KEYS = frozenset({"type", "value", "success"})


class _Sentinel:
    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


ABSENT = _Sentinel("ABSENT")
"""An optional with no value, or an ``err`` response."""

MALFORMED = _Sentinel("MALFORMED")
"""A node whose shape could not be understood."""


class ClarityTuple(dict):
    """A decoded Clarity tuple; its values are already decoded."""


def is_known(value: Any) -> bool:
    return value is not ABSENT and value is not MALFORMED


def known_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value


def known_text(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def known_bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def known_optional_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def decode_envelope(raw: Any) -> Any:
    """Unwrap a tagged envelope into ints, text, bools, bytes, lists and tuples.

    Absent optionals become ``ABSENT``; anything unexpected becomes
    ``MALFORMED``. Already-decoded values pass through unchanged, so decoding
    twice is the same as decoding once. This function never raises.
    """

    try:
        return _decode(raw, 0)
    except Exception as exc:
        logger.debug("Envelope decoding failed: %s", exc)
        return MALFORMED


def _is_node(value: Mapping) -> bool:
    return isinstance(value.get("type"), str) and "value" in value and set(value) <= _NODE_KEYS


def _decode(value: Any, depth: int) -> Any:
    if depth > MAX_DEPTH:
        return MALFORMED

    if value is ABSENT or value is MALFORMED:
        return value

    if isinstance(value, bool | int | str | bytes):
        return value

    if isinstance(value, ClarityTuple):
        return value

    if isinstance(value, list | tuple):
        return [_decode(item, depth + 1) for item in value]

    if isinstance(value, Mapping):
        if _is_node(value):
            return _decode_node(value, depth)
        return _decode_fields(value, depth)

    return MALFORMED


def _decode_fields(fields: Mapping, depth: int) -> Any:
    if not all(isinstance(key, str) for key in fields):
        return MALFORMED
    return ClarityTuple((key, _decode(item, depth + 1)) for key, item in fields.items())


def _parse_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 10)
        except ValueError:
            return None
    return None


def _decode_node(node: Mapping, depth: int) -> Any:
    type_name = node["type"].lstrip("(").split(" ", 1)[0].rstrip(")")
    value = node["value"]

    if type_name in ("uint", "int"):
        number = _parse_int(value)
        if number is None or (type_name == "uint" and number < 0):
            return MALFORMED
        return number

    if type_name == "bool":
        return value if isinstance(value, bool) else MALFORMED

    if type_name in ("principal", "string-ascii", "string-utf8"):
        return value if isinstance(value, str) else MALFORMED

    if type_name == "buff":
        if isinstance(value, bytes):
            return value
        if isinstance(value, str):
            try:
                return Web3.to_bytes(hexstr=value)  # type: ignore[arg-type]
            except (TypeError, ValueError):
                return MALFORMED
        return MALFORMED

    if type_name == "optional":
        if value is None:
            return ABSENT
        return _decode(value, depth + 1)

    if type_name == "response":
        success = node.get("success")
        if success is True:
            return _decode(value, depth + 1)
        if success is False:
            logger.debug("Contract returned an err response: %r", value)
            return ABSENT
        return MALFORMED

    if type_name == "tuple":
        if not isinstance(value, Mapping):
            return MALFORMED
        return _decode_fields(value, depth)

    if type_name == "list":
        if not isinstance(value, list | tuple):
            return MALFORMED
        return [_decode(item, depth + 1) for item in value]

    return MALFORMED
