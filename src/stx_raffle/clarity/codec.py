"""Clarity value construction and wire (de)serialisation."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from web3 import Web3

from ..exceptions import ValidationError
from .c32 import c32_address, c32_address_decode

logger = logging.getLogger(__name__)

MAX_UINT = 2**128 - 1
MIN_INT = -(2**127)
MAX_INT = 2**127 - 1
MAX_CONTRACT_NAME_LENGTH = 128
MAX_DEPTH = 32


class ClarityType(IntEnum):
    """Clarity wire type prefixes."""

    INT = 0x00
    UINT = 0x01
    BUFFER = 0x02
    BOOL_TRUE = 0x03
    BOOL_FALSE = 0x04
    STANDARD_PRINCIPAL = 0x05
    CONTRACT_PRINCIPAL = 0x06
    RESPONSE_OK = 0x07
    RESPONSE_ERR = 0x08
    OPTIONAL_NONE = 0x09
    OPTIONAL_SOME = 0x0A
    LIST = 0x0B
    TUPLE = 0x0C
    STRING_ASCII = 0x0D
    STRING_UTF8 = 0x0E


@dataclass(frozen=True)
class ClarityValue:
    """A typed Clarity value ready for serialisation."""

    kind: ClarityType
    value: Any = None


# ----------------------------------------------------------------------
# Constructors
# ----------------------------------------------------------------------
def uint_cv(value: int) -> ClarityValue:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("uint must be an integer", field="uint", value=value)
    if not 0 <= value <= MAX_UINT:
        raise ValidationError("uint out of range", field="uint", value=value)
    return ClarityValue(ClarityType.UINT, value)


def int_cv(value: int) -> ClarityValue:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("int must be an integer", field="int", value=value)
    if not MIN_INT <= value <= MAX_INT:
        raise ValidationError("int out of range", field="int", value=value)
    return ClarityValue(ClarityType.INT, value)


def bool_cv(value: bool) -> ClarityValue:
    return ClarityValue(ClarityType.BOOL_TRUE if value else ClarityType.BOOL_FALSE, bool(value))


def buffer_cv(value: bytes | bytearray | str) -> ClarityValue:
    if isinstance(value, str):
        try:
            value = Web3.to_bytes(hexstr=value)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValidationError("buffer must be hex", field="buffer", value=value) from exc
    return ClarityValue(ClarityType.BUFFER, bytes(value))


def string_ascii_cv(value: str) -> ClarityValue:
    if not isinstance(value, str):
        raise ValidationError("string-ascii must be text", field="string-ascii", value=value)
    if not value.isascii():
        raise ValidationError(
            "string-ascii only accepts ASCII characters", field="string-ascii", value=value
        )
    return ClarityValue(ClarityType.STRING_ASCII, value)


def string_utf8_cv(value: str) -> ClarityValue:
    if not isinstance(value, str):
        raise ValidationError("string-utf8 must be text", field="string-utf8", value=value)
    return ClarityValue(ClarityType.STRING_UTF8, value)


def principal_cv(value: str) -> ClarityValue:
    """Build a standard or contract principal from ``ADDRESS[.contract-name]``."""

    if not isinstance(value, str):
        raise ValidationError("principal must be text", field="principal", value=value)

    address, separator, contract_name = value.partition(".")
    c32_address_decode(address)
    if not separator:
        return ClarityValue(ClarityType.STANDARD_PRINCIPAL, address)

    if (
        not contract_name
        or not contract_name.isascii()
        or len(contract_name) > MAX_CONTRACT_NAME_LENGTH
    ):
        raise ValidationError("Invalid contract name", field="principal", value=value)
    return ClarityValue(ClarityType.CONTRACT_PRINCIPAL, f"{address}.{contract_name}")


def none_cv() -> ClarityValue:
    return ClarityValue(ClarityType.OPTIONAL_NONE)


def some_cv(inner: ClarityValue) -> ClarityValue:
    return ClarityValue(ClarityType.OPTIONAL_SOME, inner)


def ok_cv(inner: ClarityValue) -> ClarityValue:
    return ClarityValue(ClarityType.RESPONSE_OK, inner)


def err_cv(inner: ClarityValue) -> ClarityValue:
    return ClarityValue(ClarityType.RESPONSE_ERR, inner)


def list_cv(items: Sequence[ClarityValue]) -> ClarityValue:
    return ClarityValue(ClarityType.LIST, tuple(items))


def tuple_cv(fields: Mapping[str, ClarityValue]) -> ClarityValue:
    return ClarityValue(ClarityType.TUPLE, dict(fields))


_KIND_CONSTRUCTORS = {
    "uint": uint_cv,
    "int": int_cv,
    "bool": bool_cv,
    "buffer": buffer_cv,
    "string-ascii": string_ascii_cv,
    "string-utf8": string_utf8_cv,
    "principal": principal_cv,
}


def make_cv(value: Any, kind: str) -> ClarityValue:
    """Build a Clarity value for a scalar ``kind`` such as ``"uint"``."""

    constructor = _KIND_CONSTRUCTORS.get(kind)
    if constructor is None:
        raise ValidationError(f"Unsupported Clarity kind: {kind}", field="kind", value=kind)
    return constructor(value)


def encode(value: Any, kind: str) -> str:
    """Serialise ``value`` as ``kind`` and render it as 0x-prefixed hex."""

    return to_hex(make_cv(value, kind))


def to_hex(cv: ClarityValue) -> str:
    return Web3.to_hex(serialize_cv(cv))


# ----------------------------------------------------------------------
# Serialisation
# ----------------------------------------------------------------------
def _length_prefixed(kind: ClarityType, payload: bytes) -> bytes:
    return bytes([kind]) + len(payload).to_bytes(4, "big") + payload


def _principal_bytes(address: str) -> bytes:
    version, hash160 = c32_address_decode(address)
    return bytes([version]) + hash160


def serialize_cv(cv: ClarityValue) -> bytes:
    kind = cv.kind
    prefix = bytes([kind])

    if kind is ClarityType.INT:
        return prefix + cv.value.to_bytes(16, "big", signed=True)
    if kind is ClarityType.UINT:
        return prefix + cv.value.to_bytes(16, "big")
    if kind is ClarityType.BUFFER:
        return _length_prefixed(kind, cv.value)
    if kind in (ClarityType.BOOL_TRUE, ClarityType.BOOL_FALSE, ClarityType.OPTIONAL_NONE):
        return prefix
    if kind is ClarityType.STANDARD_PRINCIPAL:
        return prefix + _principal_bytes(cv.value)
    if kind is ClarityType.CONTRACT_PRINCIPAL:
        address, contract_name = cv.value.split(".", 1)
        name = contract_name.encode("ascii")
        return prefix + _principal_bytes(address) + bytes([len(name)]) + name
    if kind in (ClarityType.RESPONSE_OK, ClarityType.RESPONSE_ERR, ClarityType.OPTIONAL_SOME):
        return prefix + serialize_cv(cv.value)
    if kind is ClarityType.LIST:
        items = b"".join(serialize_cv(item) for item in cv.value)
        return prefix + len(cv.value).to_bytes(4, "big") + items
    if kind is ClarityType.TUPLE:
        out = prefix + len(cv.value).to_bytes(4, "big")
        for name in sorted(cv.value):
            encoded_name = name.encode("ascii")
            out += bytes([len(encoded_name)]) + encoded_name + serialize_cv(cv.value[name])
        return out
    if kind is ClarityType.STRING_ASCII:
        return _length_prefixed(kind, cv.value.encode("ascii"))
    if kind is ClarityType.STRING_UTF8:
        return _length_prefixed(kind, cv.value.encode("utf-8"))

    raise ValidationError(f"Cannot serialise Clarity kind {kind!r}", field="kind", value=kind)


# ----------------------------------------------------------------------
# Deserialisation
# ----------------------------------------------------------------------
class _ByteReader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._offset = 0

    def read(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._data):
            raise ValidationError(
                "Unexpected end of Clarity value",
                field="raw",
                details={"offset": self._offset, "wanted": size},
            )
        chunk = self._data[self._offset : end]
        self._offset = end
        return chunk

    def read_u8(self) -> int:
        return self.read(1)[0]

    def read_u32(self) -> int:
        return int.from_bytes(self.read(4), "big")

    @property
    def exhausted(self) -> bool:
        return self._offset == len(self._data)


def deserialize_cv(raw: bytes | bytearray | str) -> dict[str, Any]:
    """Parse Clarity wire bytes into a tagged envelope node.

    The node shape is ``{"type": <type string>, "value": ...}``; responses also
    carry ``"success"``. Integers are rendered as decimal strings and buffers as
    0x-prefixed hex, matching the JSON form produced by Stacks tooling.

    Raises:
        ValidationError: If the payload is not a single well-formed Clarity value
    """

    if isinstance(raw, str):
        try:
            raw = Web3.to_bytes(hexstr=raw)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValidationError("Invalid hex payload", field="raw", value=raw) from exc

    reader = _ByteReader(bytes(raw))
    node = _read_node(reader, 0)
    if not reader.exhausted:
        raise ValidationError("Trailing bytes after Clarity value", field="raw")
    return node


def _read_principal(reader: _ByteReader) -> str:
    version = reader.read_u8()
    hash160 = reader.read(20)
    return c32_address(version, hash160)


def _read_node(reader: _ByteReader, depth: int) -> dict[str, Any]:
    if depth > MAX_DEPTH:
        raise ValidationError("Clarity value nested too deeply", field="raw")

    prefix = reader.read_u8()
    try:
        kind = ClarityType(prefix)
    except ValueError as exc:
        raise ValidationError("Unknown Clarity type prefix", field="raw", value=prefix) from exc

    if kind is ClarityType.INT:
        return {"type": "int", "value": str(int.from_bytes(reader.read(16), "big", signed=True))}
    if kind is ClarityType.UINT:
        return {"type": "uint", "value": str(int.from_bytes(reader.read(16), "big"))}
    if kind is ClarityType.BUFFER:
        data = reader.read(reader.read_u32())
        return {"type": f"(buff {len(data)})", "value": Web3.to_hex(data)}
    if kind is ClarityType.BOOL_TRUE:
        return {"type": "bool", "value": True}
    if kind is ClarityType.BOOL_FALSE:
        return {"type": "bool", "value": False}
    if kind is ClarityType.STANDARD_PRINCIPAL:
        return {"type": "principal", "value": _read_principal(reader)}
    if kind is ClarityType.CONTRACT_PRINCIPAL:
        address = _read_principal(reader)
        name = reader.read(reader.read_u8()).decode("ascii", "replace")
        return {"type": "principal", "value": f"{address}.{name}"}
    if kind is ClarityType.RESPONSE_OK:
        inner = _read_node(reader, depth + 1)
        return {"type": f"(response {inner['type']} UnknownType)", "value": inner, "success": True}
    if kind is ClarityType.RESPONSE_ERR:
        inner = _read_node(reader, depth + 1)
        return {"type": f"(response UnknownType {inner['type']})", "value": inner, "success": False}
    if kind is ClarityType.OPTIONAL_NONE:
        return {"type": "(optional none)", "value": None}
    if kind is ClarityType.OPTIONAL_SOME:
        inner = _read_node(reader, depth + 1)
        return {"type": f"(optional {inner['type']})", "value": inner}
    if kind is ClarityType.LIST:
        items = [_read_node(reader, depth + 1) for _ in range(reader.read_u32())]
        item_type = items[0]["type"] if items else "UnknownType"
        return {"type": f"(list {len(items)} {item_type})", "value": items}
    if kind is ClarityType.TUPLE:
        fields: dict[str, Any] = {}
        for _ in range(reader.read_u32()):
            name = reader.read(reader.read_u8()).decode("ascii", "replace")
            fields[name] = _read_node(reader, depth + 1)
        signature = " ".join(f"({name} {node['type']})" for name, node in fields.items())
        return {"type": f"(tuple {signature})", "value": fields}
    if kind is ClarityType.STRING_ASCII:
        data = reader.read(reader.read_u32())
        return {"type": f"(string-ascii {len(data)})", "value": data.decode("ascii", "replace")}

    data = reader.read(reader.read_u32())
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError("Invalid UTF-8 in string-utf8", field="raw") from exc
    return {"type": f"(string-utf8 {len(data)})", "value": text}
