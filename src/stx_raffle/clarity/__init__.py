"""Clarity value codec: typed arguments in, decoded envelopes out."""

from .c32 import AddressVersion, c32_address, c32_address_decode
from .codec import (
    ClarityType,
    ClarityValue,
    bool_cv,
    buffer_cv,
    deserialize_cv,
    encode,
    err_cv,
    int_cv,
    list_cv,
    make_cv,
    none_cv,
    ok_cv,
    principal_cv,
    serialize_cv,
    some_cv,
    string_ascii_cv,
    string_utf8_cv,
    to_hex,
    tuple_cv,
    uint_cv,
)
from .envelope import (
    ABSENT,
    MALFORMED,
    ClarityTuple,
    decode_envelope,
    is_known,
    known_bool,
    known_int,
    known_optional_text,
    known_text,
)

__all__ = [
    "ABSENT",
    "MALFORMED",
    "AddressVersion",
    "ClarityTuple",
    "ClarityType",
    "ClarityValue",
    "bool_cv",
    "buffer_cv",
    "c32_address",
    "c32_address_decode",
    "decode_envelope",
    "deserialize_cv",
    "encode",
    "err_cv",
    "int_cv",
    "is_known",
    "known_bool",
    "known_int",
    "known_optional_text",
    "known_text",
    "list_cv",
    "make_cv",
    "none_cv",
    "ok_cv",
    "principal_cv",
    "serialize_cv",
    "some_cv",
    "string_ascii_cv",
    "string_utf8_cv",
    "to_hex",
    "tuple_cv",
    "uint_cv",
]
