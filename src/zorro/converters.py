# src/zorro/converters.py
"""
Result conversion policy.

A closed table keyed by return-type identity decides, at synthesis time, how a
method's raw scalar is turned into its declared return type:

- None (void): execute without fetching; no return statement
- object / Any: return the raw scalar unmodified
- int, float, bool, str: the builtin named after the type
- bytes, Decimal, datetime, date, time: the to_* helpers below
- anything else: UnsupportedReturnTypeError

The helpers are imported by generated modules, so they are part of the public API.
A NULL scalar (or no row at all) is returned as None without conversion.
"""

from __future__ import annotations

import datetime as dt
import typing
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from .errors import UnsupportedReturnTypeError
from .types import MethodDescriptor


def to_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(memoryview(value))


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # str() keeps the shortest repr instead of the binary expansion
        return Decimal(str(value))
    return Decimal(value)


def to_datetime(value: Any) -> dt.datetime:
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        return dt.datetime.fromtimestamp(value, tz=dt.timezone.utc)
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    return dt.datetime.fromisoformat(str(value))


def to_date(value: Any) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    text = str(value)
    if len(text) > 10:
        return dt.datetime.fromisoformat(text).date()
    return dt.date.fromisoformat(text)


def to_time(value: Any) -> dt.time:
    if isinstance(value, dt.datetime):
        return value.time()
    if isinstance(value, dt.time):
        return value
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    return dt.time.fromisoformat(str(value))


class Conversion(str, Enum):
    VOID = "VOID"
    RAW = "RAW"
    CONVERT = "CONVERT"


@dataclass(frozen=True)
class ResultConverter:
    conversion: Conversion
    function: Optional[str] = None   # name called in generated code
    module: Optional[str] = None     # None for builtins

    def expression(self, value: str, alias: Optional[str] = None) -> Optional[str]:
        """Source text converting `value`; `alias` is the name the function is bound to."""
        if self.conversion is Conversion.VOID:
            return None
        if self.conversion is Conversion.RAW:
            return value
        return f"{alias or self.function}({value})"

    @property
    def source_module(self) -> Optional[str]:
        if self.conversion is not Conversion.CONVERT:
            return None
        return self.module or "builtins"


_VOID = ResultConverter(Conversion.VOID)
_RAW = ResultConverter(Conversion.RAW)

CONVERTERS: Dict[Any, ResultConverter] = {
    None: _VOID,
    object: _RAW,
    typing.Any: _RAW,
    int: ResultConverter(Conversion.CONVERT, "int"),
    float: ResultConverter(Conversion.CONVERT, "float"),
    bool: ResultConverter(Conversion.CONVERT, "bool"),
    str: ResultConverter(Conversion.CONVERT, "str"),
    bytes: ResultConverter(Conversion.CONVERT, "to_bytes", __name__),
    Decimal: ResultConverter(Conversion.CONVERT, "to_decimal", __name__),
    dt.datetime: ResultConverter(Conversion.CONVERT, "to_datetime", __name__),
    dt.date: ResultConverter(Conversion.CONVERT, "to_date", __name__),
    dt.time: ResultConverter(Conversion.CONVERT, "to_time", __name__),
}


def converter_for(descriptor: MethodDescriptor) -> ResultConverter:
    """Look up the conversion for a method's return type; reject anything unlisted."""
    try:
        return CONVERTERS[descriptor.return_type]
    except (KeyError, TypeError):
        # TypeError: unhashable annotation objects
        raise UnsupportedReturnTypeError(descriptor.canonical_signature, descriptor.return_type_name) from None
