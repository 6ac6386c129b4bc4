# src/zorro/inliner.py
"""
Parameter inlining for display and logging.

Replaces bound-parameter markers in command text with literal values, e.g.

    SELECT * FROM t WHERE id = @id AND name = @name
    {id: 5, name: "Bob"}
    -> SELECT * FROM t WHERE id = 5 AND name = 'Bob'

Best effort: a parameter without a marker in the text is skipped and the text
is left as it was. Never execute the output.
"""

from __future__ import annotations

import datetime as dt
import re
import uuid
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Union

from .types import ParamKind, ParameterBinding

DEFAULT_PREFIXES = "@:?"

QUOTED_KINDS = frozenset({
    ParamKind.ANSI_STRING,
    ParamKind.ANSI_STRING_FIXED_LENGTH,
    ParamKind.STRING,
    ParamKind.STRING_FIXED_LENGTH,
    ParamKind.GUID,
    ParamKind.DATE,
    ParamKind.TIME,
    ParamKind.DATETIME,
    ParamKind.DATETIME2,
    ParamKind.DATETIME_OFFSET,
})

# Identifier characters; a marker followed by one of these is a different name.
_NAME_END = r"(?![0-9A-Za-z_])"

Bindings = Union[Iterable[ParameterBinding], Mapping[str, Any], None]


def kind_for_value(value: Any) -> ParamKind:
    """Infer a ParamKind from a Python value (used for plain mappings)."""
    if isinstance(value, bool):
        return ParamKind.BOOLEAN
    if isinstance(value, int):
        return ParamKind.INT
    if isinstance(value, float):
        return ParamKind.DOUBLE
    if isinstance(value, Decimal):
        return ParamKind.DECIMAL
    if isinstance(value, str):
        return ParamKind.STRING
    if isinstance(value, uuid.UUID):
        return ParamKind.GUID
    if isinstance(value, dt.datetime):
        return ParamKind.DATETIME_OFFSET if value.tzinfo is not None else ParamKind.DATETIME
    if isinstance(value, dt.date):
        return ParamKind.DATE
    if isinstance(value, dt.time):
        return ParamKind.TIME
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ParamKind.BINARY
    return ParamKind.OBJECT


def literal_value(binding: ParameterBinding) -> str:
    if binding.value is None:
        return "NULL"
    text = str(binding.value)
    if binding.kind in QUOTED_KINDS:
        return "'{}'".format(text.replace("'", "''"))
    return text


def _as_bindings(parameters: Bindings) -> List[ParameterBinding]:
    if parameters is None:
        return []
    if isinstance(parameters, Mapping):
        return [ParameterBinding(name, value, kind_for_value(value)) for name, value in parameters.items()]
    return list(parameters)


def find_marker(command_text: str, name: str, prefixes: str = DEFAULT_PREFIXES) -> Optional[str]:
    """
    The marker used for `name` in `command_text`.

    Names that already start with a prefix are their own marker; otherwise the
    first case-insensitive `<prefix><name>` occurrence in the text is used.
    """
    if not name or not prefixes:
        return None
    if name[0] in prefixes:
        return name
    pattern = "[" + re.escape(prefixes) + "]" + re.escape(name)
    m = re.search(pattern, command_text, flags=re.IGNORECASE)
    return m.group(0) if m else None


def inline_parameters(
    command_text: str,
    parameters: Bindings,
    prefixes: str = DEFAULT_PREFIXES,
) -> str:
    """Return command_text with every bound parameter marker replaced by its literal value."""
    bindings = _as_bindings(parameters)
    if not bindings:
        return command_text

    for binding in bindings:
        marker = find_marker(command_text, binding.name, prefixes)
        if not marker:
            continue
        value = literal_value(binding)
        command_text = re.sub(
            re.escape(marker) + _NAME_END,
            lambda _m: value,
            command_text,
            flags=re.IGNORECASE,
        )
    return command_text
