# src/zorro/synthesizer.py
"""
Implementation synthesis.

Turns a contract plus its resolved templates into the body of one Python class.
Each method reproduces the declared signature and runs its template through a
cursor that is always closed on the way out:

    def find_name(self, user_id: int) -> str:
        with _closing(self._connection.cursor()) as _cursor:
            _cursor.execute('SELECT name FROM users WHERE id = :user_id', {'user_id': user_id})
            _row = _cursor.fetchone()
            _result = _row[0] if _row is not None else None
            if _result is None:
                return None
            return _str(_result)

Generated code only uses names it chose itself. Helpers (`closing`, the
converters) are imported under aliases, and locals are suffixed with `_` until
they clear every parameter name, so a parameter called `_cursor` or `int`
still reaches the database unchanged. Parameter defaults are bound into the
module as objects and referenced by name.

Design goals:
- Fixed at generation time: template text is embedded as a literal, conversions
  are chosen once, nothing is looked up per call.
- Deterministic: methods follow contract order, imports are sorted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from .config import ZorroConfig
from .converters import Conversion, converter_for
from .logging import get_logger
from .types import InterfaceContract, MethodDescriptor, SynthesizedSource, TemplateText

logger = get_logger(__name__)

_INDENT = "    "
_CLOSING = ("contextlib", "closing")


@dataclass(frozen=True)
class ModuleNames:
    """Module-level names the generated methods refer to."""

    helpers: Dict[Tuple[str, str], str]    # (module, function) -> alias
    defaults: Dict[Tuple[str, str], str]   # (method, parameter) -> name bound to the default object
    objects: Dict[str, Any]                # default name -> default object


def _unique(base: str, taken: Set[str]) -> str:
    name = base
    while name in taken:
        name += "_"
    taken.add(name)
    return name


def module_names(contract: InterfaceContract) -> ModuleNames:
    taken = {p.name for m in contract.methods for p in m.parameters}
    taken.add(contract.name)

    helpers = {_CLOSING: _unique("_closing", taken)}
    for m in contract.methods:
        converter = converter_for(m)
        key = (converter.source_module, converter.function)
        if converter.source_module and key not in helpers:
            helpers[key] = _unique(f"_{converter.function}", taken)

    # Default expressions are evaluated in the class body, where earlier methods are visible.
    taken.update(m.name for m in contract.methods)
    defaults: Dict[Tuple[str, str], str] = {}
    objects: Dict[str, Any] = {}
    for m in contract.methods:
        for p in m.parameters:
            if p.has_default:
                name = _unique(f"_default_{m.name}_{p.name}", taken)
                defaults[(m.name, p.name)] = name
                objects[name] = p.default
    return ModuleNames(helpers=helpers, defaults=defaults, objects=objects)


def generated_class_name(interface_name: str, marker: str = "I") -> str:
    """Strip one leading marker: IDataStorage -> DataStorage."""
    if marker and interface_name.startswith(marker) and len(interface_name) > len(marker):
        return interface_name[len(marker):]
    return interface_name


def _bind_arguments(descriptor: MethodDescriptor) -> str:
    if not descriptor.parameters:
        return ""
    pairs = ", ".join(f"{p.name!r}: {p.name}" for p in descriptor.parameters)
    return f", {{{pairs}}}"


def synthesize_method(template: TemplateText, names: ModuleNames) -> str:
    descriptor = template.descriptor
    converter = converter_for(descriptor)

    taken = {"self", *(p.name for p in descriptor.parameters), *names.helpers.values()}
    cursor, row, result = (_unique(n, taken) for n in ("_cursor", "_row", "_result"))
    defaults = {
        p.name: names.defaults[(descriptor.name, p.name)] for p in descriptor.parameters if p.has_default
    }

    lines = [
        f"{descriptor.render_def(defaults)}:",
        f"{_INDENT}with {names.helpers[_CLOSING]}(self._connection.cursor()) as {cursor}:",
        f"{_INDENT * 2}{cursor}.execute({template.escaped}{_bind_arguments(descriptor)})",
    ]
    if converter.conversion is not Conversion.VOID:
        lines += [
            f"{_INDENT * 2}{row} = {cursor}.fetchone()",
            f"{_INDENT * 2}{result} = {row}[0] if {row} is not None else None",
        ]
        alias = None
        if converter.conversion is Conversion.CONVERT:
            alias = names.helpers[(converter.source_module, converter.function)]
            lines += [
                f"{_INDENT * 2}if {result} is None:",
                f"{_INDENT * 3}return None",
            ]
        lines.append(f"{_INDENT * 2}return {converter.expression(result, alias)}")
    return "\n".join(_INDENT + line for line in lines)


def compute_imports(contract: InterfaceContract, names: Optional[ModuleNames] = None) -> List[str]:
    """Minimal import block: closing() plus the converters in use, aliased, one line per module."""
    names = names or module_names(contract)
    by_module: Dict[str, List[Tuple[str, str]]] = {}
    for (module, function), alias in names.helpers.items():
        by_module.setdefault(module, []).append((function, alias))

    return [
        f"from {module} import {', '.join(f'{fn} as {alias}' for fn, alias in sorted(by_module[module]))}"
        for module in sorted(by_module)
    ]


def synthesize(
    contract: InterfaceContract,
    templates: Sequence[TemplateText],
    config: Optional[ZorroConfig] = None,
) -> SynthesizedSource:
    """
    Build the class body, import block and name for one contract.

    Raises UnsupportedReturnTypeError before any source is produced if any
    method returns a type outside the conversion table.
    """
    cfg = config or ZorroConfig()
    by_signature = {t.descriptor.canonical_signature: t for t in templates}
    missing = [m.canonical_signature for m in contract.methods if m.canonical_signature not in by_signature]
    if missing:
        raise ValueError(f"templates not resolved for: {', '.join(missing)}")

    names = module_names(contract)
    body = "\n\n".join(synthesize_method(by_signature[m.canonical_signature], names) for m in contract.methods)
    class_name = generated_class_name(contract.name, cfg.interface_marker)

    logger.debug("source_synthesized", interface=contract.name, class_name=class_name, methods=len(contract))
    return SynthesizedSource(
        class_name=class_name,
        imports=compute_imports(contract, names),
        references={contract.name: contract.interface, **names.objects},
        body=body,
        interface_name=contract.name,
    )
