from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import GenerationFailedError


class Stage(str, Enum):
    DESCRIBE_CONTRACT = "DESCRIBE_CONTRACT"
    RESOLVE_TEMPLATES = "RESOLVE_TEMPLATES"
    SYNTHESIZE_SOURCE = "SYNTHESIZE_SOURCE"
    COMPILE = "COMPILE"
    LOAD = "LOAD"
    READY = "READY"
    FAILED = "FAILED"


@dataclass(frozen=True)
class Parameter:
    type_name: str  # rendered annotation, e.g. "int", "Optional[str]"
    name: str
    annotation: Any = None
    default: Any = inspect.Parameter.empty

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty

    def render(self) -> str:
        return f"{self.type_name} {self.name}"


@dataclass(frozen=True)
class MethodDescriptor:
    declaring_type_name: str
    name: str
    parameters: Tuple[Parameter, ...]
    return_type: Any
    return_type_name: str

    @property
    def is_void(self) -> bool:
        return self.return_type is None

    @property
    def canonical_signature(self) -> str:
        """Template load key: ``DeclaringType.name(type1 name1, type2 name2)``."""
        params = ", ".join(p.render() for p in self.parameters)
        return f"{self.declaring_type_name}.{self.name}({params})"

    @property
    def full_signature(self) -> str:
        return self.render_def()

    def render_def(self, defaults: Optional[Mapping[str, str]] = None) -> str:
        """
        The `def` line of the implementation.

        `defaults` maps a parameter name to the module-level name holding its
        default object; parameters with a default need an entry.
        """
        params = ""
        for p in self.parameters:
            params += f", {p.name}: {p.type_name}"
            if p.has_default:
                params += f" = {(defaults or {}).get(p.name, '...')}"
        return f"def {self.name}(self{params}) -> {self.return_type_name}"


@dataclass(frozen=True)
class InterfaceContract:
    interface: type
    name: str
    methods: Tuple[MethodDescriptor, ...]

    def __len__(self) -> int:
        return len(self.methods)


@dataclass(frozen=True)
class TemplateText:
    descriptor: MethodDescriptor
    path: Path
    raw: str
    escaped: str  # Python string literal form of raw


@dataclass(frozen=True)
class SynthesizedSource:
    class_name: str
    imports: List[str]
    references: Dict[str, Any]  # names bound into the module namespace
    body: str
    interface_name: str = ""    # key of the interface in references
    module_name: str = ""
    text: str = ""


@dataclass(frozen=True)
class Diagnostic:
    id: str
    message: str
    severity: str = "error"
    line: Optional[int] = None


@dataclass
class GenerationResult:
    stage: Stage
    instance: Any = None
    source: Optional[SynthesizedSource] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)
    failed_stage: Optional[Stage] = None  # COMPILE or LOAD when stage is FAILED

    @property
    def ok(self) -> bool:
        return self.stage is Stage.READY

    def raise_for_failure(self) -> Any:
        if not self.ok:
            name = self.source.class_name if self.source else "<unknown>"
            raise GenerationFailedError(name, self.diagnostics)
        return self.instance


class ParamKind(str, Enum):
    """Declared kind of a bound parameter (mirrors the usual DB type families)."""

    ANSI_STRING = "ANSI_STRING"
    ANSI_STRING_FIXED_LENGTH = "ANSI_STRING_FIXED_LENGTH"
    STRING = "STRING"
    STRING_FIXED_LENGTH = "STRING_FIXED_LENGTH"
    GUID = "GUID"
    DATE = "DATE"
    TIME = "TIME"
    DATETIME = "DATETIME"
    DATETIME2 = "DATETIME2"
    DATETIME_OFFSET = "DATETIME_OFFSET"
    BOOLEAN = "BOOLEAN"
    INT = "INT"
    DECIMAL = "DECIMAL"
    DOUBLE = "DOUBLE"
    BINARY = "BINARY"
    OBJECT = "OBJECT"


@dataclass(frozen=True)
class ParameterBinding:
    name: str
    value: Any
    kind: ParamKind = ParamKind.OBJECT
