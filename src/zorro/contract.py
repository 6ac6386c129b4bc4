# src/zorro/contract.py
"""
Method descriptor extraction.

Reflects over an interface class (a typing.Protocol or an abc.ABC with abstract
methods) and returns its InterfaceContract: one MethodDescriptor per contract
method, in declaration order, base interfaces first.
"""

from __future__ import annotations

import abc
import inspect
import re
import typing
from typing import Any, Dict, List, Tuple

from .errors import ContractError
from .logging import get_logger
from .types import InterfaceContract, MethodDescriptor, Parameter

logger = get_logger(__name__)

_MODULE_PREFIX = re.compile(r"\b(?:[A-Za-z_]\w*\.)+([A-Za-z_]\w*)")
_INTERFACE_ROOTS = (object, typing.Protocol, typing.Generic, abc.ABC)


def is_interface(obj: Any) -> bool:
    if not inspect.isclass(obj):
        return False
    if getattr(obj, "_is_protocol", False):
        return True
    return isinstance(obj, abc.ABCMeta) and inspect.isabstract(obj)


def type_name(tp: Any) -> str:
    """
    Render an annotation the way it appears in template filenames.

    Plain classes render as their bare name (int, str, datetime); typing
    constructs render with module prefixes removed (Optional[int], list[str]).
    """
    if tp is None or tp is type(None):
        return "None"
    if tp is inspect.Parameter.empty or tp is typing.Any:
        return "Any"
    if isinstance(tp, type) and typing.get_origin(tp) is None:
        return tp.__name__
    if isinstance(tp, str):
        return tp
    return _MODULE_PREFIX.sub(r"\1", repr(tp)).replace("NoneType", "None")


def _interface_classes(interface: type) -> List[type]:
    classes = [c for c in reversed(interface.__mro__) if c not in _INTERFACE_ROOTS]
    return [c for c in classes if is_interface(c)]


def _is_contract_member(owner: type, name: str, value: Any) -> bool:
    if name.startswith("_") or not inspect.isfunction(value):
        return False
    if getattr(owner, "_is_protocol", False):
        return True
    return bool(getattr(value, "__isabstractmethod__", False))


def _resolve_hints(interface: type, func: Any) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(func)
    except Exception as e:
        raise ContractError(
            "ZORRO_CONTRACT_SIGNATURE",
            f"Cannot resolve annotations of {interface.__name__}.{func.__name__}",
            details={"interface": interface.__name__, "method": func.__name__, "error": repr(e)},
            remediation="Make every annotated type importable from the interface's module.",
        ) from e


def _describe_method(interface: type, owner: type, func: Any) -> MethodDescriptor:
    hints = _resolve_hints(interface, func)
    sig = inspect.signature(func)
    params = list(sig.parameters.values())[1:]  # drop self

    parameters: List[Parameter] = []
    for p in params:
        if p.kind is not inspect.Parameter.POSITIONAL_OR_KEYWORD:
            raise ContractError(
                "ZORRO_CONTRACT_SIGNATURE",
                f"{owner.__name__}.{func.__name__}: parameter '{p.name}' must be a plain positional parameter",
                details={"interface": interface.__name__, "method": func.__name__, "parameter": p.name,
                         "kind": p.kind.name},
                remediation="Remove *args, **kwargs, and positional-only or keyword-only markers.",
            )
        annotation = hints.get(p.name, inspect.Parameter.empty)
        parameters.append(
            Parameter(type_name=type_name(annotation), name=p.name, annotation=annotation, default=p.default)
        )

    if "return" in hints:
        return_type = hints["return"]
        if return_type is type(None):
            return_type = None
    else:
        return_type = typing.Any

    return MethodDescriptor(
        declaring_type_name=owner.__name__,
        name=func.__name__,
        parameters=tuple(parameters),
        return_type=return_type,
        return_type_name=type_name(return_type),
    )


def describe_contract(interface: Any) -> InterfaceContract:
    """
    Extract the ordered method descriptors of an interface.

    Raises ContractError for anything that is not an interface class.
    """
    if not is_interface(interface):
        raise ContractError(
            "ZORRO_NOT_AN_INTERFACE",
            "Only interfaces allowed",
            details={"type": getattr(interface, "__name__", type(interface).__name__)},
            remediation="Pass a typing.Protocol class or an abc.ABC with abstract methods.",
        )

    members: Dict[str, Tuple[type, Any]] = {}
    for owner in _interface_classes(interface):
        for name, value in vars(owner).items():
            if _is_contract_member(owner, name, value):
                members[name] = (owner, value)

    if not getattr(interface, "_is_protocol", False):
        abstract = getattr(interface, "__abstractmethods__", frozenset())
        members = {k: v for k, v in members.items() if k in abstract}

    methods = tuple(_describe_method(interface, owner, func) for owner, func in members.values())
    logger.debug("contract_described", interface=interface.__name__, methods=len(methods))
    return InterfaceContract(interface=interface, name=interface.__name__, methods=methods)
