# src/zorro/templates.py
"""
Query template resolution.

Each contract method maps to exactly one file, named after its canonical
signature plus the template extension:

    IDataStorage.get_count().sql
    IDataStorage.find_name(int user_id).sql

Files live in the configured template directory (default: the directory of the
running program). Every template of a contract is loaded before synthesis; a
single missing file aborts the whole contract.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .config import ZorroConfig
from .errors import TemplateNotFoundError
from .logging import get_logger
from .types import InterfaceContract, MethodDescriptor, TemplateText

logger = get_logger(__name__)


@dataclass(frozen=True)
class TemplateStatus:
    signature: str
    path: Path
    exists: bool


def template_filename(descriptor: MethodDescriptor, extension: str = ".sql") -> str:
    return f"{descriptor.canonical_signature}{extension}"


def template_path(descriptor: MethodDescriptor, config: Optional[ZorroConfig] = None) -> Path:
    cfg = config or ZorroConfig()
    return cfg.resolve_template_dir() / template_filename(descriptor, cfg.template_extension)


def escape_template(text: str) -> str:
    """Render template text as a Python string literal for the generated source."""
    return repr(text)


def load_template(descriptor: MethodDescriptor, config: Optional[ZorroConfig] = None) -> TemplateText:
    path = template_path(descriptor, config)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        logger.warning("template_not_found", signature=descriptor.canonical_signature, path=str(path))
        raise TemplateNotFoundError(descriptor.canonical_signature, str(path)) from e
    return TemplateText(descriptor=descriptor, path=path, raw=raw, escaped=escape_template(raw))


def resolve_templates(contract: InterfaceContract, config: Optional[ZorroConfig] = None) -> List[TemplateText]:
    """Load every template of the contract, in contract order."""
    templates = [load_template(m, config) for m in contract.methods]
    logger.debug("templates_resolved", interface=contract.name, count=len(templates))
    return templates


def required_templates(contract: InterfaceContract, config: Optional[ZorroConfig] = None) -> List[TemplateStatus]:
    out: List[TemplateStatus] = []
    for m in contract.methods:
        path = template_path(m, config)
        out.append(TemplateStatus(signature=m.canonical_signature, path=path, exists=path.is_file()))
    return out
