"""
Engine config loading for zorro.

Loads YAML/JSON config files and returns a typed config object.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


@dataclass(frozen=True)
class ZorroConfig:
    """Settings shared by the generation engine, the inliner and the CLI."""

    template_dir: Optional[str] = None    # None -> directory of the running program
    template_extension: str = ".sql"
    interface_marker: str = "I"           # stripped from interface names, e.g. IDataStorage -> DataStorage
    param_prefixes: str = "@:?"
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> ZorroConfig:
        template_dir = d.get("template_dir")
        param_prefixes = str(d.get("param_prefixes", "@:?") or "")
        if not param_prefixes:
            raise ValueError("param_prefixes must name at least one marker character, e.g. '@:?'")
        return cls(
            template_dir=str(template_dir) if template_dir else None,
            template_extension=str(d.get("template_extension", ".sql")),
            interface_marker=str(d.get("interface_marker", "I")),
            param_prefixes=param_prefixes,
            log_level=str(d.get("log_level", "WARNING")).upper(),
        )

    def resolve_template_dir(self) -> Path:
        if self.template_dir:
            return Path(self.template_dir)
        return program_dir()


def program_dir() -> Path:
    """Directory of the running program; cwd for interactive sessions."""
    entry = sys.argv[0] if sys.argv else ""
    if not entry or entry == "-c":
        return Path.cwd()
    return Path(entry).resolve().parent


def load_config(path: str) -> ZorroConfig:
    """
    Load a zorro configuration from a YAML or JSON file.

    The file must contain a mapping. Missing keys fall back to the defaults.
    """
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    obj = yaml.safe_load(text) or {}
    if not isinstance(obj, dict):
        raise ValueError(f"Config file must be a YAML/JSON object, got {type(obj).__name__}")
    return ZorroConfig.from_dict(obj)
