# src/zorro/cli.py
from __future__ import annotations

import argparse
import importlib
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .config import ZorroConfig, load_config
from .contract import describe_contract
from .errors import ExitCode, ZorroException, ZorroProblem, problem_to_dict
from .inliner import inline_parameters
from .loader import render_module
from .logging import configure_logging
from .synthesizer import synthesize
from .templates import required_templates, resolve_templates
from .types import ParamKind, ParameterBinding


# =============================================================================
# Helpers: output + argument parsing
# =============================================================================

def _print_payload(payload: Dict[str, Any], fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True, default=str))
    elif fmt == "jsonl":
        print(json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str))
    else:
        # "text": caller prints human-friendly output
        pass


def _raise_config_error(code: str, message: str, *, details: Dict[str, Any], remediation: str) -> None:
    raise ZorroException(
        ZorroProblem(
            code=code,
            category="config",
            message=message,
            details=details,
            remediation=remediation,
        ),
        ExitCode.CONFIG_INVALID,
    )


def _write_text(path: str | Path, text: str) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")


def _load_interface(target: str) -> Any:
    """Import `package.module:InterfaceName`."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        _raise_config_error(
            "ZORRO_BAD_TARGET",
            f"Interface target must look like module:Name, got {target!r}",
            details={"target": target},
            remediation="Pass e.g. `myapp.storage:IDataStorage`.",
        )
    try:
        obj: Any = importlib.import_module(module_name)
        for part in attr.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as e:
        raise ZorroException(
            ZorroProblem(
                code="ZORRO_TARGET_NOT_FOUND",
                category="config",
                message=f"Cannot import {target}",
                details={"target": target, "error": repr(e)},
                remediation="Check the module is importable (PYTHONPATH) and the name is spelled correctly.",
            ),
            ExitCode.CONFIG_INVALID,
            cause=e,
        )
    return obj


def _parse_param(spec: str) -> ParameterBinding:
    """
    Parse `name=value` or `name=value:KIND`.

    Without a kind, integers and floats are numeric and anything else is a string.
    """
    name, sep, rest = spec.partition("=")
    if not sep or not name:
        _raise_config_error(
            "ZORRO_BAD_PARAM",
            f"Parameter must look like name=value[:kind], got {spec!r}",
            details={"param": spec},
            remediation="Pass e.g. `--param id=5` or `--param name=Bob:string`.",
        )

    value_text, _, kind_text = rest.rpartition(":")
    if value_text and kind_text.upper() in ParamKind.__members__:
        return ParameterBinding(name, value_text, ParamKind[kind_text.upper()])

    for cast, kind in ((int, ParamKind.INT), (float, ParamKind.DOUBLE)):
        try:
            return ParameterBinding(name, cast(rest), kind)
        except ValueError:
            pass
    return ParameterBinding(name, rest, ParamKind.STRING)


def _config_from_args(args: argparse.Namespace) -> ZorroConfig:
    cfg = ZorroConfig()
    if getattr(args, "config", None):
        try:
            cfg = load_config(args.config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ZorroException(
                ZorroProblem(
                    code="ZORRO_CONFIG_INVALID",
                    category="config",
                    message=f"Failed to load config: {args.config}",
                    details={"path": args.config, "error": repr(e)},
                    remediation="Ensure the file exists and holds a YAML/JSON mapping.",
                ),
                ExitCode.CONFIG_INVALID,
                cause=e,
            )
    if getattr(args, "template_dir", None):
        cfg = replace(cfg, template_dir=args.template_dir)
    if getattr(args, "log_level", None):
        cfg = replace(cfg, log_level=args.log_level.upper())
    return cfg


# =============================================================================
# Commands
# =============================================================================

def cmd_templates(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    contract = describe_contract(_load_interface(args.interface))
    statuses = required_templates(contract, cfg)
    missing = [s for s in statuses if not s.exists]

    if args.format in ("json", "jsonl"):
        _print_payload(
            {
                "ok": not missing,
                "interface": contract.name,
                "templates": [{"signature": s.signature, "path": str(s.path), "exists": s.exists} for s in statuses],
            },
            args.format,
        )
    else:
        for s in statuses:
            print(f"{'OK     ' if s.exists else 'MISSING'} {s.path}")

    return int(ExitCode.CONFIG_INVALID) if missing else 0


def cmd_source(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    contract = describe_contract(_load_interface(args.interface))
    source = render_module(synthesize(contract, resolve_templates(contract, cfg), cfg))

    if args.out:
        _write_text(args.out, source.text)
        if args.format in ("json", "jsonl"):
            _print_payload({"ok": True, "out": str(args.out), "class_name": source.class_name}, args.format)
        else:
            print(f"Wrote source: {args.out}")
    elif args.format in ("json", "jsonl"):
        _print_payload({"ok": True, "class_name": source.class_name, "source": source.text}, args.format)
    else:
        print(source.text, end="")
    return 0


def cmd_inline(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    bindings = [_parse_param(p) for p in args.param or []]
    text = inline_parameters(args.sql, bindings, prefixes=cfg.param_prefixes)

    if args.format in ("json", "jsonl"):
        _print_payload({"ok": True, "sql": text}, args.format)
    else:
        print(text)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zorro",
        description="Generate interface implementations backed by SQL template files.",
    )
    parser.add_argument("--format", choices=["text", "json", "jsonl"], default="text")
    parser.add_argument("--config", help="YAML/JSON config file")
    parser.add_argument("--log-level", dest="log_level", help="DEBUG, INFO, WARNING or ERROR")

    sub = parser.add_subparsers(dest="cmd")

    p = sub.add_parser("templates", help="List the template files an interface needs")
    p.add_argument("interface", help="module:InterfaceName")
    p.add_argument("--template-dir", dest="template_dir")
    p.set_defaults(func=cmd_templates)

    p = sub.add_parser("source", help="Print the generated implementation source")
    p.add_argument("interface", help="module:InterfaceName")
    p.add_argument("--template-dir", dest="template_dir")
    p.add_argument("--out")
    p.set_defaults(func=cmd_source)

    p = sub.add_parser("inline", help="Inline parameter values into command text")
    p.add_argument("--sql", required=True)
    p.add_argument("--param", action="append", metavar="NAME=VALUE[:KIND]")
    p.set_defaults(func=cmd_inline)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point used by the console script: `from zorro.cli import main`."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "cmd", None):
        parser.print_help()
        return 2

    fmt = getattr(args, "format", "text")
    try:
        configure_logging(_config_from_args(args).log_level)
        return int(args.func(args))
    except ZorroException as e:
        payload = {"ok": False, "error": problem_to_dict(e.problem), "exit_code": int(e.exit_code)}
        if fmt in ("json", "jsonl"):
            _print_payload(payload, fmt)
        else:
            err = payload["error"]
            print(f"ERROR[{err.get('code', 'ZORRO_ERROR')}]: {err.get('message')}", file=sys.stderr)
            if err.get("remediation"):
                print(f"REMEDIATION: {err['remediation']}", file=sys.stderr)
            print(f"DETAILS: {err.get('details', {})}", file=sys.stderr)
        return int(e.exit_code)
    except Exception as e:
        payload = {
            "ok": False,
            "error": {"code": "ZORRO_INTERNAL_ERROR", "category": "internal", "message": repr(e)},
            "exit_code": int(ExitCode.INTERNAL_ERROR),
        }
        if fmt in ("json", "jsonl"):
            _print_payload(payload, fmt)
        else:
            print(f"ERROR[ZORRO_INTERNAL_ERROR]: {e!r}", file=sys.stderr)
        return int(ExitCode.INTERNAL_ERROR)


if __name__ == "__main__":
    sys.exit(main())
