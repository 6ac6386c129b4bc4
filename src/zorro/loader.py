# src/zorro/loader.py
"""
Dynamic loading of synthesized implementations.

Pipeline (linear, no retries):

    DESCRIBE_CONTRACT -> RESOLVE_TEMPLATES -> SYNTHESIZE_SOURCE -> COMPILE -> LOAD -> READY

Contract, template and return-type errors raise immediately. Compile and load
failures end in Stage.FAILED with diagnostics and `failed_stage` set to COMPILE
or LOAD; `rpc` then returns None.
"""

from __future__ import annotations

import builtins
import dataclasses
import linecache
import uuid
from types import CodeType
from typing import Any, Dict, List, Optional, Tuple

from .config import ZorroConfig
from .contract import describe_contract
from .logging import get_logger
from .synthesizer import synthesize
from .templates import resolve_templates
from .types import Diagnostic, GenerationResult, Stage, SynthesizedSource

logger = get_logger(__name__)

IMPORTS_PLACEHOLDER = "#@IMPORTS@#"
MODULE_PLACEHOLDER = "#@MODULE@#"
CLASS_NAME_PLACEHOLDER = "#@CLASS_NAME@#"
INTERFACE_PLACEHOLDER = "#@INTERFACE@#"
CLASS_BODY_PLACEHOLDER = "#@CLASS_BODY@#"

PROXY_MODULE_TEMPLATE = (
    f'"""Generated implementation of {INTERFACE_PLACEHOLDER} ({MODULE_PLACEHOLDER})."""\n'
    "from __future__ import annotations\n"
    "\n"
    f"{IMPORTS_PLACEHOLDER}\n"
    "\n"
    "\n"
    f"class {CLASS_NAME_PLACEHOLDER}({INTERFACE_PLACEHOLDER}):\n"
    "    __slots__ = ('_connection',)\n"
    "\n"
    "    def __init__(self, connection):\n"
    "        self._connection = connection\n"
    "\n"
    f"{CLASS_BODY_PLACEHOLDER}\n"
)


def _module_name() -> str:
    return f"zorro.generated_{uuid.uuid4().hex[:12]}"


def render_module(source: SynthesizedSource, module_name: Optional[str] = None) -> SynthesizedSource:
    """Fill the module scaffold; returns a copy of source with .text and .module_name set."""
    module_name = module_name or _module_name()
    text = (
        PROXY_MODULE_TEMPLATE
        .replace(IMPORTS_PLACEHOLDER, "\n".join(source.imports))
        .replace(MODULE_PLACEHOLDER, module_name)
        .replace(CLASS_NAME_PLACEHOLDER, source.class_name)
        .replace(INTERFACE_PLACEHOLDER, source.interface_name or "object")
        .replace(CLASS_BODY_PLACEHOLDER, source.body)
    )
    return dataclasses.replace(source, module_name=module_name, text=text)


def source_filename(source: SynthesizedSource) -> str:
    """Pseudo file name of one generated module; unique per generation pass."""
    return f"<zorro:{source.module_name}.{source.class_name}>"


def compile_source(source: SynthesizedSource) -> Tuple[Optional[CodeType], List[Diagnostic]]:
    filename = source_filename(source)
    try:
        code = compile(source.text, filename, "exec")
    except SyntaxError as e:
        return None, [Diagnostic(id=type(e).__name__, message=e.msg or str(e), line=e.lineno)]

    # Lets tracebacks and inspect.getsource show generated lines.
    linecache.cache[filename] = (len(source.text), None, source.text.splitlines(True), filename)
    return code, []


def load_instance(
    source: SynthesizedSource,
    code: CodeType,
    connection: Any,
    module_name: str,
) -> Tuple[Any, List[Diagnostic]]:
    """Execute the compiled module in a fresh namespace and construct one instance."""
    namespace: Dict[str, Any] = {"__name__": module_name, "__builtins__": builtins}
    namespace.update(source.references)
    try:
        exec(code, namespace)
        cls = namespace[source.class_name]
        return cls(connection), []
    except Exception as e:
        return None, [Diagnostic(id=type(e).__name__, message=str(e))]


def _failed(
    log: Any,
    stage: Stage,
    source: SynthesizedSource,
    diagnostics: List[Diagnostic],
) -> GenerationResult:
    log.warning(
        "generation_failed",
        stage=stage.value,
        class_name=source.class_name,
        diagnostics=[f"{d.id}: {d.message}" for d in diagnostics],
    )
    return GenerationResult(stage=Stage.FAILED, source=source, diagnostics=diagnostics, failed_stage=stage)


def generate(interface: Any, connection: Any, config: Optional[ZorroConfig] = None) -> GenerationResult:
    """
    Generate an implementation of `interface` bound to `connection`.

    The connection is caller-owned and only stored; it is never opened,
    committed or closed here. Every call compiles a new class, so two calls
    never share state.
    """
    cfg = config or ZorroConfig()
    log = logger.bind(interface=getattr(interface, "__name__", type(interface).__name__))

    log.debug("stage", stage=Stage.DESCRIBE_CONTRACT.value)
    contract = describe_contract(interface)

    log.debug("stage", stage=Stage.RESOLVE_TEMPLATES.value)
    templates = resolve_templates(contract, cfg)

    log.debug("stage", stage=Stage.SYNTHESIZE_SOURCE.value)
    module_name = _module_name()
    source = render_module(synthesize(contract, templates, cfg), module_name)

    log.debug("stage", stage=Stage.COMPILE.value)
    code, diagnostics = compile_source(source)
    if code is None:
        return _failed(log, Stage.COMPILE, source, diagnostics)

    log.debug("stage", stage=Stage.LOAD.value)
    instance, diagnostics = load_instance(source, code, connection, module_name)
    if diagnostics:
        return _failed(log, Stage.LOAD, source, diagnostics)

    log.info("implementation_ready", class_name=source.class_name, module=module_name, methods=len(contract))
    return GenerationResult(stage=Stage.READY, instance=instance, source=source)


def rpc(interface: Any, connection: Any, config: Optional[ZorroConfig] = None) -> Any:
    """Return an instance implementing `interface` over `connection`, or None if compilation failed."""
    return generate(interface, connection, config).instance
