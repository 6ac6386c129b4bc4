"""zorro - bind interfaces to SQL template files and generate their implementations."""

from .config import ZorroConfig, load_config
from .contract import describe_contract
from .errors import (
    ContractError,
    ExitCode,
    GenerationFailedError,
    TemplateNotFoundError,
    UnsupportedReturnTypeError,
    ZorroException,
    ZorroProblem,
)
from .inliner import inline_parameters
from .loader import generate, rpc
from .types import (
    Diagnostic,
    GenerationResult,
    InterfaceContract,
    MethodDescriptor,
    ParamKind,
    ParameterBinding,
    Stage,
)

__all__ = [
    # Main API
    "rpc",
    "generate",
    "describe_contract",
    "inline_parameters",
    # Config
    "ZorroConfig",
    "load_config",
    # Types
    "Diagnostic",
    "GenerationResult",
    "InterfaceContract",
    "MethodDescriptor",
    "ParamKind",
    "ParameterBinding",
    "Stage",
    # Errors
    "ExitCode",
    "ZorroProblem",
    "ZorroException",
    "ContractError",
    "TemplateNotFoundError",
    "UnsupportedReturnTypeError",
    "GenerationFailedError",
]

__version__ = "0.1.0"
