from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ExitCode(int, Enum):
    OK = 0
    CONFIG_INVALID = 10
    RUNTIME_ERROR = 30
    DEPENDENCY_ERROR = 40
    INTERNAL_ERROR = 50


@dataclass(frozen=True)
class ZorroProblem:
    code: str                 # stable machine code, e.g. "ZORRO_TEMPLATE_NOT_FOUND"
    category: str             # "config" | "runtime" | "dependency" | "internal"
    message: str              # short human message
    details: Dict[str, Any] = field(default_factory=dict)
    remediation: Optional[str] = None  # actionable next step


class ZorroException(Exception):
    def __init__(
        self,
        problem: ZorroProblem,
        exit_code: ExitCode,
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(problem.message)
        self.problem = problem
        self.exit_code = exit_code
        self.__cause__ = cause


class ContractError(ZorroException):
    """The requested type is not a usable interface contract."""

    def __init__(self, code: str, message: str, *, details: Dict[str, Any], remediation: str) -> None:
        super().__init__(
            ZorroProblem(code=code, category="config", message=message, details=details, remediation=remediation),
            ExitCode.CONFIG_INVALID,
        )


class TemplateNotFoundError(ZorroException):
    def __init__(self, signature: str, path: str) -> None:
        super().__init__(
            ZorroProblem(
                code="ZORRO_TEMPLATE_NOT_FOUND",
                category="config",
                message=f"Query template not found for {signature}",
                details={"signature": signature, "path": path},
                remediation="Create the template file next to the program or set template_dir.",
            ),
            ExitCode.CONFIG_INVALID,
        )
        self.signature = signature
        self.path = path


class UnsupportedReturnTypeError(ZorroException):
    def __init__(self, signature: str, return_type: str) -> None:
        super().__init__(
            ZorroProblem(
                code="ZORRO_UNSUPPORTED_RETURN_TYPE",
                category="config",
                message=f"Return type: {return_type} - not supported",
                details={"signature": signature, "return_type": return_type},
                remediation="Declare a scalar return type (int, float, bool, str, bytes, Decimal, "
                "datetime, date, time), object/Any, or None.",
            ),
            ExitCode.CONFIG_INVALID,
        )
        self.signature = signature
        self.return_type = return_type


class GenerationFailedError(ZorroException):
    def __init__(self, class_name: str, diagnostics: list) -> None:
        super().__init__(
            ZorroProblem(
                code="ZORRO_GENERATION_FAILED",
                category="runtime",
                message=f"Failed to generate implementation {class_name}",
                details={"diagnostics": [asdict(d) for d in diagnostics]},
                remediation="Inspect the diagnostics and the synthesized source (`zorro source`).",
            ),
            ExitCode.RUNTIME_ERROR,
        )
        self.diagnostics = list(diagnostics)


def problem_to_dict(p: ZorroProblem) -> Dict[str, Any]:
    d = asdict(p)
    if d.get("remediation") is None:
        d.pop("remediation", None)
    return d
