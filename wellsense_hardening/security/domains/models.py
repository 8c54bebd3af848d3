"""Domain models for secret validation, environment checks and audits."""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Severity(str, Enum):
    """Audit finding severity, used to derive the audit exit code."""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class SecretRequirements:
    """Strength requirements applied to a single secret."""
    min_length: int
    min_entropy: Optional[float] = None
    require_uppercase: bool = False
    require_lowercase: bool = False
    require_numbers: bool = False
    require_special_chars: bool = False


@dataclass
class ValidationResult:
    """Outcome of validating one secret."""
    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass
class EnvironmentValidationResult:
    """Outcome of an environment check: errors block, warnings advise."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def extend(self, other: "EnvironmentValidationResult") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)


@dataclass(frozen=True)
class AuditCheckResult:
    """One audit finding for a (check, target file) pair."""
    name: str
    category: str
    severity: Severity
    passed: bool
    message: str
    details: Any = None
    recommendation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


@dataclass(frozen=True)
class AuditReport:
    """Aggregate audit outcome derived from a list of check results."""
    passed: bool
    exit_code: int
    results: Tuple[AuditCheckResult, ...]
    timestamp: str

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed_count(self) -> int:
        return self.total - self.passed_count

    @property
    def critical_count(self) -> int:
        return sum(1 for r in self.results if not r.passed and r.severity == Severity.CRITICAL)

    @property
    def warning_count(self) -> int:
        return sum(1 for r in self.results if not r.passed and r.severity == Severity.WARNING)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "exit_code": self.exit_code,
            "timestamp": self.timestamp,
            "summary": {
                "total": self.total,
                "passed": self.passed_count,
                "failed": self.failed_count,
                "critical": self.critical_count,
                "warnings": self.warning_count,
            },
            "results": [r.to_dict() for r in self.results],
        }


@dataclass(frozen=True)
class HTTPSOptions:
    """Key and certificate bytes for an HTTPS server."""
    key: bytes
    cert: bytes
