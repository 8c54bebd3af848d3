"""Secret, CORS, SSL and environment checks plus the file-based security audit."""
from .domains.cors_configurator import CORSOriginError, CORSPolicy, get_cors_options
from .domains.models import (
    AuditCheckResult,
    AuditReport,
    EnvironmentValidationResult,
    HTTPSOptions,
    SecretRequirements,
    Severity,
    ValidationResult,
)
from .domains.secret_manager import (
    InvalidSecretLengthError,
    calculate_entropy,
    generate_database_password,
    generate_jwt_secret,
    generate_oauth_secret,
    is_weak_pattern,
    validate_secret,
)
from .domains.ssl_manager import SSLConfigurationError, get_https_options
from .workflows.environment_validator import EnvironmentValidationError, enforce_environment, validate_all
from .workflows.security_audit import SecurityAuditor, generate_report

__all__ = [
    "AuditCheckResult",
    "AuditReport",
    "CORSOriginError",
    "CORSPolicy",
    "EnvironmentValidationError",
    "EnvironmentValidationResult",
    "HTTPSOptions",
    "InvalidSecretLengthError",
    "SSLConfigurationError",
    "SecretRequirements",
    "SecurityAuditor",
    "Severity",
    "ValidationResult",
    "calculate_entropy",
    "enforce_environment",
    "generate_database_password",
    "generate_jwt_secret",
    "generate_oauth_secret",
    "generate_report",
    "get_cors_options",
    "get_https_options",
    "is_weak_pattern",
    "validate_all",
    "validate_secret",
]
