"""Startup validation of the application environment.

Combines the NODE_ENV, secret, CORS and SSL checks into one result. Whether a
finding is an error or a warning depends on the environment: production is
strict and turns weak or missing secrets into blocking errors.
"""
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from ..domains.connection_string import extract_password
from ..domains.cors_configurator import has_wildcard
from ..domains.models import EnvironmentValidationResult, SecretRequirements
from ..domains.secret_manager import validate_secret

logger = logging.getLogger(__name__)

VALID_ENVIRONMENTS = ("development", "production", "test")

# Practical threshold for a 64-char hex or base64 secret (theoretical max is 256)
MIN_SECRET_ENTROPY = 230

_CONNECTION_PASSWORD = SecretRequirements(
    min_length=32,
    require_uppercase=True,
    require_lowercase=True,
    require_numbers=True,
    require_special_chars=True,
)


@dataclass(frozen=True)
class SecretSpec:
    """How one environment secret is validated."""
    name: str
    requirements: SecretRequirements
    extract_password: bool = False
    optional: bool = False


SECRET_SPECS: Tuple[SecretSpec, ...] = (
    SecretSpec("JWT_SECRET", SecretRequirements(min_length=64, min_entropy=MIN_SECRET_ENTROPY)),
    SecretSpec("DATABASE_URL", _CONNECTION_PASSWORD, extract_password=True),
    SecretSpec("MONGODB_URI", _CONNECTION_PASSWORD, extract_password=True),
    SecretSpec(
        "GOOGLE_CLIENT_SECRET",
        SecretRequirements(min_length=48, min_entropy=MIN_SECRET_ENTROPY),
        optional=True,
    ),
)


class EnvironmentValidationError(Exception):
    """Production startup refused because the environment has errors."""

    def __init__(self, result: EnvironmentValidationResult):
        self.result = result
        lines = "\n".join(f"  - {error}" for error in result.errors)
        super().__init__(f"Configuration validation failed:\n{lines}")


def get_secret_spec(name: str) -> Optional[SecretSpec]:
    for spec in SECRET_SPECS:
        if spec.name == name:
            return spec
    return None


def validate_node_env(node_env: Optional[str]) -> EnvironmentValidationResult:
    """NODE_ENV problems are only ever warnings."""
    result = EnvironmentValidationResult()

    if not node_env:
        result.warnings.append(
            "NODE_ENV is not set. Defaulting to development mode. "
            "Set NODE_ENV=production for production deployment."
        )
    elif node_env not in VALID_ENVIRONMENTS:
        result.warnings.append(
            f'NODE_ENV is set to "{node_env}" which is not a standard value. '
            f"Expected: {', '.join(VALID_ENVIRONMENTS)}"
        )

    return result


def validate_secret_value(spec: SecretSpec, value: Optional[str], strict: bool) -> EnvironmentValidationResult:
    """
    Validate one secret per ``spec``.

    Findings go to ``errors`` when ``strict`` and to ``warnings`` otherwise.
    An absent optional secret produces nothing.
    """
    result = EnvironmentValidationResult()
    sink = result.errors if strict else result.warnings

    if not value:
        if not spec.optional:
            sink.append(f"{spec.name} is not set")
        return result

    secret = value
    if spec.extract_password:
        password = extract_password(value)
        if password is not None:
            secret = password

    validation = validate_secret(secret, spec.requirements)
    sink.extend(f"{spec.name}: {error}" for error in validation.errors)
    return result


def validate_secrets(env: Mapping[str, Any], strict: bool) -> EnvironmentValidationResult:
    """Validate every secret in ``SECRET_SPECS`` against ``env``."""
    result = EnvironmentValidationResult()
    for spec in SECRET_SPECS:
        result.extend(validate_secret_value(spec, env.get(spec.name), strict))
    return result


def validate_cors(env: Mapping[str, Any], node_env: Optional[str]) -> EnvironmentValidationResult:
    result = EnvironmentValidationResult()
    cors_origin = env.get("CORS_ORIGIN")
    production = node_env == "production"

    if not cors_origin:
        message = "CORS_ORIGIN is not set"
        if production:
            result.errors.append(message)
        else:
            result.warnings.append(message)
        return result

    if production:
        if has_wildcard(cors_origin):
            result.errors.append(
                "CORS_ORIGIN cannot be wildcard (*) in production mode. "
                "Specify explicit allowed origins (e.g., https://yourdomain.com)"
            )

        # Allowed for staged testing, so only a warning
        if "localhost" in cors_origin or "127.0.0.1" in cors_origin:
            result.warnings.append(
                "CORS_ORIGIN contains localhost/127.0.0.1 in production mode. "
                "This may be intentional for testing, but ensure it is removed for production deployment."
            )

    return result


def validate_ssl(env: Mapping[str, Any], node_env: Optional[str]) -> EnvironmentValidationResult:
    result = EnvironmentValidationResult()
    enable_https = env.get("ENABLE_HTTPS") == "true"

    if enable_https:
        if not env.get("SSL_KEY_PATH"):
            result.errors.append("ENABLE_HTTPS is true but SSL_KEY_PATH is not set")
        if not env.get("SSL_CERT_PATH"):
            result.errors.append("ENABLE_HTTPS is true but SSL_CERT_PATH is not set")
    elif node_env == "production":
        result.warnings.append(
            "HTTPS is not enabled in production mode. "
            "For production deployment, enable HTTPS by setting ENABLE_HTTPS=true "
            "and configuring SSL_KEY_PATH and SSL_CERT_PATH."
        )

    return result


def validate_all(env: Mapping[str, Any], node_env: Optional[str]) -> EnvironmentValidationResult:
    """
    Run every environment check.

    Args:
        env: Environment variables (``os.environ`` or a loaded .env mapping)
        node_env: Current NODE_ENV; "production" enables strict secret checks

    Returns:
        Errors and warnings of all checks, in the order NODE_ENV, secrets,
        CORS, SSL
    """
    result = EnvironmentValidationResult()
    result.extend(validate_node_env(node_env))
    result.extend(validate_secrets(env, strict=node_env == "production"))
    result.extend(validate_cors(env, node_env))
    result.extend(validate_ssl(env, node_env))
    return result


def enforce_environment(env: Mapping[str, Any], node_env: Optional[str]) -> EnvironmentValidationResult:
    """
    Validate the environment at application startup.

    In production any error is fatal. Elsewhere errors and warnings are
    logged and startup continues.

    Raises:
        EnvironmentValidationError: If ``node_env`` is production and the
            environment has errors
    """
    result = validate_all(env, node_env)

    if not result.valid and node_env == "production":
        for error in result.errors:
            logger.error(error)
        raise EnvironmentValidationError(result)

    for message in result.errors + result.warnings:
        logger.warning(message)

    if result.valid and not result.warnings:
        logger.info("Configuration validation passed")

    return result
