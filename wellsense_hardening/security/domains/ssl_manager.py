"""HTTPS certificate configuration: validation and loading of key/cert files."""
import logging
import os
from typing import Any, Mapping, Optional

from .models import HTTPSOptions, ValidationResult

logger = logging.getLogger(__name__)


class SSLConfigurationError(Exception):
    """SSL certificates are misconfigured or could not be loaded."""
    pass


def is_https_enabled(env: Mapping[str, Any]) -> bool:
    """ENABLE_HTTPS is the string "true" or boolean True."""
    return env.get("ENABLE_HTTPS") == "true" or env.get("ENABLE_HTTPS") is True


def is_ssl_configured(env: Mapping[str, Any]) -> bool:
    """HTTPS is enabled and both certificate paths are set."""
    has_cert_paths = bool(env.get("SSL_KEY_PATH") and env.get("SSL_CERT_PATH"))
    return is_https_enabled(env) and has_cert_paths


def _check_file(path: Optional[str], var_name: str, kind: str, result: ValidationResult) -> None:
    if not path:
        result.errors.append(f"{var_name} is not configured")
    elif not os.path.exists(path):
        result.errors.append(f"{kind} file not found: {path}")
    elif not os.access(path, os.R_OK):
        result.errors.append(f"{kind} file is not readable: {path}")


def validate_certificates(key_path: Optional[str], cert_path: Optional[str]) -> ValidationResult:
    """
    Check that the key and certificate files exist and are readable.

    Both paths are always checked; errors accumulate.
    """
    result = ValidationResult()
    _check_file(key_path, "SSL_KEY_PATH", "SSL key", result)
    _check_file(cert_path, "SSL_CERT_PATH", "SSL certificate", result)
    return result


def load_certificates(key_path: str, cert_path: str) -> HTTPSOptions:
    """
    Read the key and certificate files as raw bytes.

    Raises:
        SSLConfigurationError: If either file cannot be read
    """
    try:
        with open(key_path, "rb") as f:
            key = f.read()
        with open(cert_path, "rb") as f:
            cert = f.read()
    except OSError as e:
        raise SSLConfigurationError(
            f"Failed to load SSL certificates: {e}. "
            "Verify that SSL_KEY_PATH and SSL_CERT_PATH point to valid certificate files."
        ) from e

    logger.debug(f"Loaded SSL key from {key_path} and certificate from {cert_path}")
    return HTTPSOptions(key=key, cert=cert)


def get_https_options(env: Mapping[str, Any]) -> Optional[HTTPSOptions]:
    """
    Get HTTPS server options for ``env``.

    HTTPS being disabled is not an error. Enabling it without both
    certificate paths is, and is reported like any other invalid file, so
    the gate is ``is_https_enabled`` rather than ``is_ssl_configured``: a
    partially configured environment raises instead of returning None.

    Returns:
        Loaded key/cert bytes, or None when HTTPS is not enabled

    Raises:
        SSLConfigurationError: If HTTPS is enabled but the files are invalid
    """
    if not is_https_enabled(env):
        return None

    key_path = env.get("SSL_KEY_PATH")
    cert_path = env.get("SSL_CERT_PATH")

    validation = validate_certificates(key_path, cert_path)
    if not validation.valid:
        details = "\n".join(f"  - {error}" for error in validation.errors)
        raise SSLConfigurationError(f"SSL configuration is invalid:\n{details}")

    return load_certificates(key_path, cert_path)
