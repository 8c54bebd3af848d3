"""Input validation for CLI arguments."""
import sys
from typing import Optional

from wellsense_hardening.security.domains.secret_manager import (
    DATABASE_PASSWORD_MIN_LENGTH,
    JWT_MIN_LENGTH,
    OAUTH_MIN_LENGTH,
)
from wellsense_hardening.security.workflows.environment_validator import SECRET_SPECS

MIN_LENGTHS = {
    "jwt": ("JWT secret", JWT_MIN_LENGTH),
    "database": ("Database password", DATABASE_PASSWORD_MIN_LENGTH),
    "oauth": ("OAuth secret", OAUTH_MIN_LENGTH),
}


def validate_secret_length(secret_type: Optional[str], length: Optional[int]) -> None:
    """
    Validate a requested secret length before generating.

    Without ``--type`` only positivity is checked; every type then uses its
    default length.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if length is None:
        return

    if length < 1:
        print(f"Error: Invalid length \"{length}\"", file=sys.stderr)
        print("Length must be a positive number", file=sys.stderr)
        sys.exit(2)

    if secret_type in MIN_LENGTHS:
        label, minimum = MIN_LENGTHS[secret_type]
        if length < minimum:
            print(f"Error: {label} must be at least {minimum} characters", file=sys.stderr)
            print(f"Requested length: {length}", file=sys.stderr)
            sys.exit(2)


def validate_secret_name(name: str) -> None:
    """
    Validate that ``name`` is a secret the environment validator knows.

    Raises:
        SystemExit with code 2 if validation fails
    """
    known = [spec.name for spec in SECRET_SPECS]
    if name not in known:
        print(f"Error: Unknown secret '{name}'", file=sys.stderr)
        print(f"\nKnown secrets: {', '.join(known)}", file=sys.stderr)
        sys.exit(2)
