"""Generation and strength validation of application secrets.

Everything here is pure: no I/O, no module state. Randomness comes from the
``secrets`` module so every generator is suitable for production credentials.
"""
import base64
import math
import re
import secrets
from collections import Counter
from typing import Optional

from .models import SecretRequirements, ValidationResult

JWT_MIN_LENGTH = 64
DATABASE_PASSWORD_MIN_LENGTH = 32
OAUTH_MIN_LENGTH = 48

UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
NUMBERS = "0123456789"
SPECIAL_CHARS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

WEAK_PATTERNS = (
    "your-",
    "change-in-production",
    "test-",
    "example-",
    "placeholder-",
    "secret",
    "password",
    "admin",
    "root",
)

_SPECIAL_CHAR_RE = re.compile("[" + re.escape(SPECIAL_CHARS) + "]")


class InvalidSecretLengthError(ValueError):
    """Requested secret length is below the minimum for its type."""
    pass


def generate_jwt_secret(length: int = JWT_MIN_LENGTH) -> str:
    """
    Generate a hex-encoded JWT signing secret.

    Args:
        length: Number of characters, at least 64

    Returns:
        Exactly ``length`` characters from ``[0-9a-f]``

    Raises:
        InvalidSecretLengthError: If length is below 64
    """
    if length < JWT_MIN_LENGTH:
        raise InvalidSecretLengthError(f"JWT secret must be at least {JWT_MIN_LENGTH} characters")
    return secrets.token_hex(math.ceil(length / 2))[:length]


def generate_database_password(length: int = DATABASE_PASSWORD_MIN_LENGTH) -> str:
    """
    Generate a database password containing every character class.

    One character of each class (uppercase, lowercase, digit, special) is
    seeded, the rest is drawn from the union of the classes, and the result
    is shuffled so the seeded characters have no fixed position.

    Raises:
        InvalidSecretLengthError: If length is below 32
    """
    if length < DATABASE_PASSWORD_MIN_LENGTH:
        raise InvalidSecretLengthError(
            f"Database password must be at least {DATABASE_PASSWORD_MIN_LENGTH} characters"
        )

    all_chars = UPPERCASE + LOWERCASE + NUMBERS + SPECIAL_CHARS
    password = [secrets.choice(charset) for charset in (UPPERCASE, LOWERCASE, NUMBERS, SPECIAL_CHARS)]
    password.extend(secrets.choice(all_chars) for _ in range(length - len(password)))

    secrets.SystemRandom().shuffle(password)
    return "".join(password)


def generate_oauth_secret(length: int = OAUTH_MIN_LENGTH) -> str:
    """
    Generate a base64-encoded OAuth client secret of exactly ``length`` characters.

    Raises:
        InvalidSecretLengthError: If length is below 48
    """
    if length < OAUTH_MIN_LENGTH:
        raise InvalidSecretLengthError(f"OAuth secret must be at least {OAUTH_MIN_LENGTH} characters")
    raw = secrets.token_bytes(math.ceil(length * 3 / 4))
    return base64.b64encode(raw).decode("ascii")[:length]


def calculate_entropy(secret: Optional[str]) -> float:
    """
    Total Shannon entropy of ``secret`` in bits.

    Per-character entropy ``-sum(p * log2(p))`` over the character histogram,
    multiplied by the string length. Empty input has zero entropy.
    """
    if not secret:
        return 0.0

    length = len(secret)
    entropy = 0.0
    for count in Counter(secret).values():
        probability = count / length
        entropy -= probability * math.log2(probability)

    return entropy * length


def is_weak_pattern(secret: Optional[str]) -> bool:
    """Check for placeholder/default substrings, case-insensitively."""
    if not secret:
        return False
    lowered = secret.lower()
    return any(pattern in lowered for pattern in WEAK_PATTERNS)


def validate_secret(secret: Optional[str], requirements: SecretRequirements) -> ValidationResult:
    """
    Validate a secret against ``requirements``.

    Every applicable rule is evaluated and each failure is reported; only a
    missing secret short-circuits.
    """
    result = ValidationResult()

    if not secret:
        result.errors.append("Secret is required")
        return result

    if requirements.min_length and len(secret) < requirements.min_length:
        result.errors.append(
            f"Secret length is {len(secret)} characters, minimum required is {requirements.min_length}"
        )

    if is_weak_pattern(secret):
        result.errors.append(
            "Secret contains weak pattern (your-, change-in-production, test-, example-, placeholder-)"
        )

    if requirements.min_entropy:
        entropy = calculate_entropy(secret)
        if entropy < requirements.min_entropy:
            result.errors.append(
                f"Secret entropy is {entropy:.2f} bits, minimum required is {requirements.min_entropy} bits"
            )

    if requirements.require_uppercase and not re.search(r"[A-Z]", secret):
        result.errors.append("Secret must contain at least one uppercase letter")

    if requirements.require_lowercase and not re.search(r"[a-z]", secret):
        result.errors.append("Secret must contain at least one lowercase letter")

    if requirements.require_numbers and not re.search(r"[0-9]", secret):
        result.errors.append("Secret must contain at least one number")

    if requirements.require_special_chars and not _SPECIAL_CHAR_RE.search(secret):
        result.errors.append("Secret must contain at least one special character")

    return result
