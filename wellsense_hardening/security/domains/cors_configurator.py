"""CORS origin policy built from the CORS_ORIGIN environment variable."""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Always allowed when running in development (or with NODE_ENV unset)
DEVELOPMENT_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
)


class CORSOriginError(Exception):
    """Request origin rejected by the CORS policy."""
    pass


def parse_allowed_origins(cors_origin: Any) -> List[str]:
    """Split a comma-separated origin string, dropping empty entries."""
    if not cors_origin or not isinstance(cors_origin, str):
        return []
    return [origin.strip() for origin in cors_origin.split(",") if origin.strip()]


def is_origin_allowed(origin: Optional[str], allowed_origins: Any) -> bool:
    """Exact, case-sensitive match of ``origin`` against the allowed list."""
    if not origin or not isinstance(allowed_origins, (list, tuple)):
        return False
    return origin in allowed_origins


def has_wildcard(cors_origin: Any) -> bool:
    """True if the raw CORS_ORIGIN value contains ``*`` anywhere."""
    if not cors_origin or not isinstance(cors_origin, str):
        return False
    return "*" in cors_origin


@dataclass(frozen=True)
class CORSPolicy:
    """CORS middleware options with an origin decision function."""
    allowed_origins: Tuple[str, ...]
    credentials: bool = True
    methods: Tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS")
    allowed_headers: Tuple[str, ...] = ("Content-Type", "Authorization", "X-Requested-With")
    max_age: int = 600

    def is_allowed(self, request_origin: Optional[str]) -> bool:
        # Non-browser clients (curl, mobile apps) send no Origin header
        if not request_origin:
            return True
        return is_origin_allowed(request_origin, self.allowed_origins)

    def origin(self, request_origin: Optional[str], callback: Callable[..., Any]) -> Any:
        """Report the decision for ``request_origin`` as ``callback(error, allowed)``."""
        if self.is_allowed(request_origin):
            return callback(None, True)
        logger.debug(f"Rejected CORS origin: {request_origin}")
        return callback(CORSOriginError("Origin not allowed by CORS"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "origins": list(self.allowed_origins),
            "credentials": self.credentials,
            "methods": list(self.methods),
            "allowed_headers": list(self.allowed_headers),
            "max_age": self.max_age,
        }


def get_cors_options(env: Mapping[str, Any], node_env: Optional[str]) -> CORSPolicy:
    """
    Build the CORS policy for ``node_env``.

    Origins come from ``env["CORS_ORIGIN"]``; in development (or when
    ``node_env`` is unset) the local dev-server origins are added as well.
    """
    allowed_origins = parse_allowed_origins(env.get("CORS_ORIGIN") or "")

    if node_env == "development" or not node_env:
        for origin in DEVELOPMENT_ORIGINS:
            if origin not in allowed_origins:
                allowed_origins.append(origin)

    return CORSPolicy(allowed_origins=tuple(allowed_origins))


def policy_allows(policy: CORSPolicy, origins: Sequence[str]) -> Dict[str, bool]:
    """Map each origin to the policy decision, for diagnostics output."""
    return {origin: policy.is_allowed(origin) for origin in origins}
