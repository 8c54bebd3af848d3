"""Helpers for reading ``.env``-style files as the auditor sees them."""
import re
from typing import Iterator, Optional, Tuple

PRODUCTION_ENV_FILE = ".env.production"
TEST_ENV_FILE = ".env.test"
DEFAULT_ENV_FILE = ".env"


def iter_env_entries(content: str) -> Iterator[Tuple[str, str]]:
    """
    Yield ``(key, value)`` pairs from ``.env`` content.

    Blank lines and ``#`` comments are skipped. The value is everything after
    the first ``=`` so it may contain ``=`` itself.
    """
    for line in content.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, _, value = stripped.partition("=")
        yield key, value


def find_value(content: str, key: str) -> Optional[str]:
    """
    First ``KEY=value`` occurrence anywhere in ``content``, trimmed.

    This is a plain text search, so a commented-out assignment still counts.
    """
    match = re.search(re.escape(key) + r"=(.+)", content)
    if not match:
        return None
    return match.group(1).strip()


DEFAULT_NODE_ENV = "development"

# Any NODE_ENV not listed loads DEFAULT_ENV_FILE
ENV_FILES_BY_NODE_ENV = {
    DEFAULT_NODE_ENV: DEFAULT_ENV_FILE,
    "production": PRODUCTION_ENV_FILE,
    "test": TEST_ENV_FILE,
}


def env_file_for(node_env: Optional[str]) -> str:
    """Environment file loaded for ``node_env``."""
    return ENV_FILES_BY_NODE_ENV.get(node_env, DEFAULT_ENV_FILE)


def node_env_for(env_file: str) -> str:
    """NODE_ENV an environment file is expected to declare."""
    for node_env, filename in ENV_FILES_BY_NODE_ENV.items():
        if filename == env_file:
            return node_env
    return DEFAULT_NODE_ENV
