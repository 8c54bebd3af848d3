"""File-based security audit of a project's environment configuration.

Each ``check_*`` method inspects one file and returns an ``AuditCheckResult``;
nothing is accumulated on the auditor, so checks can run in any order or
alone. ``generate_report`` folds a list of results into an ``AuditReport``
whose exit code is 1 for any critical failure, 2 for warnings only, else 0.
"""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from ..domains.cors_configurator import has_wildcard
from ..domains.env_file import (
    PRODUCTION_ENV_FILE,
    env_file_for,
    find_value,
    iter_env_entries,
    node_env_for,
)
from ..domains.models import AuditCheckResult, AuditReport, Severity
from ..domains.secret_manager import (
    DATABASE_PASSWORD_MIN_LENGTH,
    JWT_MIN_LENGTH,
    OAUTH_MIN_LENGTH,
    is_weak_pattern,
)

logger = logging.getLogger(__name__)

ENV_FILES = tuple(env_file_for(node_env) for node_env in ("development", "production", "test"))
GITIGNORE_REQUIRED = (".env.production", ".env.docker.production")
CHECK_NAMES = ("secrets", "cors", "nodeenv", "gitignore", "ssl")

GENERATE_SECRETS_HINT = "Run: wellsense-security secrets generate to generate strong secrets"


def find_weak_secrets(content: str) -> List[Dict[str, str]]:
    """
    Scan ``.env`` content for weak or short secrets.

    Each line is judged on its own and may produce several findings.
    """
    findings = []
    for key, value in iter_env_entries(content):
        if not value:
            continue

        if is_weak_pattern(value):
            findings.append({"key": key, "reason": "Contains weak pattern"})

        if key == "JWT_SECRET" and len(value) < JWT_MIN_LENGTH:
            findings.append({"key": key, "reason": f"Too short ({len(value)} chars, minimum {JWT_MIN_LENGTH})"})

        if "PASSWORD" in key and len(value) < DATABASE_PASSWORD_MIN_LENGTH:
            findings.append(
                {"key": key, "reason": f"Too short ({len(value)} chars, minimum {DATABASE_PASSWORD_MIN_LENGTH})"}
            )

        if "CLIENT_SECRET" in key and len(value) < OAUTH_MIN_LENGTH:
            findings.append({"key": key, "reason": f"Too short ({len(value)} chars, minimum {OAUTH_MIN_LENGTH})"})

    return findings


class SecurityAuditor:
    """Audits the ``.env*`` files and ``.gitignore`` under one project root."""

    def __init__(self, root: Union[str, Path] = "."):
        self.root = Path(root)

    def _read(self, filename: str) -> Optional[str]:
        """
        File content, or None if the file does not exist.

        Undecodable bytes are replaced rather than rejected.

        Raises:
            OSError: If the file exists but cannot be read
        """
        path = self.root / filename
        if not path.is_file():
            logger.debug(f"Audit target not found: {path}")
            return None
        return path.read_text(encoding="utf-8", errors="replace")

    def _unreadable(self, name: str, category: str, filename: str, error: OSError) -> AuditCheckResult:
        logger.debug(f"Audit target unreadable: {self.root / filename}: {error}")
        critical = filename in (PRODUCTION_ENV_FILE, ".gitignore")
        return AuditCheckResult(
            name=name,
            category=category,
            severity=Severity.CRITICAL if critical else Severity.WARNING,
            passed=False,
            message=f"Cannot read {filename}: {error.strerror or error}",
            recommendation=f"Check the permissions of {filename}",
        )

    def check_weak_secrets(self, env_file: str) -> AuditCheckResult:
        name = f"Weak Secrets - {env_file}"
        is_production = env_file == PRODUCTION_ENV_FILE
        try:
            content = self._read(env_file)
        except OSError as e:
            return self._unreadable(name, "secrets", env_file, e)

        if content is None:
            return AuditCheckResult(
                name=name,
                category="secrets",
                severity=Severity.CRITICAL if is_production else Severity.INFO,
                passed=not is_production,
                message=f"File not found: {env_file}",
                recommendation=(
                    f"Create {PRODUCTION_ENV_FILE} with strong secrets" if is_production else "File is optional"
                ),
            )

        findings = find_weak_secrets(content)
        passed = not findings
        return AuditCheckResult(
            name=name,
            category="secrets",
            severity=Severity.CRITICAL if is_production else Severity.WARNING,
            passed=passed,
            message="No weak secrets detected" if passed else f"Found {len(findings)} weak secret(s)",
            details=findings,
            recommendation=None if passed else GENERATE_SECRETS_HINT,
        )

    def check_cors_config(self, env_file: str) -> AuditCheckResult:
        name = f"CORS Configuration - {env_file}"
        try:
            content = self._read(env_file)
        except OSError as e:
            return self._unreadable(name, "cors", env_file, e)

        if content is None:
            return AuditCheckResult(
                name=name,
                category="cors",
                severity=Severity.WARNING,
                passed=False,
                message=f"File not found: {env_file}",
                recommendation=f"Create {env_file} with proper CORS configuration",
            )

        cors_origin = find_value(content, "CORS_ORIGIN")
        if cors_origin is None:
            return AuditCheckResult(
                name=name,
                category="cors",
                severity=Severity.WARNING,
                passed=False,
                message="CORS_ORIGIN not configured",
                recommendation="Set CORS_ORIGIN to your production domain(s)",
            )

        if has_wildcard(cors_origin):
            return AuditCheckResult(
                name=name,
                category="cors",
                severity=Severity.CRITICAL,
                passed=False,
                message="CORS_ORIGIN contains wildcard (*) - security risk!",
                recommendation="Replace wildcard with specific allowed origins",
            )

        return AuditCheckResult(
            name=name,
            category="cors",
            severity=Severity.INFO,
            passed=True,
            message="CORS configuration is secure",
        )

    def check_node_env(self, env_file: str) -> AuditCheckResult:
        name = f"NODE_ENV - {env_file}"
        try:
            content = self._read(env_file)
        except OSError as e:
            return self._unreadable(name, "nodeenv", env_file, e)

        if content is None:
            return AuditCheckResult(
                name=name,
                category="nodeenv",
                severity=Severity.INFO,
                passed=True,
                message=f"File not found: {env_file}",
            )

        expected = node_env_for(env_file)
        node_env = find_value(content, "NODE_ENV")

        if node_env is None:
            return AuditCheckResult(
                name=name,
                category="nodeenv",
                severity=Severity.WARNING,
                passed=False,
                message="NODE_ENV not set",
                recommendation=f"Add NODE_ENV={expected} to {env_file}",
            )

        if node_env != expected:
            return AuditCheckResult(
                name=name,
                category="nodeenv",
                severity=Severity.WARNING,
                passed=False,
                message=f"NODE_ENV is '{node_env}', expected '{expected}'",
                recommendation=f"Change NODE_ENV to '{expected}' in {env_file}",
            )

        return AuditCheckResult(
            name=name,
            category="nodeenv",
            severity=Severity.INFO,
            passed=True,
            message=f"NODE_ENV correctly set to '{node_env}'",
        )

    def check_gitignore(self) -> AuditCheckResult:
        name = "Gitignore Configuration"
        try:
            content = self._read(".gitignore")
        except OSError as e:
            return self._unreadable(name, "gitignore", ".gitignore", e)

        if content is None:
            return AuditCheckResult(
                name=name,
                category="gitignore",
                severity=Severity.CRITICAL,
                passed=False,
                message=".gitignore file not found",
                recommendation="Create .gitignore and add " + " and ".join(GITIGNORE_REQUIRED),
            )

        # Substring scan; glob patterns are not interpreted
        present = {entry: entry in content for entry in GITIGNORE_REQUIRED}
        missing = [entry for entry, found in present.items() if not found]

        if missing:
            return AuditCheckResult(
                name=name,
                category="gitignore",
                severity=Severity.CRITICAL,
                passed=False,
                message="Production environment files not in .gitignore: " + ", ".join(missing),
                details=present,
                recommendation="Add " + " and ".join(missing) + " to .gitignore",
            )

        return AuditCheckResult(
            name=name,
            category="gitignore",
            severity=Severity.INFO,
            passed=True,
            message="Production environment files are properly ignored",
            details=present,
        )

    def check_ssl_config(self, env_file: str) -> AuditCheckResult:
        """Textual check only; certificate files on disk are not inspected."""
        name = f"SSL Configuration - {env_file}"
        try:
            content = self._read(env_file)
        except OSError as e:
            return self._unreadable(name, "ssl", env_file, e)

        if content is None:
            return AuditCheckResult(
                name=name,
                category="ssl",
                severity=Severity.WARNING,
                passed=False,
                message=f"File not found: {env_file}",
                recommendation=f"Create {env_file} with SSL configuration",
            )

        if find_value(content, "ENABLE_HTTPS") != "true":
            return AuditCheckResult(
                name=name,
                category="ssl",
                severity=Severity.WARNING,
                passed=False,
                message="HTTPS not enabled (recommended for production)",
                recommendation="Set ENABLE_HTTPS=true and configure SSL certificates",
            )

        if find_value(content, "SSL_KEY_PATH") is None or find_value(content, "SSL_CERT_PATH") is None:
            return AuditCheckResult(
                name=name,
                category="ssl",
                severity=Severity.WARNING,
                passed=False,
                message="SSL certificate paths not configured",
                recommendation="Set SSL_KEY_PATH and SSL_CERT_PATH",
            )

        return AuditCheckResult(
            name=name,
            category="ssl",
            severity=Severity.INFO,
            passed=True,
            message="SSL configuration present",
            recommendation="Verify certificate files exist and are valid",
        )

    def _check_groups(self) -> Dict[str, List[Callable[[], AuditCheckResult]]]:
        return {
            "secrets": [lambda f=f: self.check_weak_secrets(f) for f in ENV_FILES],
            "cors": [lambda: self.check_cors_config(PRODUCTION_ENV_FILE)],
            "nodeenv": [lambda f=f: self.check_node_env(f) for f in ENV_FILES],
            "gitignore": [self.check_gitignore],
            "ssl": [lambda: self.check_ssl_config(PRODUCTION_ENV_FILE)],
        }

    def run_checks(self, names: Sequence[str] = CHECK_NAMES) -> AuditReport:
        """
        Run the named check groups, always in ``CHECK_NAMES`` order.

        Raises:
            ValueError: If a name is not one of ``CHECK_NAMES``
        """
        unknown = [n for n in names if n not in CHECK_NAMES]
        if unknown:
            raise ValueError(
                f"Unknown check '{unknown[0]}'. Valid checks: {', '.join(CHECK_NAMES)}"
            )

        groups = self._check_groups()
        results = []
        for group in CHECK_NAMES:
            if group not in names:
                continue
            for check in groups[group]:
                result = check()
                logger.debug(f"{result.name}: {'passed' if result.passed else 'failed'}")
                results.append(result)

        return generate_report(results)

    def run_all_checks(self) -> AuditReport:
        return self.run_checks(CHECK_NAMES)


def generate_report(results: Iterable[AuditCheckResult], timestamp: Optional[str] = None) -> AuditReport:
    """
    Fold check results into a report.

    Exit codes: 1 if any critical check failed, else 2 if any check failed,
    else 0.
    """
    results = tuple(results)
    failed = [r for r in results if not r.passed]

    if any(r.severity == Severity.CRITICAL for r in failed):
        exit_code = 1
    elif failed:
        exit_code = 2
    else:
        exit_code = 0

    return AuditReport(
        passed=exit_code == 0,
        exit_code=exit_code,
        results=results,
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
    )


def render_report(report: AuditReport) -> str:
    """Human-readable audit report."""
    rule = "=" * 80
    lines = [
        rule,
        "SECURITY AUDIT REPORT",
        rule,
        "",
        f"Timestamp: {report.timestamp}",
        f"Total Checks: {report.total}",
        f"Passed: {report.passed_count}",
        f"Failed: {report.failed_count}",
        f"  - Critical: {report.critical_count}",
        f"  - Warnings: {report.warning_count}",
        "",
        rule,
        "CHECK RESULTS",
        rule,
        "",
    ]

    for result in report.results:
        status = "PASS" if result.passed else "FAIL"
        severity = "" if result.passed else f" [{result.severity.value.upper()}]"
        lines.append(f"{status} {result.name}{severity}")
        lines.append(f"   {result.message}")
        if isinstance(result.details, list):
            for detail in result.details:
                lines.append(f"   - {detail['key']}: {detail['reason']}")
        if result.recommendation:
            lines.append(f"   Recommendation: {result.recommendation}")
        lines.append("")

    lines.extend([rule, "SUMMARY", rule, ""])
    if report.exit_code == 1:
        lines.append(f"CRITICAL: {report.critical_count} critical issue(s) found!")
        lines.append("   Fix these issues before deploying to production.")
    elif report.exit_code == 2:
        lines.append(f"WARNING: {report.warning_count} warning(s) found.")
        lines.append("   Review and address these issues.")
    else:
        lines.append("All security checks passed!")
        lines.append("   Your configuration is secure for production deployment.")

    return "\n".join(lines) + "\n"
