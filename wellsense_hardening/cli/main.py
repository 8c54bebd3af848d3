"""CLI entrypoint for wellsense-hardening."""
import sys
import os
import json
import argparse
import logging
from pathlib import Path

from .validators import validate_secret_length, validate_secret_name

VERSION = "0.1.0"

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def _load_env(args):
    """Environment mapping and NODE_ENV for env/secrets commands."""
    from dotenv import dotenv_values

    env_file = getattr(args, "env_file", None)
    if env_file:
        path = Path(env_file)
        if not path.is_file():
            print(f"Error: Env file does not exist: {path}", file=sys.stderr)
            sys.exit(1)
        env = {k: v for k, v in dotenv_values(path).items() if v is not None}
        logger.debug(f"Loaded {len(env)} variables from {path}")
    else:
        env = dict(os.environ)

    node_env = getattr(args, "node_env", None) or env.get("NODE_ENV")
    return env, node_env


def _print_messages(label, messages, stream):
    if messages:
        print(f"{label}:", file=stream)
        for message in messages:
            print(f"   - {message}", file=stream)


def cmd_version(args):
    """Show version information."""
    print(f"wellsense-hardening {VERSION}")


def cmd_secrets_generate(args):
    """Generate one secret type, or all of them with an example .env.production."""
    from wellsense_hardening.security.workflows.secret_generation import generate_all, generate_one

    validate_secret_length(args.type, args.length)

    if args.type:
        print(generate_one(args.type, args.length))
    else:
        print(generate_all())


def cmd_secrets_check(args):
    """Validate one secret from the environment."""
    from wellsense_hardening.security.workflows.environment_validator import (
        get_secret_spec,
        validate_secret_value,
    )

    validate_secret_name(args.secret_name)
    env, node_env = _load_env(args)
    strict = args.strict or node_env == "production"

    value = env.get(args.secret_name)
    if not value:
        print(f"Error: {args.secret_name} is not set", file=sys.stderr)
        sys.exit(1)

    spec = get_secret_spec(args.secret_name)
    result = validate_secret_value(spec, value, strict)

    if result.errors or result.warnings:
        _print_messages("Errors", result.errors, sys.stderr)
        _print_messages("Warnings", result.warnings, sys.stderr)
        sys.exit(1)

    print(f"Success: {args.secret_name} meets the strength requirements")


def cmd_env_validate(args):
    """Run every startup environment check."""
    from wellsense_hardening.security.workflows.environment_validator import validate_all

    env, node_env = _load_env(args)
    result = validate_all(env, node_env)

    _print_messages("Errors", result.errors, sys.stderr)
    _print_messages("Warnings", result.warnings, sys.stderr)

    if not result.valid:
        print("\nConfiguration validation failed.", file=sys.stderr)
        print("Run: wellsense-security secrets generate to generate strong secrets", file=sys.stderr)
        sys.exit(1)

    print(f"Success: configuration is valid for NODE_ENV={node_env or 'development'}")


def cmd_env_cors(args):
    """Show the CORS policy and, optionally, decisions for given origins."""
    from wellsense_hardening.security.domains.cors_configurator import get_cors_options, policy_allows

    env, node_env = _load_env(args)
    policy = get_cors_options(env, node_env)

    output = policy.to_dict()
    if args.origins:
        output["decisions"] = policy_allows(policy, args.origins)
    print(json.dumps(output, indent=2))


def cmd_env_https(args):
    """Check that HTTPS certificates configured in the environment load."""
    from wellsense_hardening.security.domains.ssl_manager import get_https_options

    env, _node_env = _load_env(args)
    options = get_https_options(env)

    if options is None:
        print("HTTPS is not enabled (ENABLE_HTTPS is not 'true')")
        return

    print(f"Success: loaded SSL key ({len(options.key)} bytes) and certificate ({len(options.cert)} bytes)")


def cmd_audit(args):
    """Run the file-based security audit and exit with its exit code."""
    from wellsense_hardening.security.domains.config_loader import get_audit_root, load_config
    from wellsense_hardening.security.workflows.security_audit import (
        CHECK_NAMES,
        SecurityAuditor,
        render_report,
    )

    root = Path(args.root) if args.root else get_audit_root(load_config())
    if not root.is_dir():
        print(f"Error: Audit root is not a directory: {root}", file=sys.stderr)
        sys.exit(1)

    auditor = SecurityAuditor(root)
    report = auditor.run_checks(args.check or CHECK_NAMES)

    if args.format == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(render_report(report))

    sys.exit(report.exit_code)


def cmd_config_set_path(args):
    """Set config file path preference."""
    from wellsense_hardening.security.domains.preferences import set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference("config_path", str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show current config file path and its source."""
    from wellsense_hardening.security.domains.config_loader import default_config_path, resolve_config_path

    config_path, source = resolve_config_path()
    if config_path is None:
        print(f"Config path: {default_config_path()}")
        print("Source: none (file not found, using built-in defaults)")
    else:
        print(f"Config path: {config_path}")
        print(f"Source: {source}")


def cmd_config_clear(args):
    """Clear config path preference."""
    from wellsense_hardening.security.domains.config_loader import default_config_path
    from wellsense_hardening.security.domains.preferences import clear_preference

    clear_preference("config_path")
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def _add_env_source_args(parser):
    parser.add_argument(
        "--env-file",
        help="Read variables from this .env file instead of the process environment"
    )
    parser.add_argument(
        "--node-env",
        help="NODE_ENV to validate against (default: NODE_ENV from the loaded variables)"
    )


def _configure_logging(args):
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        return

    from wellsense_hardening.security.domains.config_loader import get_log_level, load_config

    level = get_log_level(load_config())
    if level:
        logging.getLogger().setLevel(level)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="wellsense-security",
        description="WellSense security hardening toolkit - secret generation, environment validation and audits",
        epilog="""
Exit codes:
  0 - Success (audit: all checks passed)
  1 - Runtime error or failed validation (audit: critical issue found)
  2 - Usage error (audit: warnings only)

Configuration:
  Default location: ~/.config/wellsense-hardening/config.yml
  Custom path: Set with 'wellsense-security config set-path <path>'
  View current: Run 'wellsense-security config show'
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of wellsense-hardening"
    )

    # secrets command
    secrets_parser = subparsers.add_parser(
        "secrets",
        help="Secret generation and checking",
        description="Generate strong secrets or check existing ones"
    )
    secrets_subparsers = secrets_parser.add_subparsers(dest="secrets_command")

    generate_parser = secrets_subparsers.add_parser(
        "generate",
        help="Generate cryptographically strong secrets",
        description="""
Generate secrets for production use.

Without --type, every secret type is generated along with an example
.env.production file.

Minimum lengths: jwt=64, database=32, oauth=48
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    generate_parser.add_argument(
        "--type",
        choices=["jwt", "database", "oauth"],
        type=str.lower,
        help="Generate a single secret type"
    )
    generate_parser.add_argument(
        "--length",
        type=int,
        help="Custom length (must not be below the type minimum)"
    )

    check_parser = secrets_subparsers.add_parser(
        "check",
        help="Check the strength of a configured secret",
        description="""
Validate one secret with the same rules the startup validator uses.

Exit codes:
  0 - Secret meets the requirements
  1 - Secret missing or too weak
  2 - Unknown secret name
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    check_parser.add_argument(
        "secret_name",
        help="JWT_SECRET, DATABASE_URL, MONGODB_URI or GOOGLE_CLIENT_SECRET"
    )
    check_parser.add_argument(
        "--strict",
        action="store_true",
        help="Report failures as errors (implied when NODE_ENV=production)"
    )
    _add_env_source_args(check_parser)

    # env command
    env_parser = subparsers.add_parser(
        "env",
        help="Environment configuration checks",
        description="Validate environment variables used at application startup"
    )
    env_subparsers = env_parser.add_subparsers(dest="env_command")

    validate_parser = env_subparsers.add_parser(
        "validate",
        help="Validate NODE_ENV, secrets, CORS and SSL settings",
        description="Exit 1 if any error is found; warnings alone exit 0"
    )
    _add_env_source_args(validate_parser)

    cors_parser = env_subparsers.add_parser(
        "cors",
        help="Show the effective CORS policy",
        description="Print the CORS options and whether each given origin is allowed"
    )
    cors_parser.add_argument(
        "origins",
        nargs="*",
        help="Request origins to test against the policy"
    )
    _add_env_source_args(cors_parser)

    https_parser = env_subparsers.add_parser(
        "https",
        help="Check SSL certificate configuration",
        description="Validate and load SSL_KEY_PATH and SSL_CERT_PATH when ENABLE_HTTPS=true"
    )
    _add_env_source_args(https_parser)

    # audit command
    audit_parser = subparsers.add_parser(
        "audit",
        help="Audit .env files and .gitignore",
        description="""
Scan a project's environment files for security problems.

Available checks:
  secrets    - Weak secrets in .env, .env.production, .env.test
  cors       - Wildcard CORS in .env.production
  nodeenv    - NODE_ENV matches each env file
  gitignore  - Production env files are ignored
  ssl        - HTTPS configured in .env.production

Exit codes:
  0 - All checks passed
  1 - At least one critical issue
  2 - Warnings only
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    audit_parser.add_argument(
        "--check",
        action="append",
        choices=["secrets", "cors", "gitignore", "ssl", "nodeenv"],
        help="Run only this check (repeatable)"
    )
    audit_parser.add_argument(
        "--root",
        help="Project directory to audit (default: audit.root from config, else current directory)"
    )
    audit_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Report format"
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage wellsense-hardening configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="Store the absolute path to a config file in ~/.config/wellsense-hardening/preferences.json"
    )
    config_set_path_parser.add_argument(
        "path",
        help="Path to config file"
    )
    config_subparsers.add_parser(
        "show",
        help="Show current config path",
        description="Display the configuration file path and its source (preference, default or none)"
    )
    config_subparsers.add_parser(
        "clear",
        help="Clear config path preference",
        description="Remove the config path preference; the default location is used afterwards"
    )

    return parser, {
        "secrets": (secrets_parser, "secrets_command", {
            "generate": cmd_secrets_generate,
            "check": cmd_secrets_check,
        }),
        "env": (env_parser, "env_command", {
            "validate": cmd_env_validate,
            "cors": cmd_env_cors,
            "https": cmd_env_https,
        }),
        "config": (config_parser, "config_command", {
            "set-path": cmd_config_set_path,
            "show": cmd_config_show,
            "clear": cmd_config_clear,
        }),
    }


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors or failed validation; audit found a critical issue
        2 - Usage errors; audit found warnings only
    """
    parser, groups = build_parser()
    args = parser.parse_args(argv)

    # If no command provided, show help and exit with usage error code
    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        _configure_logging(args)

        if args.command == "version":
            cmd_version(args)
        elif args.command == "audit":
            cmd_audit(args)
        elif args.command in groups:
            group_parser, dest, handlers = groups[args.command]
            handler = handlers.get(getattr(args, dest))
            if handler is None:
                group_parser.print_help()
                sys.exit(2)
            handler(args)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
