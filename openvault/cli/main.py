"""CLI entrypoint for openvault."""
import sys
import argparse
import logging

from .validators import validate_credential_key, validate_credential_value

VERSION = "0.1.0"

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def _mask(value: str) -> str:
    """Show only enough of a value to recognize it."""
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-2:]}"


def _make_vault(args, **kwargs):
    from openvault.vault.workflows.vault import Vault

    env_path = getattr(args, "env_path", None)
    if env_path:
        kwargs["env_path"] = env_path
    return Vault.from_config(**kwargs)


def _print_setup(registry, service_id: str, key: str) -> None:
    instructions = registry.get_setup_instructions(service_id, key)
    if instructions.url:
        print(f"    Get it here: {instructions.url}")
    for i, step in enumerate(instructions.steps, 1):
        print(f"    {i}. {step}")


def cmd_version(args):
    """Show version information."""
    print(f"openvault {VERSION}")


def cmd_list(args):
    """List registered services, or the credentials of one service."""
    from openvault.registry import get_default_registry

    registry = get_default_registry()

    if not args.service:
        print(f"Registered services (registry v{registry.version}):\n")
        for summary in registry.list_services():
            print(f"  {summary.id:<18} {summary.name} - {summary.description}")
        return

    service = registry.get_service(args.service)
    if service is None:
        print(f"Error: Unknown service '{args.service}'", file=sys.stderr)
        print("Run 'openvault list' to see registered services.", file=sys.stderr)
        sys.exit(1)

    print(f"{service.name} ({service.id})")
    if service.description:
        print(f"  {service.description}")
    if service.docs:
        print(f"  Docs: {service.docs}")
    print("\nCredentials:")
    for key, credential in service.credentials.items():
        flag = "required" if credential.required else "optional"
        print(f"  {key} [{flag}, {credential.type.value}]")
        if credential.description:
            print(f"    {credential.description}")
        if credential.setup_url:
            print(f"    Setup: {credential.setup_url}")
        if credential.default is not None:
            print(f"    Default: {credential.default}")


def cmd_check(args):
    """Report whether each key resolves and from where."""
    vault = _make_vault(args, fail_on_missing=False, validate=False)

    missing = 0
    for key in args.keys:
        resolved = vault.resolve(key)
        if resolved is None:
            missing += 1
            print(f"✗ {key}: not found")
            service_id = vault.registry.find_service_by_credential(key)
            if service_id:
                _print_setup(vault.registry, service_id, key)
        else:
            print(f"✓ {key}: {_mask(resolved.value)} (from {resolved.source})")

    if missing:
        print(f"\n{missing} of {len(args.keys)} credentials missing (searched {vault.env_path} and environment)",
              file=sys.stderr)
        sys.exit(1)


def cmd_validate(args):
    """Check a service's required credentials are present and well-formed."""
    from openvault.vault.domains.validator import validate_credential

    vault = _make_vault(args, fail_on_missing=False, validate=False)
    registry = vault.registry

    service = registry.get_service(args.service)
    if service is None:
        print(f"Error: Unknown service '{args.service}'", file=sys.stderr)
        print("Run 'openvault list' to see registered services.", file=sys.stderr)
        sys.exit(1)

    result = vault.validate_service(service.id)

    for key in service.required_keys:
        if key in result.missing:
            print(f"✗ {key}: missing")
            _print_setup(registry, service.id, key)
            continue

        check = validate_credential(registry, service.id, key, vault.get(key))
        if check.valid:
            print(f"✓ {key}")
        else:
            # Formats are heuristics: report, but do not fail the service
            print(f"! {key}: {check.error}")

    if not result.valid:
        print(f"\n{service.name}: missing {', '.join(result.missing)}", file=sys.stderr)
        sys.exit(1)

    print(f"\n{service.name}: all required credentials present")


def cmd_add(args):
    """Add or update a credential in the .env file."""
    from openvault.registry import get_default_registry
    from openvault.vault.domains.config_loader import load_config
    from openvault.vault.domains.env_file import find_env_file, write_env_value
    from openvault.vault.domains.validator import validate_credential

    validate_credential_key(args.key)
    validate_credential_value(args.value)

    registry = get_default_registry()
    service_id = registry.find_service_by_credential(args.key)
    if service_id:
        check = validate_credential(registry, service_id, args.key, args.value)
        if not check.valid:
            logger.warning(f"Warning: {check.error}")
    else:
        logger.warning(f"Warning: {args.key} is not a registered credential key")

    # Same resolution as the vault: flag, then config/OPENVAULT_ENV_PATH, then nearest .env
    env_path = args.env_path or load_config().env_path or find_env_file()
    write_env_value(env_path, args.key, args.value)
    print(f"Saved {args.key} to {env_path}")


def cmd_config_show(args):
    """Show current config file path and effective settings."""
    from openvault.vault.domains.config_loader import get_config_path, load_config

    config = load_config()

    if config.source:
        print(f"Config path: {config.source}")
        print("Source: file")
    else:
        print(f"Config path: {get_config_path()}")
        print("Source: default (file not found)")

    print(f"env_path: {config.env_path or '(auto-detect nearest .env)'}")
    print(f"fail_on_missing: {str(config.fail_on_missing).lower()}")
    print(f"validate: {str(config.validate).lower()}")
    print(f"registry: {config.registry_path or '(bundled)'}")


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (credential missing, unknown service, bad config, etc.)
        2 - Usage errors (invalid arguments, invalid key format, etc.)
    """
    parser = argparse.ArgumentParser(
        prog="openvault",
        description="OpenVault CLI - standardized credentials for reusable skills",
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (credential missing, unknown service, bad config, etc.)
  2 - Usage error (invalid arguments, invalid key format, etc.)

Environment variables:
  OPENVAULT_CONFIG   - Config file path (default: ~/.config/openvault/config.yml)
  OPENVAULT_ENV_PATH - Credential file path (overrides config file)

Credential lookup order:
  1. .env file (nearest one above the current directory)
  2. Process environment
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # version command
    _version_parser = subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of openvault"
    )

    # list command
    list_parser = subparsers.add_parser(
        "list",
        help="List services or a service's credentials",
        description="List registered services. With --service, list that service's credentials."
    )
    list_parser.add_argument(
        "--service",
        help="Service ID to describe (e.g. twitter, porkbun)"
    )

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Check whether credentials resolve",
        description="""
Report, for each key, whether it resolves and from which source
(file, override or env). Values are masked.

Exit codes:
  0 - All keys found
  1 - At least one key missing
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    check_parser.add_argument(
        "keys",
        nargs="+",
        help="Credential keys to check"
    )
    check_parser.add_argument(
        "--env-path",
        help="Credential file to use instead of the nearest .env"
    )

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a service's required credentials",
        description="""
Check that every required credential for a service is present, and
report values that do not match the expected format.

Exit codes:
  0 - All required credentials present
  1 - Unknown service, or required credentials missing
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    validate_parser.add_argument(
        "service",
        help="Service ID (e.g. porkbun)"
    )
    validate_parser.add_argument(
        "--env-path",
        help="Credential file to use instead of the nearest .env"
    )

    # add command
    add_parser = subparsers.add_parser(
        "add",
        help="Add or update a credential in the .env file",
        description="""
Write KEY=VALUE to the credential file. An existing entry for KEY is
replaced. Values that do not match the registry format produce a warning
but are still saved.

Exit codes:
  0 - Credential saved
  2 - Invalid key, or empty or multi-line value
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_parser.add_argument(
        "key",
        help="Credential key (format: [A-Za-z_][A-Za-z0-9_]*)"
    )
    add_parser.add_argument(
        "value",
        help="Credential value"
    )
    add_parser.add_argument(
        "--env-path",
        help="Credential file to write (default: configured env_path, else nearest .env)"
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Inspect openvault configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    # config show command
    _config_show_parser = config_subparsers.add_parser(
        "show",
        help="Show config path and effective settings",
        description="""
Display the configuration file path, its source and the effective settings.

Sources:
  - file: Config file found (OPENVAULT_CONFIG or ~/.config/openvault/config.yml)
  - default: No config file, built-in defaults in use
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # If no command provided, show help and exit with usage error code
    if not args.command:
        parser.print_help()
        sys.exit(2)

    # Route to command handlers
    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "list":
            cmd_list(args)
        elif args.command == "check":
            cmd_check(args)
        elif args.command == "validate":
            cmd_validate(args)
        elif args.command == "add":
            cmd_add(args)
        elif args.command == "config":
            if args.config_command == "show":
                cmd_config_show(args)
            else:
                config_parser.print_help()
                sys.exit(2)
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
