"""Input validation for CLI arguments."""
import re
import sys

# Environment variable naming: letters, digits and underscores, not starting with a digit
KEY_PATTERN = r"[A-Za-z_][A-Za-z0-9_]*"


def validate_credential_key(key: str) -> None:
    """
    Validate a credential key is usable as an environment variable name.

    Args:
        key: Credential key to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not key:
        print("Error: Credential key cannot be empty", file=sys.stderr)
        print("\nCredential keys must match: [A-Za-z_][A-Za-z0-9_]*", file=sys.stderr)
        sys.exit(2)

    if not re.fullmatch(KEY_PATTERN, key):
        print(f"Error: Invalid credential key '{key}'", file=sys.stderr)
        print("\nAllowed characters: letters, numbers, underscores (_)", file=sys.stderr)
        print("Keys cannot start with a number.", file=sys.stderr)
        print("\nExamples of valid keys:", file=sys.stderr)
        print("  ✓ GITHUB_TOKEN", file=sys.stderr)
        print("  ✓ PORKBUN_API_KEY", file=sys.stderr)
        print("\nExamples of invalid keys:", file=sys.stderr)
        print("  ✗ github-token (contains hyphen)", file=sys.stderr)
        print("  ✗ 1PASSWORD_TOKEN (starts with a number)", file=sys.stderr)
        sys.exit(2)


def validate_credential_value(value: str) -> None:
    """
    Validate a credential value is not blank and fits on one line.

    Args:
        value: Credential value to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not value or value.strip() == "":
        print("Error: Credential value cannot be empty", file=sys.stderr)
        print("\nTo remove a credential, delete its line from your .env file.", file=sys.stderr)
        sys.exit(2)

    if "\n" in value or "\r" in value:
        print("Error: Credential value cannot contain line breaks", file=sys.stderr)
        print("\n.env files hold one KEY=value per line.", file=sys.stderr)
        sys.exit(2)
