"""Format validation of credential values against registry patterns."""
import re
from dataclasses import dataclass
from typing import Optional

from ...registry import Registry


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a format check."""
    valid: bool
    error: Optional[str] = None


def validate_credential(registry: Registry, service_id: str, key: str, value: str) -> ValidationResult:
    """
    Check a credential value against its registry pattern.

    Patterns are best-effort heuristics, so callers usually only warn on
    failure.

    Args:
        registry: Registry holding the credential definition
        service_id: Service that owns the credential
        key: Credential key
        value: Candidate value

    Returns:
        ValidationResult, with a human-readable error when invalid
    """
    credential = registry.get_credential(service_id, key)
    if credential is None:
        return ValidationResult(False, f"Unknown credential: {key} for service: {service_id}")

    if not credential.pattern:
        return ValidationResult(True)

    try:
        matched = re.fullmatch(credential.pattern, value)
    except re.error as e:
        return ValidationResult(False, f"Invalid pattern for {key} in registry: {e}")

    if matched is None:
        return ValidationResult(
            False,
            f"Invalid format for {key}. Expected pattern: {credential.pattern}",
        )

    return ValidationResult(True)
