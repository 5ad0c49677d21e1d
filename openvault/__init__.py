"""OpenVault: standardized credentials for reusable skills.

Usage:
    from openvault import Vault

    vault = Vault()
    token = vault.get("TWITTER_BEARER_TOKEN")

    if not vault.validate_service("porkbun").valid:
        ...
"""
from .errors import (
    ConfigError,
    CredentialNotFound,
    RegistryError,
    UnknownCredential,
    VaultError,
)
from .registry import (
    AuthMethod,
    Credential,
    CredentialType,
    Registry,
    Service,
    find_service_by_credential,
    get_credential,
    get_default_registry,
    get_required_credentials,
    get_service,
    get_setup_instructions,
    list_all_credential_keys,
    list_services,
)
from .vault.domains.validator import ValidationResult
from .vault.domains.validator import validate_credential as _validate_credential
from .vault.workflows.vault import (
    ResolvedCredential,
    ServiceValidation,
    Vault,
    create_vault,
)

__version__ = "0.1.0"


def validate_credential(service_id: str, key: str, value: str) -> ValidationResult:
    """Check a value against the default registry's pattern for a credential."""
    return _validate_credential(get_default_registry(), service_id, key, value)


__all__ = [
    "AuthMethod",
    "ConfigError",
    "Credential",
    "CredentialNotFound",
    "CredentialType",
    "Registry",
    "RegistryError",
    "ResolvedCredential",
    "Service",
    "ServiceValidation",
    "UnknownCredential",
    "ValidationResult",
    "Vault",
    "VaultError",
    "create_vault",
    "find_service_by_credential",
    "get_credential",
    "get_default_registry",
    "get_required_credentials",
    "get_service",
    "get_setup_instructions",
    "list_all_credential_keys",
    "list_services",
    "validate_credential",
]
