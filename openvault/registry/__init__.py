"""Service registry: which services exist and which credentials they need.

Module-level functions query the process-wide default registry so callers
can introspect the catalog without constructing a Vault.
"""
from typing import Dict, List, Optional

from .loader import BUNDLED_REGISTRY_PATH, Registry
from .models import (
    AuthMethod,
    Credential,
    CredentialType,
    Service,
    ServiceSummary,
    SetupInstructions,
)

# Lazy loading: the bundled data is parsed on first use, not at import time
_DEFAULT_REGISTRY: Optional[Registry] = None


def get_default_registry() -> Registry:
    """Return the process-wide registry, loading it on first use."""
    global _DEFAULT_REGISTRY

    if _DEFAULT_REGISTRY is None:
        # Imported here to avoid a cycle with the config loader
        from ..vault.domains.config_loader import load_config

        registry_path = load_config().registry_path
        if registry_path:
            _DEFAULT_REGISTRY = Registry.from_file(registry_path)
        else:
            _DEFAULT_REGISTRY = Registry.bundled()

    return _DEFAULT_REGISTRY


def set_default_registry(registry: Optional[Registry]) -> None:
    """Replace the process-wide registry; None forces a reload on next use."""
    global _DEFAULT_REGISTRY
    _DEFAULT_REGISTRY = registry


def get_service(service_id: str) -> Optional[Service]:
    return get_default_registry().get_service(service_id)


def get_credentials(service_id: str) -> Optional[Dict[str, Credential]]:
    return get_default_registry().get_credentials(service_id)


def get_credential(service_id: str, key: str) -> Optional[Credential]:
    return get_default_registry().get_credential(service_id, key)


def get_required_credentials(service_id: str) -> List[str]:
    return get_default_registry().get_required_credentials(service_id)


def find_service_by_credential(key: str) -> Optional[str]:
    return get_default_registry().find_service_by_credential(key)


def get_setup_instructions(service_id: str, key: str) -> SetupInstructions:
    return get_default_registry().get_setup_instructions(service_id, key)


def list_services() -> List[ServiceSummary]:
    return get_default_registry().list_services()


def list_all_credential_keys() -> List[str]:
    return get_default_registry().list_all_credential_keys()


__all__ = [
    "AuthMethod",
    "BUNDLED_REGISTRY_PATH",
    "Credential",
    "CredentialType",
    "Registry",
    "Service",
    "ServiceSummary",
    "SetupInstructions",
    "find_service_by_credential",
    "get_credential",
    "get_credentials",
    "get_default_registry",
    "get_required_credentials",
    "get_service",
    "get_setup_instructions",
    "list_all_credential_keys",
    "list_services",
    "set_default_registry",
]
