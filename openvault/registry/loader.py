"""Service registry store: loading, validation and read-only lookups."""
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from ..errors import RegistryError
from .models import (
    AuthMethod,
    Credential,
    CredentialType,
    Service,
    ServiceSummary,
    SetupInstructions,
)

logger = logging.getLogger(__name__)

BUNDLED_REGISTRY_PATH = Path(__file__).parent / "services.yml"


class Registry:
    """
    Immutable catalog of services and their credential definitions.

    Build it once per process with one of the ``from_*`` constructors and
    hand it to every Vault that needs it.
    """

    def __init__(self, services: Mapping[str, Service], version: str = "0.0.0"):
        self.version = version
        self._services: Dict[str, Service] = dict(services)
        # key -> service id, first owner wins
        self._owners: Dict[str, str] = {}
        for service_id, service in self._services.items():
            for key in service.credentials:
                self._owners.setdefault(key, service_id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Registry":
        """
        Build a registry from parsed registry data.

        Args:
            data: Mapping with ``version`` and ``services`` keys

        Returns:
            Registry instance

        Raises:
            RegistryError: If the data is malformed or a credential key is
                declared by more than one service
        """
        if not isinstance(data, Mapping):
            raise RegistryError("Registry data must be a mapping with a 'services' section")

        services_data = data.get("services")
        if not isinstance(services_data, Mapping):
            raise RegistryError("Missing 'services' section in registry data")

        services: Dict[str, Service] = {}
        owners: Dict[str, str] = {}
        for service_id, raw in services_data.items():
            service = _parse_service(str(service_id), raw)
            for key in service.credentials:
                if key in owners:
                    raise RegistryError(
                        f"Credential key {key} is declared by both "
                        f"'{owners[key]}' and '{service.id}'"
                    )
                owners[key] = service.id
            services[service.id] = service

        return cls(services, version=str(data.get("version", "0.0.0")))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Registry":
        """
        Load a registry from a YAML file.

        Raises:
            RegistryError: If the file is missing, unreadable or invalid
        """
        path = Path(path)
        if not path.exists():
            raise RegistryError(f"Registry file not found at: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RegistryError(f"Failed to parse YAML registry at {path}: {e}")
        except OSError as e:
            raise RegistryError(f"Failed to read registry file at {path}: {e}")

        if not data:
            raise RegistryError(f"Registry file at {path} is empty")

        registry = cls.from_dict(data)
        logger.debug(f"Loaded registry v{registry.version} with {len(registry)} services from {path}")
        return registry

    @classmethod
    def bundled(cls) -> "Registry":
        """Load the registry data shipped with the package."""
        return cls.from_file(BUNDLED_REGISTRY_PATH)

    def __len__(self) -> int:
        return len(self._services)

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._services

    def get_service(self, service_id: str) -> Optional[Service]:
        return self._services.get(service_id)

    def get_credentials(self, service_id: str) -> Optional[Dict[str, Credential]]:
        service = self._services.get(service_id)
        return dict(service.credentials) if service else None

    def get_credential(self, service_id: str, key: str) -> Optional[Credential]:
        service = self._services.get(service_id)
        if service is None:
            return None
        return service.credentials.get(key)

    def get_required_credentials(self, service_id: str) -> List[str]:
        """Required credential keys for a service; empty for unknown services."""
        service = self._services.get(service_id)
        if service is None:
            return []
        return service.required_keys

    def find_service_by_credential(self, key: str) -> Optional[str]:
        """Id of the service that declares ``key``, or None."""
        return self._owners.get(key)

    def get_setup_instructions(self, service_id: str, key: str) -> SetupInstructions:
        credential = self.get_credential(service_id, key)
        if credential is None:
            return SetupInstructions()
        return SetupInstructions(url=credential.setup_url, steps=credential.setup_steps)

    def list_services(self) -> List[ServiceSummary]:
        return [
            ServiceSummary(id=service.id, name=service.name, description=service.description)
            for service in self._services.values()
        ]

    def list_all_credential_keys(self) -> List[str]:
        keys: List[str] = []
        for service in self._services.values():
            keys.extend(service.credentials)
        return keys


def _as_steps(value: Any, where: str) -> tuple:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(s, str) for s in value):
        raise RegistryError(f"'{where}' must be a list of strings")
    return tuple(value)


def _parse_credential(service_id: str, key: str, raw: Any) -> Credential:
    where = f"services.{service_id}.credentials.{key}"
    if not isinstance(raw, Mapping):
        raise RegistryError(f"'{where}' must be a mapping")

    if "type" not in raw:
        raise RegistryError(f"Missing '{where}.type' in registry data")
    try:
        cred_type = CredentialType(raw["type"])
    except ValueError:
        raise RegistryError(f"Unknown credential type '{raw['type']}' at '{where}.type'")

    default = raw.get("default")
    return Credential(
        key=key,
        description=str(raw.get("description", "")),
        required=bool(raw.get("required", False)),
        type=cred_type,
        pattern=raw.get("pattern"),
        setup_url=raw.get("setup_url"),
        setup_steps=_as_steps(raw.get("setup_steps"), f"{where}.setup_steps"),
        default=None if default is None else str(default),
    )


def _parse_service(service_id: str, raw: Any) -> Service:
    where = f"services.{service_id}"
    if not isinstance(raw, Mapping):
        raise RegistryError(f"'{where}' must be a mapping")

    if "name" not in raw:
        raise RegistryError(f"Missing '{where}.name' in registry data")

    raw_credentials = raw.get("credentials") or {}
    if not isinstance(raw_credentials, Mapping):
        raise RegistryError(f"'{where}.credentials' must be a mapping")
    credentials = {
        str(key): _parse_credential(service_id, str(key), cred)
        for key, cred in raw_credentials.items()
    }

    auth_methods = []
    for method in raw.get("auth_methods") or []:
        try:
            auth_methods.append(AuthMethod(method))
        except ValueError:
            raise RegistryError(f"Unknown auth method '{method}' at '{where}.auth_methods'")

    return Service(
        id=service_id,
        name=str(raw["name"]),
        description=str(raw.get("description", "")),
        credentials=MappingProxyType(credentials),
        website=raw.get("website"),
        docs=raw.get("docs"),
        auth_methods=tuple(auth_methods),
        scopes=_as_steps(raw.get("scopes"), f"{where}.scopes"),
        setup_steps=_as_steps(raw.get("setup_steps"), f"{where}.setup_steps"),
    )
