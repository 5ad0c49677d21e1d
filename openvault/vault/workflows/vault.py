"""Credential resolution: the Vault."""
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Set

from ...errors import CredentialNotFound, UnknownCredential
from ...registry import Registry, get_default_registry
from ..domains.config_loader import load_config
from ..domains.env_file import find_env_file, load_env_file
from ..domains.validator import validate_credential

logger = logging.getLogger(__name__)

SOURCE_FILE = "file"
SOURCE_OVERRIDE = "override"
SOURCE_ENV = "env"


@dataclass(frozen=True)
class ResolvedCredential:
    """A resolved credential and where it came from."""
    key: str
    value: str
    source: str  # "file", "override" or "env"


@dataclass(frozen=True)
class ServiceValidation:
    """Presence check of a service's required credentials."""
    valid: bool
    missing: List[str] = field(default_factory=list)


class Vault:
    """
    Resolves credentials by key.

    Lookup order:
        1. In-memory map: the credential file as loaded at construction,
           overwritten by any ``set()`` calls since
        2. Process environment

    The credential file is read once, in the constructor. A key that is
    present with an empty value counts as set: it is returned as-is and
    does not fall through to the environment.
    """

    def __init__(
        self,
        env_path: Optional[str] = None,
        fail_on_missing: bool = True,
        validate: bool = True,
        registry: Optional[Registry] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            env_path: Path to the credential file (default: nearest .env found
                by walking up from the working directory)
            fail_on_missing: Raise CredentialNotFound for missing keys instead
                of returning ""
            validate: Check resolved values against registry patterns and log
                a warning on mismatch
            registry: Service registry (default: process-wide registry)
            environ: Environment mapping to fall back to (default: os.environ)
        """
        self._env_path = str(env_path) if env_path else find_env_file()
        self.fail_on_missing = fail_on_missing
        self.validate = validate
        self.registry = registry if registry is not None else get_default_registry()
        self._environ = environ if environ is not None else os.environ

        self._credentials: Dict[str, str] = load_env_file(self._env_path)
        self._overrides: Set[str] = set()

    @classmethod
    def from_config(cls, **overrides) -> "Vault":
        """
        Build a Vault from the user config file.

        Keyword arguments take precedence over config values.

        Raises:
            ConfigError: If the config file is invalid
        """
        config = load_config()
        options = {
            "env_path": config.env_path,
            "fail_on_missing": config.fail_on_missing,
            "validate": config.validate,
        }
        options.update(overrides)
        return cls(**options)

    @property
    def env_path(self) -> str:
        return self._env_path

    def keys(self) -> List[str]:
        """Keys held in memory (file and overrides, not the environment)."""
        return list(self._credentials)

    def resolve(self, key: str) -> Optional[ResolvedCredential]:
        """
        Look up ``key`` without validating or raising.

        Returns:
            ResolvedCredential with its source, or None if not found
        """
        if key in self._credentials:
            source = SOURCE_OVERRIDE if key in self._overrides else SOURCE_FILE
            return ResolvedCredential(key, self._credentials[key], source)

        if key in self._environ:
            return ResolvedCredential(key, self._environ[key], SOURCE_ENV)

        return None

    def get(self, key: str) -> str:
        """
        Get a credential by key.

        Returns:
            The credential value, or "" when missing and fail_on_missing is off

        Raises:
            CredentialNotFound: If missing and fail_on_missing is on. The
                message includes setup instructions when the registry knows
                the key.
        """
        resolved = self.resolve(key)

        if resolved is None:
            if self.fail_on_missing:
                raise self._not_found(key)
            return ""

        # Empty values are honored as-is; patterns only describe real secrets
        if self.validate and resolved.value:
            self._check_format(key, resolved.value)

        return resolved.value

    def get_for(self, service_id: str, key: str) -> str:
        """
        Get a credential for a specific service.

        Raises:
            UnknownCredential: If the registry has no such credential for the
                service, whatever the environment holds
            CredentialNotFound: As for get()
        """
        if self.registry.get_credential(service_id, key) is None:
            raise UnknownCredential(service_id, key)

        return self.get(key)

    def has(self, key: str) -> bool:
        """Check if a credential is set. Never raises or validates."""
        return key in self._credentials or key in self._environ

    def set(self, key: str, value: str) -> None:
        """Set a credential in memory only. Not persisted, not validated."""
        self._credentials[key] = value
        self._overrides.add(key)

    def get_service_credentials(self, service_id: str) -> Dict[str, str]:
        """
        Get all required credentials for a service.

        Raises:
            CredentialNotFound: On the first missing key, if fail_on_missing
        """
        return {key: self.get(key) for key in self.registry.get_required_credentials(service_id)}

    def validate_service(self, service_id: str) -> ServiceValidation:
        """Check that every required credential for a service is present."""
        missing = [
            key for key in self.registry.get_required_credentials(service_id)
            if not self.has(key)
        ]
        return ServiceValidation(valid=not missing, missing=missing)

    def _check_format(self, key: str, value: str) -> None:
        service_id = self.registry.find_service_by_credential(key)
        if service_id is None:
            return

        result = validate_credential(self.registry, service_id, key, value)
        if not result.valid:
            logger.warning(f"Warning: {result.error}")

    def _not_found(self, key: str) -> CredentialNotFound:
        service_id = self.registry.find_service_by_credential(key)
        if service_id is None:
            return CredentialNotFound(key)

        instructions = self.registry.get_setup_instructions(service_id, key)
        return CredentialNotFound(
            key,
            service_id=service_id,
            setup_url=instructions.url,
            setup_steps=instructions.steps,
        )


def create_vault(**kwargs) -> Vault:
    """Create a vault instance; see Vault for the accepted options."""
    return Vault(**kwargs)
