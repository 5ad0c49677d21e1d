"""Exceptions raised by OpenVault."""
from typing import Optional, Sequence


class VaultError(Exception):
    """Base class for OpenVault errors."""
    pass


class ConfigError(VaultError):
    """Configuration error exception."""
    pass


class RegistryError(VaultError):
    """Service registry data is missing or malformed."""
    pass


class CredentialNotFound(VaultError):
    """
    A credential key resolved to nothing.

    The message is actionable: when the registry knows which service owns
    the key, it includes the setup URL and numbered setup steps.
    """

    def __init__(
        self,
        key: str,
        service_id: Optional[str] = None,
        setup_url: Optional[str] = None,
        setup_steps: Sequence[str] = (),
    ):
        self.key = key
        self.service_id = service_id
        self.setup_url = setup_url
        self.setup_steps = tuple(setup_steps)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        message = f"Credential not found: {self.key}"
        if self.setup_url:
            message += f"\n\nGet it here: {self.setup_url}"
        if self.setup_steps:
            steps = "\n".join(f"  {i}. {step}" for i, step in enumerate(self.setup_steps, 1))
            message += f"\n\nSetup steps:\n{steps}"
        return message


class UnknownCredential(VaultError):
    """The registry has no definition for a (service, key) pair."""

    def __init__(self, service_id: str, key: str):
        self.service_id = service_id
        self.key = key
        super().__init__(f"Unknown credential {key} for service {service_id}")
