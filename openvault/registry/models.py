"""Domain models for the service registry."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Mapping, Optional, Tuple


class CredentialType(str, Enum):
    """Classification of a credential value."""
    API_KEY = "api_key"
    API_SECRET = "api_secret"
    API_TOKEN = "api_token"
    BEARER_TOKEN = "bearer_token"
    BOT_TOKEN = "bot_token"
    APP_TOKEN = "app_token"
    PERSONAL_ACCESS_TOKEN = "personal_access_token"
    ACCESS_TOKEN = "access_token"
    ACCESS_TOKEN_SECRET = "access_token_secret"
    ACCESS_KEY_ID = "access_key_id"
    SECRET_ACCESS_KEY = "secret_access_key"
    OAUTH_CLIENT_ID = "oauth_client_id"
    OAUTH_CLIENT_SECRET = "oauth_client_secret"
    OAUTH_REFRESH_TOKEN = "oauth_refresh_token"
    CLIENT_ID = "client_id"
    CLIENT_SECRET = "client_secret"
    SIGNING_SECRET = "signing_secret"
    WEBHOOK_SECRET = "webhook_secret"
    ACCOUNT_ID = "account_id"
    ORG_ID = "org_id"
    PROJECT_ID = "project_id"
    ZONE_ID = "zone_id"
    REGION = "region"
    URL = "url"
    SERVICE_KEY = "service_key"
    AUTH_TOKEN = "auth_token"
    PHONE_NUMBER = "phone_number"


class AuthMethod(str, Enum):
    """Authentication method supported by a service."""
    API_KEY = "api_key"
    API_KEY_PAIR = "api_key_pair"
    BEARER_TOKEN = "bearer_token"
    BOT_TOKEN = "bot_token"
    OAUTH1 = "oauth1"
    OAUTH2 = "oauth2"
    PERSONAL_ACCESS_TOKEN = "personal_access_token"
    ACCESS_KEY = "access_key"
    IAM_ROLE = "iam_role"
    SSO = "sso"
    API_TOKEN = "api_token"
    GITHUB_APP = "github_app"


@dataclass(frozen=True)
class Credential:
    """Registry definition of a single credential key."""
    key: str
    description: str
    required: bool
    type: CredentialType
    pattern: Optional[str] = None
    setup_url: Optional[str] = None
    setup_steps: Tuple[str, ...] = ()
    default: Optional[str] = None  # non-secret config only


@dataclass(frozen=True)
class Service:
    """Registry definition of an external service and its credentials."""
    id: str
    name: str
    description: str
    credentials: Mapping[str, Credential] = field(default_factory=dict)
    website: Optional[str] = None
    docs: Optional[str] = None
    auth_methods: Tuple[AuthMethod, ...] = ()
    scopes: Tuple[str, ...] = ()
    setup_steps: Tuple[str, ...] = ()

    @property
    def required_keys(self) -> List[str]:
        return [key for key, cred in self.credentials.items() if cred.required]


@dataclass(frozen=True)
class ServiceSummary:
    """Short listing entry for a service."""
    id: str
    name: str
    description: str


@dataclass(frozen=True)
class SetupInstructions:
    """Where and how to obtain a credential."""
    url: Optional[str] = None
    steps: Tuple[str, ...] = ()
