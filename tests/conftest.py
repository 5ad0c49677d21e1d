"""Shared fixtures for the OpenVault test suite."""
import pytest

from openvault import registry as registry_module
from openvault.registry import Registry

PORKBUN_API_KEY = "pk1_" + "a" * 64
PORKBUN_SECRET_KEY = "sk1_" + "b" * 64


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real user config and default registry."""
    monkeypatch.setenv("OPENVAULT_CONFIG", str(tmp_path / "no-such-config.yml"))
    monkeypatch.delenv("OPENVAULT_ENV_PATH", raising=False)
    registry_module.set_default_registry(None)
    yield
    registry_module.set_default_registry(None)


@pytest.fixture
def registry_data():
    """Small registry in the same shape as the bundled services.yml."""
    return {
        "version": "9.9.9",
        "services": {
            "porkbun": {
                "name": "Porkbun",
                "description": "Domain registrar",
                "auth_methods": ["api_key_pair"],
                "credentials": {
                    "PORKBUN_API_KEY": {
                        "description": "API key",
                        "required": True,
                        "type": "api_key",
                        "pattern": "^pk1_[a-f0-9]{64}$",
                        "setup_url": "https://porkbun.com/account/api",
                        "setup_steps": [
                            "Open Account > API Access",
                            "Create a new API key",
                        ],
                    },
                    "PORKBUN_SECRET_KEY": {
                        "description": "Secret key",
                        "required": True,
                        "type": "api_secret",
                        "pattern": "^sk1_[a-f0-9]{64}$",
                        "setup_url": "https://porkbun.com/account/api",
                    },
                },
            },
            "twitter": {
                "name": "Twitter / X",
                "description": "Twitter API v2",
                "credentials": {
                    "TWITTER_BEARER_TOKEN": {
                        "description": "Bearer token",
                        "required": True,
                        "type": "bearer_token",
                        "pattern": "^AAAA[A-Za-z0-9%]+$",
                    },
                    "TWITTER_API_KEY": {
                        "description": "Consumer key",
                        "required": False,
                        "type": "api_key",
                    },
                },
            },
            "aws": {
                "name": "AWS",
                "description": "Amazon Web Services",
                "credentials": {
                    "AWS_REGION": {
                        "description": "Region",
                        "required": False,
                        "type": "region",
                        "default": "us-east-1",
                    },
                },
            },
        },
    }


@pytest.fixture
def fake_registry(registry_data):
    return Registry.from_dict(registry_data)


@pytest.fixture
def env_file(tmp_path):
    """Credential file with the Porkbun API key only."""
    path = tmp_path / ".env"
    path.write_text(
        "# Porkbun\n"
        f"PORKBUN_API_KEY={PORKBUN_API_KEY}\n"
        "\n"
        "SHARED_KEY=from-file\n"
    )
    return path
