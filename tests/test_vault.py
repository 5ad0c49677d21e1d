"""Tests for credential resolution through the Vault."""
import logging

import pytest
import yaml

from openvault import registry as registry_module
from openvault import (
    CredentialNotFound,
    ServiceValidation,
    UnknownCredential,
    Vault,
    create_vault,
)

PORKBUN_API_KEY = "pk1_" + "a" * 64
PORKBUN_SECRET_KEY = "sk1_" + "b" * 64
VAULT_LOGGER = "openvault.vault.workflows.vault"


@pytest.fixture
def make_vault(env_file, fake_registry):
    """Build a Vault over the test .env file, fake registry and a fake environment."""
    def _make(environ=None, **kwargs):
        options = {"env_path": str(env_file), "registry": fake_registry}
        options.update(kwargs)
        return Vault(environ=environ if environ is not None else {}, **options)
    return _make


class TestGet:
    """Test suite for Vault.get precedence and failure modes."""

    def test_file_value_returned(self, make_vault):
        assert make_vault().get("PORKBUN_API_KEY") == PORKBUN_API_KEY

    def test_file_takes_precedence_over_environment(self, make_vault):
        vault = make_vault(environ={"SHARED_KEY": "from-env"})
        assert vault.get("SHARED_KEY") == "from-file"

    def test_falls_back_to_environment(self, make_vault):
        vault = make_vault(environ={"PORKBUN_SECRET_KEY": PORKBUN_SECRET_KEY})
        assert vault.get("PORKBUN_SECRET_KEY") == PORKBUN_SECRET_KEY

    def test_missing_raises_credential_not_found(self, make_vault):
        with pytest.raises(CredentialNotFound) as exc_info:
            make_vault().get("NOT_ANYWHERE")

        assert exc_info.value.key == "NOT_ANYWHERE"
        assert exc_info.value.service_id is None
        assert str(exc_info.value) == "Credential not found: NOT_ANYWHERE"

    def test_missing_returns_empty_string_when_not_fatal(self, make_vault):
        assert make_vault(fail_on_missing=False).get("NOT_ANYWHERE") == ""

    def test_missing_registered_key_includes_setup_guidance(self, make_vault):
        with pytest.raises(CredentialNotFound) as exc_info:
            make_vault(env_path="/nonexistent/.env").get("PORKBUN_API_KEY")

        error = exc_info.value
        assert error.service_id == "porkbun"
        assert error.setup_url == "https://porkbun.com/account/api"
        assert error.setup_steps == ("Open Account > API Access", "Create a new API key")
        message = str(error)
        assert "Get it here: https://porkbun.com/account/api" in message
        assert "  1. Open Account > API Access" in message
        assert "  2. Create a new API key" in message

    def test_missing_key_without_steps_has_url_only(self, make_vault):
        with pytest.raises(CredentialNotFound) as exc_info:
            make_vault().get("PORKBUN_SECRET_KEY")

        message = str(exc_info.value)
        assert "Get it here:" in message
        assert "Setup steps" not in message

    def test_process_environment_is_default_fallback(self, env_file, fake_registry, monkeypatch):
        monkeypatch.setenv("OPENVAULT_TEST_ONLY_KEY", "ambient")
        vault = Vault(env_path=str(env_file), registry=fake_registry)
        assert vault.get("OPENVAULT_TEST_ONLY_KEY") == "ambient"

    def test_file_is_read_once(self, env_file, make_vault):
        vault = make_vault()
        env_file.write_text("PORKBUN_API_KEY=changed\n")
        assert vault.get("PORKBUN_API_KEY") == PORKBUN_API_KEY

    def test_missing_file_is_not_an_error(self, make_vault):
        vault = make_vault(env_path="/nonexistent/.env", environ={"A": "1"})
        assert vault.keys() == []
        assert vault.get("A") == "1"


class TestEmptyValues:
    """An explicitly empty value counts as set."""

    def test_empty_file_value_is_honored(self, tmp_path, fake_registry):
        path = tmp_path / ".env"
        path.write_text("BLANK=\n")
        vault = Vault(env_path=str(path), registry=fake_registry, environ={"BLANK": "env"})

        assert vault.has("BLANK")
        assert vault.get("BLANK") == ""

    def test_empty_override_does_not_raise(self, make_vault):
        vault = make_vault()
        vault.set("NEW_KEY", "")
        assert vault.get("NEW_KEY") == ""

    def test_empty_environment_value_is_honored(self, make_vault):
        assert make_vault(environ={"EMPTY_ENV": ""}).get("EMPTY_ENV") == ""


class TestValidationWarnings:
    """Format checks warn but never reject."""

    def test_invalid_format_warns_and_returns_value(self, make_vault, caplog):
        vault = make_vault(environ={"TWITTER_BEARER_TOKEN": "not-a-bearer"})

        with caplog.at_level(logging.WARNING, logger=VAULT_LOGGER):
            assert vault.get("TWITTER_BEARER_TOKEN") == "not-a-bearer"

        assert "Invalid format for TWITTER_BEARER_TOKEN" in caplog.text
        assert "^AAAA[A-Za-z0-9%]+$" in caplog.text
        assert "not-a-bearer" not in caplog.text

    def test_valid_format_does_not_warn(self, make_vault, caplog):
        with caplog.at_level(logging.WARNING, logger=VAULT_LOGGER):
            make_vault().get("PORKBUN_API_KEY")

        assert caplog.records == []

    def test_validation_disabled(self, make_vault, caplog):
        vault = make_vault(environ={"TWITTER_BEARER_TOKEN": "bad"}, validate=False)

        with caplog.at_level(logging.WARNING, logger=VAULT_LOGGER):
            assert vault.get("TWITTER_BEARER_TOKEN") == "bad"

        assert caplog.records == []

    def test_unregistered_key_is_not_validated(self, make_vault, caplog):
        with caplog.at_level(logging.WARNING, logger=VAULT_LOGGER):
            make_vault().get("SHARED_KEY")

        assert caplog.records == []

    def test_empty_value_is_not_format_checked(self, make_vault, caplog):
        vault = make_vault(environ={"PORKBUN_SECRET_KEY": ""})
        vault.set("TWITTER_BEARER_TOKEN", "")

        with caplog.at_level(logging.WARNING, logger=VAULT_LOGGER):
            assert vault.get("TWITTER_BEARER_TOKEN") == ""
            assert vault.get("PORKBUN_SECRET_KEY") == ""

        assert caplog.records == []

    def test_set_does_not_validate(self, make_vault, caplog):
        vault = make_vault()

        with caplog.at_level(logging.WARNING, logger=VAULT_LOGGER):
            vault.set("TWITTER_BEARER_TOKEN", "bad")
        assert caplog.records == []

        with caplog.at_level(logging.WARNING, logger=VAULT_LOGGER):
            vault.get("TWITTER_BEARER_TOKEN")
        assert "Invalid format" in caplog.text


class TestGetFor:
    """Test suite for service-scoped lookups."""

    def test_registered_key(self, make_vault):
        assert make_vault().get_for("porkbun", "PORKBUN_API_KEY") == PORKBUN_API_KEY

    def test_unknown_key_raises_even_if_in_environment(self, make_vault):
        vault = make_vault(environ={"NOT_A_REAL_KEY": "present"})

        with pytest.raises(UnknownCredential) as exc_info:
            vault.get_for("twitter", "NOT_A_REAL_KEY")

        assert exc_info.value.service_id == "twitter"
        assert exc_info.value.key == "NOT_A_REAL_KEY"
        assert str(exc_info.value) == "Unknown credential NOT_A_REAL_KEY for service twitter"

    def test_key_of_another_service_is_unknown(self, make_vault):
        with pytest.raises(UnknownCredential):
            make_vault().get_for("twitter", "PORKBUN_API_KEY")

    def test_unknown_is_raised_regardless_of_fail_on_missing(self, make_vault):
        with pytest.raises(UnknownCredential):
            make_vault(fail_on_missing=False).get_for("twitter", "NOT_A_REAL_KEY")

    def test_registered_but_missing(self, make_vault):
        with pytest.raises(CredentialNotFound):
            make_vault().get_for("twitter", "TWITTER_BEARER_TOKEN")


class TestHasAndSet:
    """Test suite for presence checks and in-memory overrides."""

    def test_has(self, make_vault):
        vault = make_vault(environ={"ENV_ONLY": "x"})
        assert vault.has("PORKBUN_API_KEY")
        assert vault.has("ENV_ONLY")
        assert not vault.has("NOWHERE")

    def test_set_overrides_file_and_environment(self, make_vault):
        vault = make_vault(environ={"SHARED_KEY": "from-env"})
        vault.set("SHARED_KEY", "override")
        assert vault.get("SHARED_KEY") == "override"

    def test_set_new_key(self, make_vault):
        vault = make_vault()
        vault.set("X", "y")
        assert vault.has("X")
        assert vault.get("X") == "y"

    def test_set_does_not_persist(self, env_file, make_vault):
        before = env_file.read_text()
        make_vault().set("X", "y")
        assert env_file.read_text() == before

    def test_instances_are_independent(self, make_vault):
        first = make_vault()
        second = make_vault()
        first.set("X", "y")
        assert not second.has("X")


class TestResolve:
    """Test suite for source reporting."""

    def test_sources(self, make_vault):
        vault = make_vault(environ={"ENV_ONLY": "e"})
        vault.set("OVERRIDDEN", "o")

        assert vault.resolve("SHARED_KEY").source == "file"
        assert vault.resolve("OVERRIDDEN").source == "override"
        assert vault.resolve("ENV_ONLY").source == "env"
        assert vault.resolve("NOWHERE") is None

    def test_overriding_file_key_reports_override(self, make_vault):
        vault = make_vault()
        vault.set("SHARED_KEY", "new")
        resolved = vault.resolve("SHARED_KEY")
        assert resolved.value == "new"
        assert resolved.source == "override"


class TestServiceOperations:
    """Test suite for service-level lookups and pre-flight checks."""

    def test_validate_service_reports_missing(self, make_vault):
        result = make_vault().validate_service("porkbun")
        assert result == ServiceValidation(valid=False, missing=["PORKBUN_SECRET_KEY"])

    def test_validate_service_all_present(self, make_vault):
        result = make_vault(environ={"PORKBUN_SECRET_KEY": "anything"}).validate_service("porkbun")
        assert result.valid is True
        assert result.missing == []

    def test_validate_service_ignores_formats(self, make_vault, caplog):
        vault = make_vault(environ={"TWITTER_BEARER_TOKEN": "bad"})

        with caplog.at_level(logging.WARNING, logger=VAULT_LOGGER):
            assert vault.validate_service("twitter").valid

        assert caplog.records == []

    def test_validate_unknown_service_is_vacuously_valid(self, make_vault):
        assert make_vault().validate_service("nope") == ServiceValidation(valid=True, missing=[])

    def test_get_service_credentials(self, make_vault):
        vault = make_vault(environ={"PORKBUN_SECRET_KEY": PORKBUN_SECRET_KEY})
        assert vault.get_service_credentials("porkbun") == {
            "PORKBUN_API_KEY": PORKBUN_API_KEY,
            "PORKBUN_SECRET_KEY": PORKBUN_SECRET_KEY,
        }

    def test_get_service_credentials_only_required(self, make_vault):
        vault = make_vault(environ={"TWITTER_BEARER_TOKEN": "AAAAtoken", "TWITTER_API_KEY": "k"})
        assert vault.get_service_credentials("twitter") == {"TWITTER_BEARER_TOKEN": "AAAAtoken"}

    def test_get_service_credentials_is_all_or_nothing(self, make_vault):
        with pytest.raises(CredentialNotFound) as exc_info:
            make_vault().get_service_credentials("porkbun")

        assert exc_info.value.key == "PORKBUN_SECRET_KEY"

    def test_get_service_credentials_not_fatal(self, make_vault):
        assert make_vault(fail_on_missing=False).get_service_credentials("porkbun") == {
            "PORKBUN_API_KEY": PORKBUN_API_KEY,
            "PORKBUN_SECRET_KEY": "",
        }


class TestConstruction:
    """Test suite for Vault construction and configuration."""

    def test_env_path_located_automatically(self, tmp_path, fake_registry, monkeypatch):
        (tmp_path / ".env").write_text("FOUND=yes\n")
        nested = tmp_path / "skills" / "domain-checker"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        vault = Vault(registry=fake_registry, environ={})

        assert vault.get("FOUND") == "yes"

    def test_default_registry_used_when_not_injected(self, env_file, fake_registry):
        registry_module.set_default_registry(fake_registry)
        vault = Vault(env_path=str(env_file), environ={})
        assert vault.registry is fake_registry

    def test_create_vault(self, env_file, fake_registry):
        vault = create_vault(env_path=str(env_file), registry=fake_registry, environ={})
        assert isinstance(vault, Vault)
        assert vault.env_path == str(env_file)

    def test_from_config(self, tmp_path, env_file, fake_registry, monkeypatch):
        config = tmp_path / "config.yml"
        config.write_text(yaml.dump({
            "vault": {"env_path": str(env_file), "fail_on_missing": False, "validate": False},
        }))
        monkeypatch.setenv("OPENVAULT_CONFIG", str(config))

        vault = Vault.from_config(registry=fake_registry, environ={})

        assert vault.env_path == str(env_file)
        assert vault.fail_on_missing is False
        assert vault.validate is False
        assert vault.get("NOWHERE") == ""

    def test_from_config_keyword_arguments_win(self, tmp_path, env_file, fake_registry, monkeypatch):
        config = tmp_path / "config.yml"
        config.write_text(yaml.dump({"vault": {"env_path": "/elsewhere/.env", "fail_on_missing": False}}))
        monkeypatch.setenv("OPENVAULT_CONFIG", str(config))

        vault = Vault.from_config(env_path=str(env_file), fail_on_missing=True,
                                  registry=fake_registry, environ={})

        assert vault.env_path == str(env_file)
        with pytest.raises(CredentialNotFound):
            vault.get("NOWHERE")
