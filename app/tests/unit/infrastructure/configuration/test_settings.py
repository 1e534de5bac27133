"""Unit tests for dispatch and provider settings."""

import pytest

from infrastructure.configuration import Settings
from infrastructure.configuration.infrastructure import DispatchSettings
from infrastructure.configuration.integrations import (
    MessagingApiSettings,
    SlackSettings,
)

DISPATCH_ENV = [
    "DISPATCH_PROVIDER",
    "DISPATCH_MAX_ATTEMPTS",
    "DISPATCH_BASE_DELAY_SECONDS",
    "DISPATCH_ATTEMPT_TIMEOUT_SECONDS",
    "DISPATCH_CIRCUIT_FAILURE_THRESHOLD",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in DISPATCH_ENV + ["PREFIX", "MESSAGING_API_URL", "SLACK_TOKEN"]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.mark.unit
class TestDispatchSettings:
    def test_defaults(self, clean_env):
        dispatch = DispatchSettings()

        assert dispatch.provider == "messaging_api"
        assert dispatch.max_attempts == 3
        assert dispatch.base_delay_seconds == 0.5
        assert dispatch.max_delay_seconds == 30.0
        assert dispatch.attempt_timeout_seconds == 10.0
        assert dispatch.circuit_failure_threshold == 5
        assert dispatch.circuit_cooldown_seconds == 60.0
        assert dispatch.channel_cache_ttl_seconds == 0.0

    def test_reads_environment_aliases(self, clean_env):
        clean_env.setenv("DISPATCH_PROVIDER", "slack")
        clean_env.setenv("DISPATCH_MAX_ATTEMPTS", "5")
        clean_env.setenv("DISPATCH_BASE_DELAY_SECONDS", "0.1")
        clean_env.setenv("DISPATCH_ATTEMPT_TIMEOUT_SECONDS", "2.5")
        clean_env.setenv("DISPATCH_CIRCUIT_FAILURE_THRESHOLD", "2")

        dispatch = DispatchSettings()

        assert dispatch.provider == "slack"
        assert dispatch.max_attempts == 5
        assert dispatch.base_delay_seconds == 0.1
        assert dispatch.attempt_timeout_seconds == 2.5
        assert dispatch.circuit_failure_threshold == 2


@pytest.mark.unit
class TestProviderSettings:
    def test_messaging_settings_from_env(self, clean_env):
        clean_env.setenv("MESSAGING_API_URL", "https://chat.example.com/api")

        assert MessagingApiSettings().MESSAGING_API_URL == "https://chat.example.com/api"

    def test_slack_settings_from_env(self, clean_env):
        clean_env.setenv("SLACK_TOKEN", "xoxb-test")

        assert SlackSettings().SLACK_TOKEN == "xoxb-test"


@pytest.mark.unit
class TestSettings:
    def test_instantiates_subsettings(self, clean_env):
        settings = Settings()

        assert isinstance(settings.slack, SlackSettings)
        assert isinstance(settings.messaging, MessagingApiSettings)
        assert isinstance(settings.dispatch, DispatchSettings)

    def test_keeps_supplied_subsettings(self, clean_env):
        clean_env.setenv("DISPATCH_PROVIDER", "slack")
        dispatch = DispatchSettings()

        settings = Settings(dispatch=dispatch)

        assert settings.dispatch.provider == "slack"

    def test_is_production_follows_prefix(self, clean_env):
        assert Settings().is_production is True

        clean_env.setenv("PREFIX", "dev-")

        assert Settings().is_production is False

    def test_application_fields(self, clean_env):
        assert set(Settings.model_fields) == {
            "PREFIX",
            "LOG_LEVEL",
            "slack",
            "messaging",
            "dispatch",
        }
