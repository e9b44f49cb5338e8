"""Tests for KeychainSettingsSource integration in config.py."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from config import KeychainSettingsSource, Settings
from services.credential_manager import CREDENTIAL_KEYS

# Environment variables that would interfere with Settings defaults if
# set in the test runner's shell.
_ENV_VARS_TO_CLEAR = {
    "DATABASE_URL",
    "ENVIRONMENT",
    "DEBUG",
    "LOG_LEVEL",
    "PLAID_ENVIRONMENT",
    "SYNC_EMPTY_PAGE_MAX_RETRIES",
    *CREDENTIAL_KEYS,
}


def _clean_env():
    """Return os.environ without the variables the Settings class reads."""
    return {k: v for k, v in os.environ.items() if k not in _ENV_VARS_TO_CLEAR}


class TestKeychainSettingsSource:
    def test_keychain_value_overrides_default(self):
        with (
            patch.dict(os.environ, _clean_env(), clear=True),
            patch("config.get_credential") as mock_get,
        ):
            mock_get.side_effect = lambda key: (
                "keychain-secret" if key == "PLAID_SECRET" else None
            )
            s = Settings(_env_file=None)
            assert s.PLAID_SECRET == "keychain-secret"
            assert s.PLAID_CLIENT_ID == ""

    def test_init_value_overrides_keychain(self):
        with (
            patch.dict(os.environ, _clean_env(), clear=True),
            patch("config.get_credential", return_value="keychain-value"),
        ):
            s = Settings(_env_file=None, PLAID_CLIENT_ID="init-value")
            assert s.PLAID_CLIENT_ID == "init-value"

    def test_non_credential_fields_skip_keychain(self):
        with (
            patch.dict(os.environ, _clean_env(), clear=True),
            patch("config.get_credential") as mock_get,
        ):
            mock_get.return_value = "should-not-be-used"
            s = Settings(_env_file=None)
            assert s.DATABASE_URL == "sqlite:///./finance.db"
            assert s.PLAID_ENVIRONMENT == "sandbox"
            called_keys = {call.args[0] for call in mock_get.call_args_list}
            assert called_keys <= CREDENTIAL_KEYS

    def test_env_fallback_when_keychain_empty(self):
        env = _clean_env()
        env["PLAID_CLIENT_ID"] = "from-env"
        with (
            patch.dict(os.environ, env, clear=True),
            patch("config.get_credential", return_value=None),
        ):
            s = Settings(_env_file=None)
            assert s.PLAID_CLIENT_ID == "from-env"
            assert s.PLAID_SECRET == ""

    def test_keychain_overrides_env_var(self):
        env = _clean_env()
        env["PLAID_SECRET"] = "from-env"
        with (
            patch.dict(os.environ, env, clear=True),
            patch("config.get_credential") as mock_get,
        ):
            mock_get.side_effect = lambda key: (
                "from-keychain" if key == "PLAID_SECRET" else None
            )
            s = Settings(_env_file=None)
            assert s.PLAID_SECRET == "from-keychain"

    def test_source_is_in_priority_chain(self):
        sources = Settings.settings_customise_sources(
            Settings,
            init_settings=object(),
            env_settings=object(),
            dotenv_settings=object(),
            file_secret_settings=object(),
        )
        source_types = [type(s) for s in sources]
        assert source_types.index(KeychainSettingsSource) == 1


class TestSyncRetrySettings:
    def test_defaults(self):
        with (
            patch.dict(os.environ, _clean_env(), clear=True),
            patch("config.get_credential", return_value=None),
        ):
            s = Settings(_env_file=None)
            assert s.SYNC_EMPTY_PAGE_MAX_RETRIES == 15
            assert s.SYNC_EMPTY_PAGE_RETRY_DELAY == 2.0

    def test_negative_max_retries_rejected(self):
        env = _clean_env()
        env["SYNC_EMPTY_PAGE_MAX_RETRIES"] = "-1"
        with (
            patch.dict(os.environ, env, clear=True),
            patch("config.get_credential", return_value=None),
            pytest.raises(ValidationError, match="SYNC_EMPTY_PAGE_MAX_RETRIES"),
        ):
            Settings(_env_file=None)
