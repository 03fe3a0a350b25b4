"""
Unit Tests for Startup Security Checks.
"""

from types import SimpleNamespace

import pytest

from diary.backend.core.config import INSECURE_DEFAULT_JWT_SECRET
from diary.backend.core.startup_checks import StartupSecurityError, run_startup_checks

STRONG_SECRET = "x" * 48


def _settings(secret: str):
    return SimpleNamespace(
        jwt_secret=secret,
        uses_insecure_jwt_secret=secret == INSECURE_DEFAULT_JWT_SECRET,
    )


@pytest.fixture
def production_config(make_app_config):
    return make_app_config(
        environment="production",
        debug=False,
        docs_enabled=False,
        cors={"origins": ["https://diary.example.com"]},
    )


class TestDevelopment:
    """Outside production only the secret is inspected, and only warned about."""

    def test_insecure_default_is_allowed(self, make_app_config):
        run_startup_checks(make_app_config(), _settings(INSECURE_DEFAULT_JWT_SECRET))

    def test_debug_and_localhost_cors_are_allowed(self, make_app_config):
        config = make_app_config(debug=True, api_detailed_errors=True)
        run_startup_checks(config, _settings("short"))


class TestProduction:
    """Production refuses unsafe configuration."""

    def test_safe_configuration_passes(self, production_config):
        run_startup_checks(production_config, _settings(STRONG_SECRET))

    def test_insecure_default_secret_blocks_startup(self, production_config):
        with pytest.raises(StartupSecurityError, match="insecure development default"):
            run_startup_checks(production_config, _settings(INSECURE_DEFAULT_JWT_SECRET))

    def test_short_secret_blocks_startup(self, production_config):
        with pytest.raises(StartupSecurityError, match="minimum is 32"):
            run_startup_checks(production_config, _settings("too-short"))

    def test_debug_blocks_startup(self, make_app_config):
        config = make_app_config(
            environment="production",
            debug=True,
            docs_enabled=False,
            cors={"origins": []},
        )
        with pytest.raises(StartupSecurityError, match="debug is true"):
            run_startup_checks(config, _settings(STRONG_SECRET))

    def test_localhost_cors_blocks_startup(self, make_app_config):
        config = make_app_config(environment="production", debug=False, docs_enabled=False)
        with pytest.raises(StartupSecurityError, match="localhost"):
            run_startup_checks(config, _settings(STRONG_SECRET))

    def test_all_failures_are_reported_together(self, make_app_config):
        config = make_app_config(
            environment="production",
            debug=True,
            docs_enabled=True,
            api_detailed_errors=True,
        )
        with pytest.raises(StartupSecurityError, match="5 security check"):
            run_startup_checks(config, _settings(INSECURE_DEFAULT_JWT_SECRET))
