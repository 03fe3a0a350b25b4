"""
Startup Security Validation.

Checks security invariants before the application accepts traffic.
If any check fails, the application refuses to start with a clear
error message. Called during FastAPI lifespan initialization.
"""

from diary.backend.core.config import AppConfig, Settings, get_app_config, get_settings
from diary.backend.core.logging import get_logger

logger = get_logger(__name__)


class StartupSecurityError(RuntimeError):
    """Raised when a startup security check fails."""

    pass


def run_startup_checks(
    app_config: AppConfig | None = None,
    settings: Settings | None = None,
) -> None:
    """
    Validate all security invariants at startup.

    Raises:
        StartupSecurityError: If any check fails
    """
    app_config = app_config or get_app_config()
    settings = settings or get_settings()
    environment = app_config.application.environment
    is_production = environment == "production"

    errors: list[str] = []

    _check_jwt_secret(settings, app_config, is_production, errors)
    _check_production_safety(app_config, is_production, errors)

    if errors:
        for error in errors:
            logger.error("Startup security check failed", extra={"check": error})
        raise StartupSecurityError(
            f"Startup blocked: {len(errors)} security check(s) failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    logger.info(
        "Startup security checks passed",
        extra={"environment": environment, "checks_run": 2},
    )


def _check_jwt_secret(
    settings: Settings,
    app_config: AppConfig,
    is_production: bool,
    errors: list[str],
) -> None:
    """The insecure default secret may only be used outside production."""
    if settings.uses_insecure_jwt_secret:
        if is_production:
            errors.append("JWT_SECRET is the insecure development default")
        else:
            logger.warning(
                "Using insecure development JWT secret",
                extra={"environment": app_config.application.environment},
            )
        return

    jwt_min = app_config.security.secrets_validation.jwt_secret_min_length
    if is_production and len(settings.jwt_secret) < jwt_min:
        errors.append(
            f"JWT_SECRET is {len(settings.jwt_secret)} chars, "
            f"minimum is {jwt_min}"
        )


def _check_production_safety(app_config: AppConfig, is_production: bool, errors: list[str]) -> None:
    """Validate production environment safety constraints."""
    if not is_production:
        return

    app = app_config.application
    if app.debug:
        errors.append("debug is true in production environment")

    if app_config.features.api_detailed_errors:
        errors.append("api_detailed_errors is true in production environment")

    if app.docs_enabled:
        errors.append("docs_enabled is true in production environment")

    if app_config.security.cors.enforce_in_production:
        localhost_origins = [o for o in app.cors.origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS origins contain localhost in production: {localhost_origins}"
            )
