"""Configuration validators."""

from src.exceptions import ConfigError


def validate_console_api() -> None:
    """Raise ConfigError if the backend base URL is missing or not http(s)."""
    from config.settings import settings
    base_url = settings.CONSOLE_API_BASE_URL.strip()
    if not base_url:
        raise ConfigError(
            "CONSOLE_API_BASE_URL is required (set it in .env or the environment)"
        )
    if not base_url.startswith(("http://", "https://")):
        raise ConfigError(f"CONSOLE_API_BASE_URL must be http(s): {base_url!r}")
