"""Console configuration, read from the environment and ``.env``."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # === Backend ===
    CONSOLE_API_BASE_URL: str = "http://localhost:7542"
    CONSOLE_REQUEST_TIMEOUT_SECONDS: float = 10.0

    # === Refresh / Simulation ===
    CONSOLE_TICK_INTERVAL_SECONDS: float = 3.0  # synthetic transition + metrics tick
    CONSOLE_REFRESH_INTERVAL_SECONDS: float = 15.0  # authoritative backlog refresh
    CONSOLE_SIMULATE: bool = True  # no live feed: drive the store locally
    CONSOLE_DEMO_SEED: bool = False

    # === Status line ===
    CONSOLE_STATUS_INTERVAL_SECONDS: float = 30.0

    # === Logging ===
    CONSOLE_LOG_LEVEL: str = "INFO"  # DEBUG shows discarded store updates

    model_config = {"env_file": ".env"}


settings = Settings()
