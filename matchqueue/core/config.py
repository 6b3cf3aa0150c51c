from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DEBUG: bool = False

    # Queue timing (milliseconds)
    MAX_WAIT_TIME_MS: int = 300_000
    PRIORITY_BOOST_INTERVAL_MS: int = 30_000
    SWEEP_INTERVAL_MS: int = 30_000
    SWEEPER_ENABLED: bool = True

    # When set, an entry is evicted at min(its own max wait, MAX_WAIT_TIME_MS)
    HONOR_ENTRY_MAX_WAIT: bool = False

    # Optional preference checks: region, cross_platform, game_speed, recent_opponents
    ENFORCED_PREFERENCES: List[str] = []
    RECENT_OPPONENT_LIMIT: int = 5
    RECENT_OPPONENT_MAX_PLAYERS: int = 10_000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
