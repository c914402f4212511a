from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DOMINION_", env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./dominion.db"
    log_level: str = "INFO"

    # New-game defaults
    default_turn_limit: int = 200
    default_bot_count: int = 25
    protection_turns: int = 20
    empires_per_region: int = 10

    # Ironman auto-save after every committed turn
    snapshot_enabled: bool = True


settings = Settings()
