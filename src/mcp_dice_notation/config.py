from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DICE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Ceilings checked before any roll; the evaluator itself never bounds.
    max_dice: int = 1000
    max_sides: int = 1_000_000
    max_advantage: int = 20

    log_level: str = "WARNING"
    server_name: str = "mcp-dice-notation"


settings = Settings()


def get_settings() -> Settings:
    return settings
