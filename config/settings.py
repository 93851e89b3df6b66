from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Game table
    GAME_VARIANT: str = "aviator"  # "crash" | "aviator"
    INITIAL_BALANCE: int = 2500    # sign-up bonus for accounts first seen by the API
    CURRENCY: str = "MZN"

    # App
    APP_NAME: str = "SkyBet Round Engine"
    DEBUG: bool = False  # Safe default for production; set DEBUG=True in .env for local dev
    LOG_LEVEL: str = "INFO"


settings = Settings()
