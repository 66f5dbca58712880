"""Application configuration loaded from environment variables and .env file."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./armory.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Game balance
    MAX_INVENTORY: int = 40
    MAX_UPGRADE_LEVEL: int = 10

    # Catalog seed files
    ITEM_TEMPLATES_PATH: str = "armory/data/item_templates.json"
    AFFIXES_PATH: str = "armory/data/affixes.json"

    # Fixed seed for reproducible upgrade/disenchant rolls (None = system entropy)
    RNG_SEED: Optional[int] = None


settings = Settings()
