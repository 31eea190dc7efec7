# storedb/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./storedb.db"
    DB_ECHO: bool = False

    # Audit log lives under a fixed relative directory
    LOG_DIR: str = "logs"
    LOG_FILE: str = "storedb.log"
    LOG_LEVEL: str = "INFO"

    PAGE_SIZE: int = 10
    WORKER_POOL_SIZE: int = 5

    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")

settings = Settings()
