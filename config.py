from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./penpal.db"

    secret_key: str = "supersecretkey"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    cookie_name: str = "access_token"
    cookie_secure: bool = True

    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"


settings = Settings()
