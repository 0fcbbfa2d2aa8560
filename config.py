from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./bookstore.db"
    DB_ECHO: bool = False
    LOG_LEVEL: str = "INFO"
    FRONTEND_ORIGINS: str = "*"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 9010

    @property
    def allow_origins(self) -> List[str]:
        return [origin.strip() for origin in self.FRONTEND_ORIGINS.split(",") if origin.strip()]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
