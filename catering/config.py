# catering/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    APP_TITLE: str = "Catering Orders API"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    CORS_ORIGINS: list[str] = ["*"]

    DATABASE_URL: str = "sqlite+aiosqlite:///./catering.db"   # postgresql+asyncpg://... для продакшена
    DATABASE_ECHO: bool = False                                 # вывод SQL в консоль

    LOG_DIR: str = "log"        # корень для файлов логов
    LOG_PRINT: bool = True      # дублировать логи в консоль

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
