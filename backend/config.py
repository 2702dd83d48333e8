# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    DATABASE_URL: str = "sqlite:///./database_agrimarket.db"

    FRONTEND_URL: str = "http://localhost:3000"

    # Storage for uploaded pictures and ML model files
    UPLOAD_DIR: str = "static/uploads"
    MODEL_DIR: str = "static/models"

    # Open-Meteo forecast endpoint used for weather advisories
    WEATHER_API_URL: str = "https://api.open-meteo.com/v1/forecast"
    WEATHER_TIMEOUT: float = 10.0
    DEFAULT_REGION: str = "Nouakchott"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)

settings = Settings()
