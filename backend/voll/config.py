# backend/voll/config.py
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # DB URL used by SQLAlchemy. Hosted Postgres (supabase/neon) gets sslmode automatically.
    DATABASE_URL: str = "postgresql+psycopg2://postgres:postgres@db:5432/voll"

    # App options (used by db.py and main.py)
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Generative AI (OpenAI-compatible endpoint, Gemini by default)
    AI_API_KEY: str = ""
    AI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    AI_MODEL: str = "gemini-2.5-flash"
    CHAT_MAX_TOOL_ROUNDS: int = 5

    # Dates shown to students and in exports
    STUDIO_TIMEZONE: str = "America/Sao_Paulo"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
