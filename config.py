# config.py
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    database_url: str = "sqlite:///./leads.db"

    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.0

    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.6

    llm_max_retries: int = 2
    llm_timeout_seconds: float = 60.0

    upload_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment (and a local .env file if present)."""
    load_dotenv()
    defaults = Settings()
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults.database_url),
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL", defaults.openai_model),
        openai_temperature=float(os.getenv("OPENAI_TEMPERATURE", defaults.openai_temperature)),
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", defaults.gemini_model),
        gemini_temperature=float(os.getenv("GEMINI_TEMPERATURE", defaults.gemini_temperature)),
        llm_max_retries=int(os.getenv("LLM_MAX_RETRIES", defaults.llm_max_retries)),
        llm_timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", defaults.llm_timeout_seconds)),
        upload_dir=os.getenv("UPLOAD_DIR", defaults.upload_dir),
        max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", defaults.max_upload_bytes)),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level),
    )
