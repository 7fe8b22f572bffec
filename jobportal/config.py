"""
Configuration for JobPortal
Reads settings from the environment (and .env) once at import time
"""

import os
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name, "").strip()
    return int(value) if value else None


class Settings(BaseModel):
    # Hosted backend
    SUPABASE_URL: Optional[str] = Field(default=os.getenv("SUPABASE_URL"))
    SUPABASE_ANON_KEY: Optional[str] = Field(default=os.getenv("SUPABASE_ANON_KEY"))
    DATABASE_URL: Optional[str] = Field(default=os.getenv("DATABASE_URL"))

    # Assistant
    OPENAI_API_KEY: Optional[str] = Field(default=os.getenv("OPENAI_API_KEY"))
    OPENAI_BASE_URL: Optional[str] = Field(default=os.getenv("OPENAI_BASE_URL"))
    OPENAI_MODEL: str = Field(default=os.getenv("OPENAI_MODEL", "gpt-4o-mini"))
    ASSISTANT_TEMPERATURE: float = Field(default=float(os.getenv("ASSISTANT_TEMPERATURE", "0.7")))
    ASSISTANT_TOP_P: float = Field(default=float(os.getenv("ASSISTANT_TOP_P", "0.8")))
    # Only forwarded to hosts that accept it (e.g. OpenAI-compatible Gemini or vLLM endpoints)
    ASSISTANT_TOP_K: Optional[int] = Field(default=_optional_int("ASSISTANT_TOP_K"))
    ASSISTANT_MAX_TOKENS: int = Field(default=int(os.getenv("ASSISTANT_MAX_TOKENS", "1024")))

    # Session credential storage
    SESSION_FILE: str = Field(default=os.getenv("SESSION_FILE", os.path.expanduser("~/.jobportal/session.json")))

    # Server
    CORS_ORIGINS: str = Field(default=os.getenv("CORS_ORIGINS", "*"))
    HOST: str = Field(default=os.getenv("HOST", "0.0.0.0"))
    PORT: int = Field(default=int(os.getenv("PORT", "8000")))
    DEBUG: bool = Field(default=os.getenv("DEBUG", "false").lower() == "true")
    LOG_LEVEL: str = Field(default=os.getenv("LOG_LEVEL", "INFO").upper())

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
