from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Runtime ───────────────────────────────────────────────────────────────
    ENVIRONMENT: str = "production"

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "production", "test"}
        if v.lower() not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of {allowed}, got '{v}'")
        return v.lower()

    # ── AI Providers ──────────────────────────────────────────────────────────
    AI_PROVIDER: str = "groq"

    @field_validator("AI_PROVIDER")
    @classmethod
    def validate_ai_provider(cls, v: str) -> str:
        allowed = {"groq", "gemini"}
        if v.lower() not in allowed:
            raise ValueError(f"AI_PROVIDER must be one of {allowed}, got '{v}'")
        return v.lower()

    # Groq (primary)
    GROQ_API_KEY: Optional[str] = None
    GROQ_MODEL: str = "llama-3.3-70b-versatile"

    # Google (Gemini)
    GOOGLE_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # ── Generation parameters ────────────────────────────────────────────────
    AI_TIMEOUT_SECONDS: int = 30
    AI_TEMPERATURE: float = 0.7
    AI_MAX_TOKENS: int = 4000
    AI_TOP_P: float = 0.9
    AI_FREQUENCY_PENALTY: float = 0.2

    # ── Database ─────────────────────────────────────────────────────────────
    MONGODB_URI: Optional[str] = None
    MONGO_URI: Optional[str] = None  # legacy name, used when MONGODB_URI is unset
    MONGODB_DB: str = "roadmapper"
    DB_TIMEOUT_MS: int = 30000

    # ── Federated sign-in ────────────────────────────────────────────────────
    GITHUB_CLIENT_ID: Optional[str] = None
    GITHUB_CLIENT_SECRET: Optional[str] = None
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None

    # ── Core ──────────────────────────────────────────────────────────────────
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def mongodb_uri(self) -> Optional[str]:
        return self.MONGODB_URI or self.MONGO_URI


settings = Settings()
