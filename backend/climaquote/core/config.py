from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
from typing import Any, ClassVar
import json
from pathlib import Path
import os


class Settings(BaseSettings):
    API_V1_STR: str = "/api/v1"

    # Database URL
    # Use an absolute path so running the app from different directories
    # (e.g., repo root or backend/) always resolves the same DB file.
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parents[2]
    SQLALCHEMY_DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'climaquote.db'}"

    # CORS origins
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    CORS_ALLOW_ALL: bool = False

    # Base frontend URL used to build customer acceptance links
    FRONTEND_URL: str = "http://localhost:5173"

    # Locales supported by catalog labels and quote documents
    DEFAULT_LOCALE: str = "es"
    SUPPORTED_LOCALES: ClassVar[tuple[str, ...]] = ("es", "ca")

    # Quote numbering and validity
    QUOTE_NUMBER_PREFIX: str = "PRE"
    QUOTE_VALIDITY_DAYS: int = 30

    # Gemini document extraction
    GOOGLE_GENAI_API_KEY: str = ""
    GENAI_MODEL: str = "gemini-2.5-flash"
    AI_EXTRACTION_TIMEOUT_SECONDS: float = 8.5
    AI_MAX_UPLOAD_BYTES: int = 4_718_592  # 4.5 MB

    LOG_LEVEL: str = "INFO"

    @field_validator("CORS_ORIGINS", mode="before")
    def split_origins(cls, v: Any) -> list[str]:
        """Parse comma-separated or JSON list of origins from environment."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("GOOGLE_GENAI_API_KEY", "FRONTEND_URL", mode="before")
    def strip_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("DEFAULT_LOCALE", mode="before")
    def normalize_locale(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in cls.SUPPORTED_LOCALES:
                return "es"
        return v

    @model_validator(mode="after")
    def allow_all_if_requested(cls, values: "Settings") -> "Settings":
        if values.CORS_ALLOW_ALL:
            values.CORS_ORIGINS = ["*"]
        return values

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=True,
    )


def load_settings() -> "Settings":
    return Settings(_env_file=os.getenv("ENV_FILE", str(Path(__file__).resolve().parents[3] / ".env")))


settings = load_settings()


def acceptance_link(quote_id: int) -> str:
    """Return the public, unlisted URL a customer uses to sign a quote."""
    base = (settings.FRONTEND_URL or "").rstrip("/")
    return f"{base}/#/presupuestos/{int(quote_id)}/aceptar"
