import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


class AISettings(BaseModel):
    api_key: Optional[str] = Field(
        default=os.getenv("LLM_API_KEY") or os.getenv("OPENROUTER_API_KEY")
    )
    gateway_url: str = Field(
        default=os.getenv("LLM_GATEWAY_URL", "https://openrouter.ai/api/v1/chat/completions")
    )
    model_name: str = Field(default=os.getenv("AI_MODEL_NAME", "google/gemini-2.0-flash-001"))
    vision_model_name: str = Field(
        default=os.getenv("AI_VISION_MODEL_NAME", os.getenv("AI_MODEL_NAME", "google/gemini-2.0-flash-001"))
    )
    timeout_seconds: int = int(os.getenv("AI_TIMEOUT_SECONDS", "60"))
    kill_switch: bool = Field(default=os.getenv("AI_KILL_SWITCH", "false").lower() == "true")
    enable_vision_extraction: bool = os.getenv("AI_VISION_EXTRACTION", "true").lower() == "true"
    temperature: float = 0.2


class ScraperSettings(BaseModel):
    api_key: Optional[str] = Field(default=os.getenv("FIRECRAWL_API_KEY"))
    search_url: str = os.getenv("SCRAPER_SEARCH_URL", "https://api.firecrawl.dev/v1/search")
    country: str = os.getenv("SCRAPER_COUNTRY", "IN")
    results_per_query: int = int(os.getenv("SCRAPER_RESULTS_PER_QUERY", "5"))
    timeout_seconds: int = int(os.getenv("SCRAPER_TIMEOUT_SECONDS", "45"))
    enable_ai_enhancement: bool = os.getenv("JOB_AI_ENHANCEMENT", "true").lower() == "true"


class StorageSettings(BaseModel):
    backend: str = os.getenv("STORAGE_BACKEND", "local")  # local | s3
    local_path: str = os.getenv("LOCAL_STORAGE_PATH", "./storage")
    bucket: str = os.getenv("STORAGE_BUCKET", "resumes")
    region: Optional[str] = os.getenv("AWS_REGION")
    endpoint_url: Optional[str] = os.getenv("STORAGE_ENDPOINT_URL")
    signed_url_ttl: int = int(os.getenv("SIGNED_URL_TTL_SECONDS", "3600"))


class Config(BaseModel):
    app_name: str = "Resume Insight API"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"
    user_id_header: str = "X-User-Id"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./database.db")

    # Remote collaborators
    ai: AISettings = AISettings()
    scraper: ScraperSettings = ScraperSettings()
    storage: StorageSettings = StorageSettings()

    # Upload limits
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173,"
                "http://127.0.0.1:3000,http://127.0.0.1:5173",
            ).split(",")
            if o.strip()
        ]
    )

    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Config()

# --- Startup Validation ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if not settings.ai.api_key:
        _logger.warning("⚠ LLM_API_KEY is not set; resume analysis will fail until it is configured.")
    if not settings.scraper.api_key:
        _logger.warning("⚠ FIRECRAWL_API_KEY is not set; job matching is disabled.")
