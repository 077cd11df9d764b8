# docportal/core/config.py
import os
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent.parent

class Settings(BaseSettings):
    app_name: str = "DocPortal"
    env: str = "local"
    DATABASE_URL: str

    # Celery / Redis
    REDIS_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str | None = None
    AUTO_PROCESS_ON_UPLOAD: bool = True  # enqueue on upload (record starts QUEUED)
    CELERY_TASK_TIME_LIMIT_SECONDS: int = 600
    PENDING_SWEEP_INTERVAL_SECONDS: int = 300  # 0 disables the beat sweep

    # Storage
    STORAGE_BACKEND: str = "local"   # local | supabase
    LOCAL_STORAGE_DIR: str = os.path.join(PROJECT_ROOT, "var", "storage")
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_STORAGE_BUCKET: str = "documents"
    SUPABASE_STORAGE_SIGNED_URL_TTL_SECONDS: int = 3600
    MAX_UPLOAD_BYTES: int = 20 * 1024 * 1024

    # Tenancy
    DEFAULT_TENANT_SLUG: str = "default"

    # Auth
    JWT_SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRES_MINUTES: int = 60
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "admin"

    CORS_ALLOW_ORIGINS: str | None = None
    CORS_ALLOW_ORIGIN_REGEX: str | None = None

    # =========================
    # LLM
    # =========================
    LLM_PROVIDER: str = "openai"   # openai | gemini
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str | None = None
    OPENAI_MODEL: str = "gpt-4o"
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-1.5-pro"

    # Runtime controls
    LLM_TIMEOUT_SECONDS: int = 60
    LLM_MAX_RETRIES: int = 2
    LLM_MAX_OUTPUT_TOKENS: int = 2048
    LLM_TEMPERATURE: float = 0.3

    # Observability
    LLM_LOG_PROMPTS: bool = False  # keep False by default (avoid leaking data)

    # Document analysis
    ANALYSIS_PROMPT_VERSION: str = "v1"
    ANALYSIS_MAX_INPUT_CHARS: int = 15000
    ANALYSIS_MIN_CONFIDENCE: float = 0.5
    BATCH_PROCESS_LIMIT: int | None = None

    # Chunk embeddings (OpenAI only; skipped when OPENAI_API_KEY is unset)
    EMBEDDINGS_ENABLED: bool = True
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    EMBEDDING_CHUNK_CHARS: int = 4000
    EMBEDDING_CHUNK_OVERLAP_CHARS: int = 400
    EMBEDDING_MAX_CHUNKS: int = 100

    # Client-side polling
    MAX_POLL_ATTEMPTS: int = 12
    POLL_INTERVAL_MS: int = 5000

    model_config = SettingsConfigDict(
        env_file=os.path.join(PROJECT_ROOT, ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

settings = Settings()
