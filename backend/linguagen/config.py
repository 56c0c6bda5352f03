"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Database ─────────────────────────────────────────────────────────────
    # Local SQLite file holding the key-value storage slots.
    DATABASE_URL: str = "sqlite:///./linguagen.db"

    # Upper bound for a single serialized collection.
    STORAGE_QUOTA_BYTES: int = 5 * 1024 * 1024

    # ── Lesson generator (Anthropic) ─────────────────────────────────────────
    # Fallback credential; a key saved through /api/settings/api-key wins.
    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_MODEL: str = "claude-3-5-haiku-20241022"
    LESSON_LLM_TEMPERATURE: float = 0.7
    REFINE_LLM_TEMPERATURE: float = 0.4
    LESSON_MAX_TOKENS: int = 8192

    # How many earlier topics of the same student are sent as context.
    PREVIOUS_TOPICS_LIMIT: int = 9

    # Open workflows untouched for this long are dropped from memory.
    WORKFLOW_IDLE_SECONDS: int = 6 * 60 * 60

    # ── Backup ───────────────────────────────────────────────────────────────
    BACKUP_FILENAME_PREFIX: str = "linguagen-backup"

    # ── CORS ─────────────────────────────────────────────────────────────────
    # Comma-separated list of allowed origins.
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
