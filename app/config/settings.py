from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "literature"
    db_username: str = "literature"
    db_password: str = "secret"
    db_pool_max_size: int = 10

    files_root: Path = Path("/app/files")
    pdf_engine: str = "pdfplumber"
    max_upload_size_bytes: int = 50 * 1024 * 1024

    llm_provider: str = "openai"
    llm_api_key: str = ""
    llm_base_url: str | None = None
    llm_model_name: str = "gpt-4o-mini"
    llm_timeout_seconds: int = 120
    llm_max_tokens: int = 4000
    llm_temperature: float = 0.7

    guide_prompt_path: Path | None = None
    classification_prompt_path: Path | None = None

    worker_pool_size: int = 8
