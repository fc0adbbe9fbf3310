from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "QuestionBank"
    # Uploads are read fully into memory before being written to disk.
    max_upload_bytes: int = 50 * 1024 * 1024  # 50 MiB per file
    max_files_per_upload: int = 20
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("QBANK_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("QBANK_OPENAI_BASE_URL", "OPENAI_BASE_URL"),
    )
    openai_model: str = "gpt-4o"
    min_extracted_chars: int = 50
    recent_pdf_limit: int = 10
    api_prefix: str = "/api"
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return self.data_path / "db.sqlite"

    @property
    def upload_dir(self) -> Path:
        return self.data_path / "uploads"

    @property
    def generated_dir(self) -> Path:
        return self.data_path / "generated_pdfs"

    model_config = {"env_prefix": "QBANK_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
