"""Configuration management using Pydantic Settings."""
from typing import Optional
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # MySQL Configuration
    mysql_host: str = Field(..., alias="MYSQL_HOST")
    mysql_user: str = Field(..., alias="MYSQL_USER")
    mysql_password: str = Field(..., alias="MYSQL_PASSWORD")
    mysql_database: str = Field(..., alias="MYSQL_DATABASE")
    mysql_port: int = Field(3306, alias="MYSQL_PORT")
    # Full SQLAlchemy URL, takes precedence over the MYSQL_* fields when set
    database_url: Optional[str] = Field(None, alias="DATABASE_URL")

    # Completion service (OpenAI-compatible chat completions API)
    completion_api_key: Optional[str] = Field(None, alias="COMPLETION_API_KEY")
    completion_base_url: str = Field("https://api.openai.com/v1", alias="COMPLETION_BASE_URL")
    completion_model: str = Field("gpt-4.1", alias="COMPLETION_MODEL")
    completion_max_tokens: int = Field(5000, alias="COMPLETION_MAX_TOKENS")
    completion_temperature: float = Field(0.0, alias="COMPLETION_TEMPERATURE")
    completion_timeout: float = Field(120.0, alias="COMPLETION_TIMEOUT")

    # CV ingestion pipeline
    cv_batch_size: int = Field(5, alias="CV_BATCH_SIZE")
    cv_max_files: int = Field(50, alias="CV_MAX_FILES")
    max_file_size_mb: int = Field(10, alias="MAX_FILE_SIZE_MB")
    cv_skip_unreadable_files: bool = Field(False, alias="CV_SKIP_UNREADABLE_FILES")
    cv_extraction_timeout: float = Field(30.0, alias="CV_EXTRACTION_TIMEOUT")
    cv_abort_on_batch_failure: bool = Field(True, alias="CV_ABORT_ON_BATCH_FAILURE")
    cv_dedupe_before_persist: bool = Field(True, alias="CV_DEDUPE_BEFORE_PERSIST")
    cv_update_existing_applications: bool = Field(False, alias="CV_UPDATE_EXISTING_APPLICATIONS")

    # Monitoring
    sentry_dsn: Optional[str] = Field(None, alias="SENTRY_DSN")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    # Log emails as a***@domain
    log_mask_emails: bool = Field(True, alias="LOG_MASK_EMAILS")

    # SQL Logging (for debugging)
    sql_echo: bool = Field(False, alias="SQL_ECHO")
    sql_log_level: str = Field("INFO", alias="SQL_LOG_LEVEL")

    @field_validator("mysql_host", "mysql_user", "mysql_password", "mysql_database")
    @classmethod
    def validate_mysql_fields(cls, v: str) -> str:
        """Validate critical MySQL fields are not empty."""
        if not v or not v.strip():
            raise ValueError("MySQL configuration fields cannot be empty")
        return v.strip()

    @field_validator("cv_batch_size", "cv_max_files", "max_file_size_mb", "completion_max_tokens")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Batch size, upload limits and token bounds must be positive."""
        if v < 1:
            raise ValueError("value must be greater than zero")
        return v

    @property
    def mysql_url(self) -> str:
        """Generate MySQL connection URL."""
        if self.database_url:
            return self.database_url

        # URL encode username and password to handle special characters
        encoded_user = quote_plus(self.mysql_user)
        encoded_password = quote_plus(self.mysql_password) if self.mysql_password else ""

        if encoded_password:
            auth = f"{encoded_user}:{encoded_password}"
        else:
            auth = encoded_user

        return (
            f"mysql+aiomysql://{auth}"
            f"@{self.mysql_host}:{self.mysql_port}/{self.mysql_database}"
            "?charset=utf8mb4"
        )

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
