"""
Configuration Management

Pydantic-settings based configuration for the S3 text detection trigger.
All settings can be overridden via environment variables.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables are prefixed with TEXTRACT_TRIGGER_ and are case-insensitive.
    Example: TEXTRACT_TRIGGER_POLL_INTERVAL_SECONDS=2
    """

    model_config = SettingsConfigDict(
        env_prefix="TEXTRACT_TRIGGER_",
        env_file=[".env.local", ".env"],  # Try .env.local first
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # AWS Configuration
    aws_region: str = Field(
        default="us-west-2",
        description="AWS region of the function and the S3 client",
    )
    s3_endpoint_url: str | None = Field(
        default=None,
        description="S3 endpoint URL (for local development)",
    )

    # Textract Configuration
    textract_region: str | None = Field(
        default=None,
        description="Region of the Textract endpoint (defaults to aws_region)",
    )
    textract_endpoint_url: str | None = Field(
        default=None,
        description="Textract endpoint URL (for local development)",
    )
    job_tag: str | None = Field(
        default=None,
        max_length=64,
        description="JobTag attached to every text detection job",
    )
    results_page_size: int | None = Field(
        default=None,
        ge=1,
        le=1000,
        description="MaxResults per GetDocumentTextDetection page (service default if unset)",
    )

    # Polling Configuration
    poll_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Fixed delay between job status queries",
    )
    poll_max_wait_seconds: float = Field(
        default=840.0,
        gt=0,
        description="Upper bound on total time spent waiting for a job",
    )
    timeout_safety_margin_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Time kept in reserve before the Lambda deadline",
    )

    # Processing Configuration
    verify_bucket_region: bool = Field(
        default=True,
        description="Fail fast when the bucket is not in the Textract region",
    )
    download_object: bool = Field(
        default=False,
        description="Also download the object before submitting it (Textract reads it from S3 itself)",
    )

    # Application Configuration
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    @property
    def textract_region_name(self) -> str:
        """Region the Textract client talks to."""
        return self.textract_region or self.aws_region

    @property
    def s3_config(self) -> dict:
        """S3 client configuration."""
        config = {"region_name": self.aws_region}
        if self.s3_endpoint_url and self.s3_endpoint_url != "mock":
            config["endpoint_url"] = self.s3_endpoint_url
        return config

    @property
    def textract_config(self) -> dict:
        """Textract client configuration."""
        config = {"region_name": self.textract_region_name}
        if self.textract_endpoint_url and self.textract_endpoint_url != "mock":
            config["endpoint_url"] = self.textract_endpoint_url
        return config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are loaded only once.
    Call Settings.model_validate({}) in tests to override.
    """
    return Settings()
