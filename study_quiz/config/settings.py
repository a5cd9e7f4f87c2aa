"""Application settings and configuration."""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Load .env file if present
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # AWS CONFIG (optional: boto3 also falls back to its own credential chain)
    aws_api_key_id: str | None = Field(
        default=None,
        description="AWS API key ID",
        validation_alias="AWS_ACCESS_KEY_ID",
    )
    aws_api_key_secret: str | None = Field(
        default=None,
        description="AWS API key",
        validation_alias="AWS_SECRET_ACCESS_KEY",
    )
    aws_default_region: str | None = Field(
        default=None,
        description="AWS API region",
        validation_alias="AWS_DEFAULT_REGION",
    )

    # Model Configuration
    llm_provider: str = Field(
        default="bedrock",
        description="Chat model provider: bedrock or anthropic",
        validation_alias="LLM_PROVIDER",
    )
    model_name: str = Field(
        default="anthropic.claude-3-7-sonnet-20250219-v1:0",
        description="Model to use (Bedrock model ID or Anthropic model name)",
        validation_alias="MODEL_NAME",
    )
    generation_temperature: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Temperature for question generation",
        validation_alias="GENERATION_TEMPERATURE",
    )

    # Question contract
    strict_min_options: int = Field(
        default=4,
        ge=2,
        le=6,
        description="Minimum options per generated question when aligned with the exam",
        validation_alias="STRICT_MIN_OPTIONS",
    )

    # Run modes
    timed_question_count: int = Field(
        default=20,
        gt=0,
        validation_alias="TIMED_QUESTION_COUNT",
    )
    half_timed_question_count: int = Field(
        default=50,
        gt=0,
        validation_alias="HALF_TIMED_QUESTION_COUNT",
    )
    assessment_question_count: int = Field(
        default=40,
        gt=0,
        validation_alias="ASSESSMENT_QUESTION_COUNT",
    )
    assessment_distribution: dict[str, float] = Field(
        default_factory=lambda: {
            "part-i": 0.15,
            "part-ii": 0.35,
            "part-iii": 0.15,
            "part-iv": 0.35,
        },
        description="Share of the assessment drawn from each curriculum part",
        validation_alias="ASSESSMENT_DISTRIBUTION",
    )
    seconds_per_timed_question: int = Field(
        default=90,
        gt=0,
        validation_alias="SECONDS_PER_TIMED_QUESTION",
    )

    # History
    history_path: Path = Field(
        default=Path.home() / ".study_quiz" / "history.json",
        description="Where completed runs are stored",
        validation_alias="HISTORY_PATH",
    )
    max_history_items: int = Field(
        default=50,
        ge=1,
        description="Oldest runs are evicted beyond this count",
        validation_alias="MAX_HISTORY_ITEMS",
    )

    # Logging
    log_level: str = Field(default="WARNING", validation_alias="LOG_LEVEL")
    json_logs: bool = Field(default=False, validation_alias="JSON_LOGS")

    @field_validator("llm_provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        v = v.lower()
        if v not in {"bedrock", "anthropic"}:
            raise ValueError("LLM_PROVIDER must be 'bedrock' or 'anthropic'")
        return v

    @field_validator("assessment_distribution")
    @classmethod
    def validate_distribution(cls, v: dict[str, float]) -> dict[str, float]:
        if any(share < 0 for share in v.values()):
            raise ValueError("Distribution shares cannot be negative")
        if abs(sum(v.values()) - 1.0) > 1e-6:
            raise ValueError("Distribution shares must add up to 1")
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# This is loaded the first time and then cached for further use
@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings object with loaded configuration
    """
    return Settings()
