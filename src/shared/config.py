from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    DATABASE_URL: str = Field(
        ...,
        description="PostgreSQL database connection URL",
        env="DATABASE_URL"
    )

    DATABASE_POOL_SIZE: int = Field(
        default=10,
        description="Database connection pool size",
        env="DATABASE_POOL_SIZE"
    )

    DATABASE_MAX_OVERFLOW: int = Field(
        default=20,
        description="Database connection pool max overflow",
        env="DATABASE_MAX_OVERFLOW"
    )

    DATABASE_POOL_TIMEOUT: int = Field(
        default=30,
        description="Database connection pool timeout in seconds",
        env="DATABASE_POOL_TIMEOUT"
    )

    DATABASE_ECHO: bool = Field(
        default=False,
        description="Enable SQLAlchemy echo mode for debugging",
        env="DATABASE_ECHO"
    )

    ENVIRONMENT: str = Field(
        default="development",
        description="Application environment",
        env="ENVIRONMENT"
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level",
        env="LOG_LEVEL"
    )

    # Crawler HTTP settings
    CRAWLER_HTTP_TIMEOUT: int = Field(
        default=30,
        description="Timeout for feed and page fetches in seconds",
        env="CRAWLER_HTTP_TIMEOUT"
    )

    FEED_USER_AGENT: str = Field(
        default="SiteWatch/1.0 (RSS Reader)",
        description="User-Agent header sent when fetching feeds",
        env="FEED_USER_AGENT"
    )

    HTML_USER_AGENT: str = Field(
        default="Mozilla/5.0 (compatible; SiteWatch/1.0)",
        description="User-Agent header sent when scraping pages",
        env="HTML_USER_AGENT"
    )

    # Extraction heuristics
    CONTENT_CONTAINER_SELECTORS: List[str] = Field(
        default=[".content", ".post-content", ".article-content", ".entry-content"],
        description="CSS selectors tried for the main content container",
        env="CONTENT_CONTAINER_SELECTORS"
    )

    SNIPPET_MAX_LENGTH: int = Field(
        default=200,
        description="Maximum length of item summaries",
        env="SNIPPET_MAX_LENGTH"
    )

    MIN_PARAGRAPH_LENGTH: int = Field(
        default=50,
        description="Paragraphs at or below this length are ignored by the text-block heuristic",
        env="MIN_PARAGRAPH_LENGTH"
    )

    CRAWLER_CONCURRENCY_LIMIT: int = Field(
        default=10,
        description="Maximum sources crawled concurrently in a batch",
        env="CRAWLER_CONCURRENCY_LIMIT"
    )

    # Celery configuration
    CELERY_BROKER_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Celery message broker URL",
        env="CELERY_BROKER_URL"
    )

    CELERY_RESULT_BACKEND: str = Field(
        default="redis://localhost:6379/0",
        description="Celery result backend URL",
        env="CELERY_RESULT_BACKEND"
    )

    CELERY_TASK_SERIALIZER: str = Field(
        default="json",
        description="Celery task serialization format",
        env="CELERY_TASK_SERIALIZER"
    )

    CELERY_RESULT_SERIALIZER: str = Field(
        default="json",
        description="Celery result serialization format",
        env="CELERY_RESULT_SERIALIZER"
    )

    CELERY_ACCEPT_CONTENT: list = Field(
        default=["json"],
        description="Celery accepted content types",
        env="CELERY_ACCEPT_CONTENT"
    )

    CELERY_TIMEZONE: str = Field(
        default="UTC",
        description="Celery timezone setting",
        env="CELERY_TIMEZONE"
    )

    CELERY_ENABLE_UTC: bool = Field(
        default=True,
        description="Enable UTC in Celery",
        env="CELERY_ENABLE_UTC"
    )

    CELERY_WORKER_PREFETCH_MULTIPLIER: int = Field(
        default=1,
        description="Celery worker prefetch multiplier",
        env="CELERY_WORKER_PREFETCH_MULTIPLIER"
    )

    # Scheduling
    SCHEDULER_SCAN_INTERVAL_SECONDS: int = Field(
        default=60,
        description="How often Celery beat looks for sources due for a check",
        env="SCHEDULER_SCAN_INTERVAL_SECONDS"
    )

    CRAWL_TASK_TIMEOUT: int = Field(
        default=300,
        description="Maximum execution time of a single source crawl task in seconds",
        env="CRAWL_TASK_TIMEOUT"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="API host binding address",
        env="API_HOST"
    )

    API_PORT: int = Field(
        default=8000,
        description="API port number",
        env="API_PORT"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v.startswith(("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")):
            raise ValueError(
                "DATABASE_URL must start with postgresql://, postgresql+asyncpg:// or sqlite+aiosqlite://"
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        valid_envs = ["development", "testing", "staging", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of {valid_envs}")
        return v.lower()

    @field_validator("CRAWLER_HTTP_TIMEOUT")
    @classmethod
    def validate_http_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("CRAWLER_HTTP_TIMEOUT must be positive")
        if v > 300:  # 5 minutes max
            raise ValueError("CRAWLER_HTTP_TIMEOUT must not exceed 300 seconds")
        return v

    @field_validator("SNIPPET_MAX_LENGTH")
    @classmethod
    def validate_snippet_length(cls, v: int) -> int:
        if v < 4:
            raise ValueError("SNIPPET_MAX_LENGTH must be at least 4")
        return v

    @field_validator("MIN_PARAGRAPH_LENGTH")
    @classmethod
    def validate_min_paragraph_length(cls, v: int) -> int:
        if v < 0:
            raise ValueError("MIN_PARAGRAPH_LENGTH must be non-negative")
        return v

    @field_validator("CONTENT_CONTAINER_SELECTORS")
    @classmethod
    def validate_container_selectors(cls, v: List[str]) -> List[str]:
        cleaned = [selector.strip() for selector in v if selector and selector.strip()]
        if not cleaned:
            raise ValueError("CONTENT_CONTAINER_SELECTORS must contain at least one selector")
        return cleaned

    @field_validator("CRAWLER_CONCURRENCY_LIMIT")
    @classmethod
    def validate_concurrency_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("CRAWLER_CONCURRENCY_LIMIT must be positive")
        if v > 50:
            raise ValueError("CRAWLER_CONCURRENCY_LIMIT must not exceed 50")
        return v

    @field_validator("CELERY_BROKER_URL", "CELERY_RESULT_BACKEND")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        if not v.startswith("redis://"):
            raise ValueError("Celery broker and result backend URLs must start with redis://")
        return v

    @field_validator("CELERY_TASK_SERIALIZER", "CELERY_RESULT_SERIALIZER")
    @classmethod
    def validate_celery_serializer(cls, v: str) -> str:
        valid_serializers = ["json", "pickle", "yaml", "msgpack"]
        if v.lower() not in valid_serializers:
            raise ValueError(f"Celery serializer must be one of {valid_serializers}")
        return v.lower()

    @field_validator("SCHEDULER_SCAN_INTERVAL_SECONDS")
    @classmethod
    def validate_scan_interval(cls, v: int) -> int:
        if v < 10:
            raise ValueError("SCHEDULER_SCAN_INTERVAL_SECONDS must be at least 10")
        return v

    @field_validator("CRAWL_TASK_TIMEOUT")
    @classmethod
    def validate_crawl_task_timeout(cls, v: int) -> int:
        if v <= 60:
            raise ValueError("CRAWL_TASK_TIMEOUT must exceed 60 seconds")
        if v > 7200:  # 2 hours max
            raise ValueError("CRAWL_TASK_TIMEOUT must not exceed 7200 seconds")
        return v

    @field_validator("API_PORT")
    @classmethod
    def validate_api_port(cls, v: int) -> int:
        if v <= 0 or v > 65535:
            raise ValueError("API_PORT must be between 1 and 65535")
        return v

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
