"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class RedisSettings(BaseSettings):
    """Redis Stack connection configuration."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis server URL",
    )
    password: SecretStr | None = Field(
        default=None,
        description="Redis password (optional for local)",
    )
    socket_timeout: float | None = Field(
        default=None,
        description="Socket timeout in seconds (None blocks until the server replies)",
    )


class IndexSettings(BaseSettings):
    """Search index layout and query parameters.

    Dimension and distance must agree with the embedding model in use.
    """

    model_config = SettingsConfigDict(env_prefix="INDEX_")

    name_prefix: str = Field(
        default="embeddings-",
        description="Prefix prepended to the tenant id to form the index name",
    )
    vector_field: str = Field(
        default="embedding",
        description="Hash field holding the encoded vector",
    )
    dimensions: int = Field(
        default=1536,
        description="Vector dimensions",
    )
    initial_capacity: int = Field(
        default=8000,
        description="Initial vector capacity of a new index",
    )
    distance_metric: str = Field(
        default="COSINE",
        description="Vector distance metric",
    )
    algorithm: str = Field(
        default="FLAT",
        description="Vector index algorithm",
    )
    vector_type: str = Field(
        default="FLOAT32",
        description="Vector component type",
    )
    knn_k: int = Field(
        default=10,
        ge=1,
        description="Nearest neighbours requested per query",
    )
    dialect: int = Field(
        default=2,
        description="Query dialect version",
    )
    delete_chunk_count: int = Field(
        default=5,
        ge=1,
        description="Number of chunk keys removed when deleting a batch",
    )
    message_budget: int = Field(
        default=7500,
        ge=0,
        description="Maximum length of a formatted result message",
    )


class EmbeddingSettings(BaseSettings):
    """Embedding service configuration."""

    model_config = SettingsConfigDict(env_prefix="EMBEDDING_")

    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Embedding service base URL",
    )
    model: str = Field(
        default="text-embedding-ada-002",
        description="Embedding model name",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="API key (optional for local servers)",
    )
    batch_size: int = Field(
        default=32,
        description="Batch size for embedding requests",
    )
    timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # API settings
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        description="API server port",
    )

    # Nested settings
    redis: RedisSettings = Field(default_factory=RedisSettings)
    index: IndexSettings = Field(default_factory=IndexSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
