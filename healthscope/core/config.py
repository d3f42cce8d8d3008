"""
Core configuration and settings for the FastAPI application.
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Application Info
    app_name: str = "HealthScope Conditions API"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 3000

    # CORS Settings
    cors_origins: list = ["http://localhost:4200"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list = ["GET"]
    cors_allow_headers: list = ["*"]

    # Knowledge Sources
    wikidata_api_url: str = "https://www.wikidata.org/w/api.php"
    wikidata_sparql_url: str = "https://query.wikidata.org/sparql"
    wikidata_entity_url: str = "https://www.wikidata.org/wiki/"
    dbpedia_sparql_url: str = "https://dbpedia.org/sparql"
    wikidoc_base_url: str = "https://www.wikidoc.org/index.php/"
    wikidoc_api_url: str = "https://www.wikidoc.org/api.php"

    # Outbound HTTP
    user_agent: str = "HealthScope/1.0 (student project)"
    http_timeout_seconds: float = 15.0
    # budget for one WikiDoc lookup: title resolution, page and sub-pages
    document_timeout_seconds: float = 45.0

    # Abstract cache
    abstract_cache_ttl_seconds: float = 3600.0

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Export settings instance
settings = get_settings()
