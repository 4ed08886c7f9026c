from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "NASA Space Explorer API"
    VERSION: str = "1.0.1"
    API_V1_STR: str = "/api/v1"

    NASA_API_KEY: str = "DEMO_KEY"
    NASA_API_BASE_URL: str = "https://api.nasa.gov"
    UPSTREAM_TIMEOUT: float = 10.0
    # Per-client cache inside NasaClient, independent of the HTTP-layer cache
    UPSTREAM_CACHE_TTL: int = 900

    CACHE_TTL: int = 900  # seconds
    CACHE_MAX_ENTRIES: int = 1000
    CACHE_SWEEP_INTERVAL: int = 60  # seconds, 0 disables the background sweep

    RATE_LIMIT_WINDOW_MS: int = 900000
    RATE_LIMIT_MAX_REQUESTS: int = 100
    # Any limits storage URI, e.g. redis://localhost:6379 to share quotas between workers
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    PORT: int = 5000
    CLIENT_URL: Optional[str] = None
    NODE_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.NODE_ENV == "production"

    @property
    def CORS_ORIGINS(self) -> list[str]:
        origins = ["http://localhost:3000", "http://localhost:3001"]
        if self.CLIENT_URL:
            origins.append(self.CLIENT_URL)
        return origins

    class Config:
        case_sensitive = True
        env_file = ".env"

settings = Settings()
