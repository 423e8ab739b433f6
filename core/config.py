import os
from dotenv import load_dotenv

# Load .env file
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    def __init__(self):
        self.DATABASE_URL: str = os.getenv(
            "DATABASE_URL",
            "postgresql+asyncpg://localhost:5432/photospot_db"
        )
        self.DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "20"))
        self.DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "20"))

        self.SECRET_KEY: str = os.getenv("SECRET_KEY", "change-this-secret-key-in-production")
        self.ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
        self.ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

        self.UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
        self.MAX_FILE_SIZE: int = int(os.getenv("MAX_FILE_SIZE", str(10 * 1024 * 1024)))

        self.ALLOWED_ORIGINS: str = os.getenv("ALLOWED_ORIGINS", "")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

        # Location blur (meters)
        self.BLUR_MIN_RADIUS_M: int = int(os.getenv("BLUR_MIN_RADIUS_M", "100"))
        self.BLUR_MAX_RADIUS_M: int = int(os.getenv("BLUR_MAX_RADIUS_M", "500"))
        self.BLUR_DEFAULT_RADIUS_M: int = int(os.getenv("BLUR_DEFAULT_RADIUS_M", "200"))

        # Map view pagination
        self.MAP_PAGE_DEFAULT_LIMIT: int = int(os.getenv("MAP_PAGE_DEFAULT_LIMIT", "200"))
        self.MAP_PAGE_MAX_LIMIT: int = int(os.getenv("MAP_PAGE_MAX_LIMIT", "200"))

        # Uploads per user in a rolling 24h window
        self.PHOTO_UPLOAD_DAILY_LIMIT: int = int(os.getenv("PHOTO_UPLOAD_DAILY_LIMIT", "5"))

        self.RATE_LIMIT_ENABLED: bool = _env_bool("RATE_LIMIT_ENABLED", "true")

    @property
    def cors_origins(self) -> list:
        if not self.ALLOWED_ORIGINS:
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings"""
    return settings
