from pydantic_settings import BaseSettings
from typing import List, Any
import json
from pathlib import Path


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "ProConnect"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days
    BCRYPT_ROUNDS: int = 10
    PASSWORD_MIN_LENGTH: int = 6

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # Request limits
    # ==========================================
    MAX_REQUEST_SIZE: int = 10485760  # 10MB

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # ==========================================
    # Uploads / Certificates
    # ==========================================
    UPLOADS_DIR: str = "uploads"
    CERTIFICATE_ID_PREFIX: str = "NIAT"
    CERTIFICATE_ISSUER: str = "NIAT Institute"
    CERTIFICATE_FOOTER: str = "ProConnect - NIAT Institute"
    CONTEST_CERTIFICATE_FOOTER: str = "ProConnect • NIAT Institute • Project of the Week Contest"

    @property
    def CERTIFICATES_DIR(self) -> Path:
        """Directory holding rendered certificate PDFs"""
        return Path(self.UPLOADS_DIR) / "certificates"

    # ==========================================
    # Project of the Week Contest
    # ==========================================
    # Day-of-week and week numbers are evaluated at this fixed offset from UTC
    CONTEST_UTC_OFFSET_MINUTES: int = 330  # IST
    POTW_DEFAULT_SCORE: float = 100
    POTW_HISTORY_LIMIT: int = 20

    # ==========================================
    # Social
    # ==========================================
    NOTIFICATION_PAGE_SIZE: int = 50
    AVATAR_URL_TEMPLATE: str = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"

    # ==========================================
    # Technology Trends
    # ==========================================
    TRENDING_WINDOW_DAYS: int = 7
    TRENDING_LIMIT: int = 10
    TECHNOLOGY_MONTHLY_WINDOW_DAYS: int = 30

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def BASE_DIR(self) -> Path:
        """Backend root directory"""
        return Path(__file__).resolve().parent.parent.parent

    def is_dev_mode(self) -> bool:
        """Check if running in development mode"""
        return self.ENVIRONMENT == "development" or self.DEBUG

    def default_avatar_url(self, seed: str) -> str:
        """Avatar shown until the user uploads one"""
        return self.AVATAR_URL_TEMPLATE.format(seed=seed)


# Create settings instance
settings = Settings()
