"""Application configuration settings."""
import os
from typing import List

# Pricing configuration
# Fixed JMD -> USD conversion; not fetched live
JMD_PER_USD: float = float(os.getenv("JMD_PER_USD", "128.5"))
FIXED_EXCHANGE_RATE: float = JMD_PER_USD

DEFAULT_SERVICE_FACTOR: float = float(os.getenv("DEFAULT_SERVICE_FACTOR", "200"))
DEFAULT_RISK_PROFILE: str = os.getenv("DEFAULT_RISK_PROFILE", "low")
DEFAULT_PREPAYMENT_PCT: float = float(os.getenv("DEFAULT_PREPAYMENT_PCT", "40"))
DEFAULT_DATA_COLLECTION_DAYS: float = float(os.getenv("DEFAULT_DATA_COLLECTION_DAYS", "3"))
DEFAULT_EVALUATION_DAYS: float = float(os.getenv("DEFAULT_EVALUATION_DAYS", "5"))
DEFAULT_ESTIMATED_WEEKS: float = float(os.getenv("DEFAULT_ESTIMATED_WEEKS", "3"))

# Draft storage configuration
DRAFT_KEY_PREFIX: str = os.getenv("DRAFT_KEY_PREFIX", "quote-draft:")

# Backend client configuration
QUOTE_API_BASE_URL: str = os.getenv("QUOTE_API_BASE_URL", "http://localhost:8000/api")
QUOTE_API_TIMEOUT: int = int(os.getenv("QUOTE_API_TIMEOUT", "30"))

# Accepted bearer tokens for the quote API (empty list accepts any token)
API_TOKENS: List[str] = [t.strip() for t in os.getenv("API_TOKENS", "").split(",") if t.strip()]

# Outbound quote-event notifications
NOTIFY_WEBHOOK_URL: str = os.getenv("NOTIFY_WEBHOOK_URL", "")
NOTIFY_WEBHOOK_TIMEOUT: int = int(os.getenv("NOTIFY_WEBHOOK_TIMEOUT", "10"))

# Flask configuration
FLASK_ENV: str = os.getenv("FLASK_ENV", "development")
FLASK_DEBUG: bool = os.getenv("FLASK_DEBUG", "1") == "1"

# SECRET_KEY: In production, this MUST be set via environment variable
# Generate with: python3 -c "import secrets; print(secrets.token_hex(32))"
if FLASK_ENV == "production":
    SECRET_KEY: str = os.getenv("SECRET_KEY")
    if not SECRET_KEY:
        raise ValueError(
            "SECRET_KEY environment variable is required in production. "
            "Generate one with: python3 -c \"import secrets; print(secrets.token_hex(32))\""
        )
else:
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")

# Server configuration
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8000"))

# CORS configuration
CORS_ORIGINS: List[str] = os.getenv("CORS_ORIGINS", "*").split(",")

# Logging configuration
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE_PATH: str = os.getenv("LOG_FILE_PATH", "logs/")
LOG_MAX_BYTES: int = int(os.getenv("LOG_MAX_BYTES", "10485760"))  # 10MB default
LOG_BACKUP_COUNT: int = int(os.getenv("LOG_BACKUP_COUNT", "5"))
ERROR_LOG_FILE: str = os.getenv("ERROR_LOG_FILE", "errors.log")
APP_LOG_FILE: str = os.getenv("APP_LOG_FILE", "app.log")

# Database configuration
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///quote_engine.db")
DATABASE_POOL_SIZE: int = int(os.getenv("DATABASE_POOL_SIZE", "5"))
DATABASE_MAX_OVERFLOW: int = int(os.getenv("DATABASE_MAX_OVERFLOW", "10"))
DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "0") == "1"
