import os
from pathlib import Path
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

TRAINING_SOURCES = ("sql", "memory")


class Config:
    """Application configuration loaded from environment variables"""

    # Server
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "8000"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Training records
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./gymhub.db")
    TRAINING_SOURCE = os.getenv("TRAINING_SOURCE", "sql").lower()

    @classmethod
    def validate(cls):
        """Validate that the configuration is usable"""
        problems = []

        if cls.TRAINING_SOURCE not in TRAINING_SOURCES:
            problems.append(f"TRAINING_SOURCE must be one of {', '.join(TRAINING_SOURCES)}")
        if cls.TRAINING_SOURCE == "sql" and not cls.DATABASE_URL:
            problems.append("DATABASE_URL")
        if not cls.CORS_ORIGINS:
            problems.append("CORS_ORIGINS")

        if problems:
            raise ValueError(
                f"Invalid configuration: {', '.join(problems)}. "
                f"Please check your .env file at {env_path}"
            )

        logger.info("✓ Configuration validated successfully")
        return True

    @classmethod
    def log_config(cls):
        """Log configuration (without exposing credentials in the database URL)"""
        db_url = cls.DATABASE_URL.split("@")[-1] if cls.DATABASE_URL else "✗ Missing"
        logger.info("Configuration:")
        logger.info(f"  Listen: {cls.HOST}:{cls.PORT}")
        logger.info(f"  Log level: {cls.LOG_LEVEL}")
        logger.info(f"  CORS origins: {', '.join(cls.CORS_ORIGINS)}")
        logger.info(f"  Training source: {cls.TRAINING_SOURCE}")
        logger.info(f"  Database: {db_url}")


# Validate on import (will raise error if settings are invalid)
try:
    Config.validate()
except ValueError as e:
    logger.warning(f"Configuration validation failed: {e}")
    logger.warning("Falling back to defaults where possible")
