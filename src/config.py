"""Configuration management from environment variables."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file
load_dotenv()

# Project root
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
EXPORT_DIR = DATA_DIR / "exports"
INVOICES_DIR = DATA_DIR / "invoices"

# Ensure directories exist
DATA_DIR.mkdir(parents=True, exist_ok=True)


class Config:
    """Application configuration."""

    # HTTP
    USER_AGENT: str = os.getenv(
        "USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    )
    ACCEPT_LANGUAGE: str = os.getenv("ACCEPT_LANGUAGE", "fr-FR,fr;q=0.9,en-US;q=0.8,en;q=0.7")
    TIMEOUT: float = float(os.getenv("TIMEOUT", "20"))

    # Scraper
    CONCURRENCY: int = int(os.getenv("CONCURRENCY", "5"))
    MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "3"))

    # Telecom provider (Free Mobile)
    FREE_BASE_URL: str = os.getenv("FREE_BASE_URL", "https://mobile.free.fr")
    INVOICE_API_BASE: str = os.getenv("INVOICE_API_BASE", f"{FREE_BASE_URL}/account/v2/api/SI")
    FREE_SESSION_COOKIE: str | None = os.getenv("FREE_SESSION_COOKIE")

    # Show metadata
    TMDB_API_KEY: str | None = os.getenv("TMDB_API_KEY")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # API Security
    API_KEY: str | None = os.getenv("API_KEY")

    @classmethod
    def validate(cls, require_session: bool = False) -> None:
        """Validate required configuration."""
        errors = []
        if require_session and not cls.FREE_SESSION_COOKIE:
            errors.append("FREE_SESSION_COOKIE is required")
        if cls.TIMEOUT <= 0:
            errors.append("TIMEOUT must be positive")
        if cls.CONCURRENCY < 1:
            errors.append("CONCURRENCY must be at least 1")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


config = Config()
