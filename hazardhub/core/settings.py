"""
Core settings and environment variables for Spot Hazard Hub.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Spot Hazard Hub"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:5173"

    # Storage backend: "memory", "json" or "firestore"
    STORAGE_BACKEND: str = "json"
    JSON_STORE_DIR: str = "./data"  # One JSON blob per collection lives here

    # Firebase/Firestore (only used when STORAGE_BACKEND == "firestore")
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # Collection names
    ALERTS_COLLECTION: str = "hazard_alerts"
    PROPOSALS_COLLECTION: str = "deletion_proposals"
    SPOTS_COLLECTION: str = "spots"

    # Consensus thresholds
    CONFIRM_THRESHOLD: int = 3  # Total confirmations (reporter included) to confirm an alert
    DELETE_THRESHOLD: int = 5   # Total confirmations to open a deletion proposal
    VOTE_QUORUM: int = 5        # Votes required before a proposal can resolve

    # Free-text limit on alert details
    DETAILS_MAX_LENGTH: int = 500

    # Whole-command retries after a compare-and-swap conflict
    WRITE_RETRY_LIMIT: int = 3

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origins_list(self):
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
