"""
Configuration management for the decision engine.
"""
import os
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Agent decisions
    CONFIDENCE_THRESHOLD: float = float(os.getenv("CONFIDENCE_THRESHOLD", "0.8"))
    AUTO_REPLY_ENABLED: bool = os.getenv("AUTO_REPLY_ENABLED", "false").lower() == "true"
    HUMAN_REVIEW_REQUIRED: bool = os.getenv("HUMAN_REVIEW_REQUIRED", "true").lower() != "false"
    HUMAN_REVIEW_CONFIDENCE: float = float(os.getenv("HUMAN_REVIEW_CONFIDENCE", "0.8"))
    SUMMARY_MAX_LENGTH: int = int(os.getenv("SUMMARY_MAX_LENGTH", "200"))

    # Question graph swarm
    SWARM_MAX_AGENTS: int = int(os.getenv("SWARM_MAX_AGENTS", "10"))
    SWARM_CONSENSUS_THRESHOLD: float = float(os.getenv("SWARM_CONSENSUS_THRESHOLD", "0.7"))
    MAX_GRAPHS: int = int(os.getenv("MAX_GRAPHS", "100"))

    # Diagnostics
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info").lower()

    # API settings
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # CORS origins for the support dashboard
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)

    def validate(self) -> list[str]:
        """Validate settings. Returns list of problems."""
        problems = []
        for name in ("CONFIDENCE_THRESHOLD", "HUMAN_REVIEW_CONFIDENCE", "SWARM_CONSENSUS_THRESHOLD"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                problems.append(f"{name} must be within [0, 1], got {value}")
        for name in ("SWARM_MAX_AGENTS", "MAX_GRAPHS"):
            value = getattr(self, name)
            if value < 1:
                problems.append(f"{name} must be positive, got {value}")
        # Room for the "..." suffix
        if self.SUMMARY_MAX_LENGTH < 3:
            problems.append(f"SUMMARY_MAX_LENGTH must be at least 3, got {self.SUMMARY_MAX_LENGTH}")
        return problems


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
