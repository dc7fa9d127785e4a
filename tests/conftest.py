"""
Shared fixtures: a recording log sink and settings overrides.
"""
import pytest

from helpdesk.config import Settings


class RecordingLogger:
    """Collects ``(level, message, context)`` records instead of printing them."""

    def __init__(self):
        self.records: list[tuple[str, str, dict]] = []

    def log(self, level: str, message: str, context: dict | None = None) -> None:
        self.records.append((level, message, context or {}))

    def messages(self, level: str) -> list[str]:
        return [message for lvl, message, _ in self.records if lvl == level]


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def make_settings():
    """Build settings with the documented defaults plus overrides."""
    def factory(**overrides) -> Settings:
        defaults = {
            "CONFIDENCE_THRESHOLD": 0.8,
            "AUTO_REPLY_ENABLED": False,
            "HUMAN_REVIEW_REQUIRED": True,
            "HUMAN_REVIEW_CONFIDENCE": 0.8,
            "SUMMARY_MAX_LENGTH": 200,
            "SWARM_MAX_AGENTS": 10,
            "SWARM_CONSENSUS_THRESHOLD": 0.7,
            "MAX_GRAPHS": 100,
            "LOG_LEVEL": "error",
        }
        return Settings(**{**defaults, **overrides})
    return factory


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()
