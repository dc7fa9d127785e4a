"""
Logging utilities for agent diagnostics.

Provides colored console output to trace a support request through the
agents and the question graph. Components receive a logger object with a
``log(level, message, context)`` method so callers can inject their own sink.
"""
import json
from datetime import datetime
from typing import Any, Protocol

from helpdesk.config import get_settings

# ANSI color codes
COLORS = {
    "reset": "\033[0m",
    # Component colors
    "triageagent": "\033[94m",          # Blue
    "intentdetectionagent": "\033[95m", # Magenta
    "summarizationagent": "\033[96m",   # Cyan
    "autoreplyagent": "\033[92m",       # Green
    "supportorchestrator": "\033[93m",  # Yellow
    "swarmorchestrator": "\033[93m",    # Yellow
    # Status colors
    "error": "\033[91m",      # Red
    "warning": "\033[93m",    # Yellow
    "info": "\033[97m",       # White
    "debug": "\033[2m",       # Dim
}

LEVELS = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "error": 40,
}


def _colorize(text: str, color: str) -> str:
    """Apply color to text."""
    return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"


def _timestamp() -> str:
    """Get current timestamp."""
    return datetime.now().strftime("%H:%M:%S.%f")[:-3]


def _component_color(component: str) -> str:
    color = component.lower().replace("_", "").replace(" ", "")
    return color if color in COLORS else "info"


def _format_value(value: Any, max_length: int = 200) -> str:
    """Format a value for display, truncating if necessary."""
    if value is None:
        return "None"

    if hasattr(value, "model_dump"):
        value = value.model_dump()

    if isinstance(value, (dict, list)):
        try:
            formatted = json.dumps(value, indent=2, default=str)
        except (TypeError, ValueError):
            formatted = str(value)
    else:
        formatted = str(value)

    if len(formatted) > max_length:
        return formatted[:max_length] + "..."
    return formatted


class DiagnosticLogger(Protocol):
    """Sink for structured diagnostic records."""

    def log(self, level: str, message: str, context: dict | None = None) -> None:
        ...


class ConsoleLogger:
    """
    Default diagnostic sink.

    Prints one colored line per record followed by the context fields,
    dropping records below the configured level.
    """

    def __init__(self, component: str, level: str = "info"):
        self.component = component
        self.level = level.lower()

    def enabled_for(self, level: str) -> bool:
        return LEVELS.get(level, 20) >= LEVELS.get(self.level, 20)

    def log(self, level: str, message: str, context: dict | None = None) -> None:
        if not self.enabled_for(level):
            return

        tag = _colorize(f"[{self.component.upper()}]", _component_color(self.component))
        label = _colorize(level.upper(), level if level in COLORS else "info")
        print(f"{_timestamp()} {tag} {label} {message}")
        for key, value in (context or {}).items():
            print(f"  {key}: {_format_value(value)}")

    def debug(self, message: str, context: dict | None = None) -> None:
        self.log("debug", message, context)

    def info(self, message: str, context: dict | None = None) -> None:
        self.log("info", message, context)

    def warning(self, message: str, context: dict | None = None) -> None:
        self.log("warning", message, context)

    def error(self, message: str, context: dict | None = None) -> None:
        self.log("error", message, context)


def get_logger(component: str) -> ConsoleLogger:
    """Build the default console sink for a component at the configured level."""
    return ConsoleLogger(component, level=get_settings().LOG_LEVEL)
