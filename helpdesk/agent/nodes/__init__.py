"""Agents run as steps of the support pipeline."""
from .triage import TriageAgent
from .intent import IntentDetectionAgent
from .summarizer import SummarizationAgent
from .auto_reply import AutoReplyAgent

__all__ = [
    "TriageAgent",
    "IntentDetectionAgent",
    "SummarizationAgent",
    "AutoReplyAgent",
]
