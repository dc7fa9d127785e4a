"""
Four-agent decision pipeline for support requests.

Architecture:
- Triage: Keyword categories and priority
- Intent Detection: Ordered keyword intent rules
- Summarization: Extractive summary of the request body
- Auto-Reply: Knowledge base responses, only when enabled
- Decide: Aggregates decisions into a final action
"""
from .graph import SupportOrchestrator, create_graph, determine_final_action
from .state import AgentDecision, ProcessResult, SupportRequest

__all__ = [
    "SupportOrchestrator",
    "create_graph",
    "determine_final_action",
    "AgentDecision",
    "ProcessResult",
    "SupportRequest",
]
