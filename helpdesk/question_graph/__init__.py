"""
Question graph decomposition for support requests.

A request becomes a dependency-ordered graph of sub-questions and
reasoning steps; each node is answered by a deterministic handler and the
answers are scored into a consensus.
"""
from .orchestrator import SwarmOrchestrator, decompose_question
from .state import (
    AgentLimitError,
    GraphNotFoundError,
    GraphProcessResult,
    InvalidTransitionError,
    NodeNotFoundError,
    NodeSpec,
    QuestionGraph,
    QuestionNode,
    SwarmConfig,
)

__all__ = [
    "SwarmOrchestrator",
    "decompose_question",
    "AgentLimitError",
    "GraphNotFoundError",
    "GraphProcessResult",
    "InvalidTransitionError",
    "NodeNotFoundError",
    "NodeSpec",
    "QuestionGraph",
    "QuestionNode",
    "SwarmConfig",
]
