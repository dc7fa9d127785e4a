"""
Markdown analysis comments posted on the support issue by the caller.
"""
from helpdesk.agent.prompts import (
    ANALYSIS_COMMENT,
    GRAPH_ANALYSIS_COMMENT,
    HIGH_CONSENSUS_VERDICT,
    LOW_CONSENSUS_VERDICT,
    REVIEW_NOTE,
)
from helpdesk.agent.state import ProcessResult


def format_analysis_comment(result: ProcessResult) -> str:
    """Summarize a pipeline result for the issue tracker."""
    triage = result.triage.metadata if result.triage else {}
    intent = result.intent.metadata if result.intent else {}
    summary = result.summary.suggested_response if result.summary else None

    return ANALYSIS_COMMENT.format(
        categories=", ".join(triage.get("categories") or []) or "General",
        priority=triage.get("priority") or "Normal",
        intent=intent.get("type") or "Unknown",
        summary=summary or "No summary available",
        final_action=result.final_action,
        requires_review="Yes" if result.requires_approval else "No",
        review_note=REVIEW_NOTE if result.requires_approval else "",
    )


def _describe(decision: dict) -> str:
    label = decision.get("answer")
    if label is None:
        label = decision.get("summary") or decision.get("decision") or decision.get("recommendation")
    confidence = decision.get("confidence") or decision.get("overall_confidence") or 0
    return f"- {label} (Confidence: {confidence * 100:.1f}%)"


def format_graph_analysis_comment(result, confidence_threshold: float, top: int = 3) -> str:
    """
    Summarize a question graph result for the issue tracker.

    Args:
        result: GraphProcessResult from the swarm orchestrator
        confidence_threshold: Consensus below this asks for human review
        top: Number of leading decisions to list
    """
    return GRAPH_ANALYSIS_COMMENT.format(
        consensus=result.consensus * 100,
        recommendation=result.recommendation,
        node_count=len(result.graph.nodes),
        step_count=len(result.graph.execution_order),
        key_decisions="\n".join(_describe(d) for d in result.decisions[:top]),
        verdict=(
            LOW_CONSENSUS_VERDICT
            if result.consensus < confidence_threshold
            else HIGH_CONSENSUS_VERDICT
        ),
    )
