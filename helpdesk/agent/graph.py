"""
LangGraph support pipeline.

This module defines the graph that runs a support request through:
1. Triage - Categories and priority
2. Intent - What the requester wants
3. Summarize - Extractive summary of the body
4. Auto-Reply - Canned response (only when enabled)
5. Decide - Final action, approval flag and consensus
"""
from typing import Literal

from langgraph.graph import StateGraph, END

from helpdesk.agent.consensus import calculate_consensus, synthesize_recommendation
from helpdesk.agent.logging import DiagnosticLogger, get_logger
from helpdesk.agent.nodes import (
    AutoReplyAgent,
    IntentDetectionAgent,
    SummarizationAgent,
    TriageAgent,
)
from helpdesk.agent.policies import human_review_policy
from helpdesk.agent.runtime import Agent
from helpdesk.agent.state import (
    AgentDecision,
    AutoReplyInput,
    PipelineState,
    ProcessResult,
    SummarizationInput,
    SupportRequest,
    TextInput,
)
from helpdesk.config import Settings, get_settings


def determine_final_action(decisions: list[AgentDecision], confidence_threshold: float) -> dict:
    """
    Aggregate pipeline decisions.

    Any decision needing approval makes the whole request need approval.
    The request is auto-replied only when nothing needs approval, the best
    confidence clears the threshold and an auto-reply suggestion exists.
    """
    requires_approval = any(d.requires_human_approval for d in decisions)
    highest_confidence = max((d.confidence for d in decisions), default=0.0)

    final_action = "escalate"
    if not requires_approval and highest_confidence >= confidence_threshold:
        reply = next((d for d in decisions if d.action == "auto_reply"), None)
        if reply and reply.suggested_response:
            final_action = "auto_reply"

    consensus = calculate_consensus(decisions)

    return {
        "final_action": final_action,
        "requires_approval": requires_approval,
        "highest_confidence": highest_confidence,
        "consensus": consensus,
        "recommendation": synthesize_recommendation(consensus),
    }


def create_graph(agents: dict[str, Agent], settings: Settings):
    """
    Create the support pipeline graph.

    Graph structure:
    ```
    START → triage → intent → summarize → [auto-reply enabled?]
                                               │
                               ┌───────────────┴───────────────┐
                               │                               │
                              (no)                           (yes)
                               │                               ▼
                               │                          auto_reply
                               │                               │
                               └───────────────┬───────────────┘
                                               ▼
                                            decide → END
    ```
    """
    triage_agent = agents["TriageAgent"]
    intent_agent = agents["IntentDetectionAgent"]
    summarization_agent = agents["SummarizationAgent"]
    auto_reply_agent = agents["AutoReplyAgent"]

    def triage_node(state: PipelineState) -> dict:
        decision = triage_agent.process(state.request)
        return {"triage_decision": decision, "decisions": [decision]}

    def intent_node(state: PipelineState) -> dict:
        decision = intent_agent.process(TextInput(text=state.request.text))
        return {"intent_decision": decision, "decisions": [decision]}

    def summarize_node(state: PipelineState) -> dict:
        decision = summarization_agent.process(SummarizationInput(
            text=state.request.body,
            max_length=settings.SUMMARY_MAX_LENGTH,
        ))
        return {"summary_decision": decision, "decisions": [decision]}

    def auto_reply_node(state: PipelineState) -> dict:
        triage = state.triage_decision.metadata if state.triage_decision else {}
        decision = auto_reply_agent.process(AutoReplyInput(
            intent=state.intent_decision.metadata["type"],
            context={**state.request.model_dump(), "triage": triage},
        ))
        return {"reply_decision": decision, "decisions": [decision]}

    def decide_node(state: PipelineState) -> dict:
        return determine_final_action(state.decisions, settings.CONFIDENCE_THRESHOLD)

    def route_after_summary(state: PipelineState) -> Literal["auto_reply", "decide"]:
        """Auto-reply only for a typed intent and when the feature is on."""
        intent = state.intent_decision
        if intent and intent.metadata.get("type") and settings.AUTO_REPLY_ENABLED:
            return "auto_reply"
        return "decide"

    workflow = StateGraph(PipelineState)

    workflow.add_node("triage", triage_node)
    workflow.add_node("intent", intent_node)
    workflow.add_node("summarize", summarize_node)
    workflow.add_node("auto_reply", auto_reply_node)
    workflow.add_node("decide", decide_node)

    workflow.set_entry_point("triage")

    workflow.add_edge("triage", "intent")
    workflow.add_edge("intent", "summarize")
    workflow.add_conditional_edges(
        "summarize",
        route_after_summary,
        {
            "auto_reply": "auto_reply",
            "decide": "decide",
        }
    )
    workflow.add_edge("auto_reply", "decide")
    workflow.add_edge("decide", END)

    return workflow.compile()


class SupportOrchestrator:
    """
    Runs the four agents in sequence for one request at a time.

    Agents are stateless with respect to request data; the only mutable
    state is each agent's policy list, configured here at construction.
    """

    def __init__(self, settings: Settings | None = None, logger: DiagnosticLogger | None = None):
        self.settings = settings or get_settings()
        self.logger = logger or get_logger("SupportOrchestrator")
        self.agents: dict[str, Agent] = {}
        self._initialize_agents(logger)
        self.graph = create_graph(self.agents, self.settings)

    def _initialize_agents(self, logger: DiagnosticLogger | None) -> None:
        review_policy = human_review_policy(
            self.settings.HUMAN_REVIEW_CONFIDENCE,
            enabled=self.settings.HUMAN_REVIEW_REQUIRED,
        )

        for agent in (
            TriageAgent(self.settings, logger),
            SummarizationAgent(self.settings, logger),
            IntentDetectionAgent(self.settings, logger),
            AutoReplyAgent(self.settings, logger),
        ):
            agent.runtime.add_policy(review_policy)
            self.agents[agent.name] = agent

    def get_agent(self, name: str) -> Agent | None:
        return self.agents.get(name)

    def get_all_agents(self) -> list[Agent]:
        return list(self.agents.values())

    def process_request(self, request: SupportRequest | dict) -> ProcessResult:
        """
        Run a request through triage, intent, summarization and auto-reply.

        Args:
            request: Inbound request (subject, body, from, optional issue number)

        Returns:
            ProcessResult with the ordered decisions and the final action
        """
        request = SupportRequest.model_validate(request)
        result = self.graph.invoke(PipelineState(request=request))
        return self._build_result(request, result)

    async def aprocess_request(self, request: SupportRequest | dict) -> ProcessResult:
        """Async variant of ``process_request`` for event-loop callers."""
        request = SupportRequest.model_validate(request)
        result = await self.graph.ainvoke(PipelineState(request=request))
        return self._build_result(request, result)

    def _build_result(self, request: SupportRequest, result) -> ProcessResult:
        state = result if isinstance(result, PipelineState) else PipelineState.model_validate(result)

        process_result = ProcessResult(
            decisions=state.decisions,
            final_action=state.final_action,
            requires_approval=state.requires_approval,
            highest_confidence=state.highest_confidence,
            consensus=state.consensus,
            recommendation=state.recommendation,
        )

        self.logger.log("info", "Request processed", {
            "issue_number": request.issue_number,
            "decisions_count": len(process_result.decisions),
            "final_action": process_result.final_action,
            "requires_approval": process_result.requires_approval,
        })

        return process_result
