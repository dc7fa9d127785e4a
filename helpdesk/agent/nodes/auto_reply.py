"""
Auto-Reply Agent

Looks up a canned response for an intent: knowledge base entries first,
then generic replies for the intents the detector produces.
"""
from helpdesk.agent.logging import DiagnosticLogger
from helpdesk.agent.prompts import INTENT_REPLIES, KNOWLEDGE_BASE
from helpdesk.agent.runtime import AgentRuntime
from helpdesk.agent.state import AgentDecision, AutoReplyInput
from helpdesk.config import Settings, get_settings


FOUND_CONFIDENCE = 0.9
NOT_FOUND_CONFIDENCE = 0.3


class AutoReplyAgent:
    """Knowledge-base backed reply generator."""

    name = "AutoReplyAgent"

    def __init__(self, settings: Settings | None = None, logger: DiagnosticLogger | None = None):
        self.settings = settings or get_settings()
        self.runtime = AgentRuntime(self.name, logger)
        # Read-only after construction
        self.knowledge_base = dict(KNOWLEDGE_BASE)

    def process(self, input: AutoReplyInput | dict) -> AgentDecision:
        reply_input = AutoReplyInput.model_validate(input)
        return self.runtime.run(reply_input, self._decide, "Auto-reply decision")

    def generate_response(self, intent: str) -> str | None:
        if intent in self.knowledge_base:
            return self.knowledge_base[intent]
        return INTENT_REPLIES.get(intent)

    def _decide(self, reply_input: AutoReplyInput) -> AgentDecision:
        response = self.generate_response(reply_input.intent)
        confidence = FOUND_CONFIDENCE if response else NOT_FOUND_CONFIDENCE

        return AgentDecision(
            action="auto_reply" if response else "escalate",
            confidence=confidence,
            reasoning=(
                "Found matching response in knowledge base"
                if response else "No suitable response found"
            ),
            requires_human_approval=(
                not response or confidence < self.settings.CONFIDENCE_THRESHOLD
            ),
            suggested_response=response,
            metadata={"intent": reply_input.intent},
        )
