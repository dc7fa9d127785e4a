"""
Intent Detection Agent

Classifies free text into one of six intents. Rules are checked in order
and the first match wins, so "refund because the feature is broken" is a
refund request, not a bug report.
"""
from helpdesk.agent.logging import DiagnosticLogger
from helpdesk.agent.runtime import AgentRuntime
from helpdesk.agent.state import AgentDecision, TextInput
from helpdesk.config import Settings, get_settings


INTENT_RULES = [
    ("cancellation", ("cancel", "unsubscribe")),
    ("refund_request", ("refund", "money back")),
    ("information_request", ("how", "what", "where")),
    ("bug_report", ("bug", "broken", "not working")),
    ("feature_request", ("feature", "could you", "would be nice")),
]

GENERAL_INQUIRY = "general_inquiry"


def detect_intent(text: str) -> str:
    lower_text = text.lower()
    for intent, keywords in INTENT_RULES:
        if any(keyword in lower_text for keyword in keywords):
            return intent
    return GENERAL_INQUIRY


def intent_confidence(intent: str) -> float:
    return 0.5 if intent == GENERAL_INQUIRY else 0.85


class IntentDetectionAgent:
    """Ordered keyword intent classifier."""

    name = "IntentDetectionAgent"

    def __init__(self, settings: Settings | None = None, logger: DiagnosticLogger | None = None):
        self.settings = settings or get_settings()
        self.runtime = AgentRuntime(self.name, logger)

    def process(self, input: TextInput | dict) -> AgentDecision:
        text_input = TextInput.model_validate(input)
        return self.runtime.run(text_input, self._decide, "Intent detected")

    def _detect(self, text: str) -> str:
        try:
            return detect_intent(text)
        except Exception as e:
            self.runtime.logger.log("warning", "Intent detection failed, falling back to general inquiry", {"error": str(e)})
            return GENERAL_INQUIRY

    def _decide(self, text_input: TextInput) -> AgentDecision:
        intent = self._detect(text_input.text)
        confidence = intent_confidence(intent)

        return AgentDecision(
            action="route",
            confidence=confidence,
            reasoning=f"Detected intent: {intent}",
            requires_human_approval=confidence < self.settings.CONFIDENCE_THRESHOLD,
            metadata={"type": intent, "entities": []},
        )
