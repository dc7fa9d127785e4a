"""
Triage Agent

Categorizes a support request by keyword and derives its priority.
"""
from helpdesk.agent.logging import DiagnosticLogger
from helpdesk.agent.runtime import AgentRuntime
from helpdesk.agent.state import AgentDecision, SupportRequest
from helpdesk.config import Settings, get_settings


# Category -> keywords (matched as case-insensitive substrings)
CATEGORY_KEYWORDS = {
    "bug": ("bug", "error", "broken"),
    "feature-request": ("feature", "request", "enhancement"),
    "urgent": ("urgent", "critical", "asap"),
    "question": ("question", "how to", "help"),
}

GENERAL = "general"


def categorize(request: SupportRequest) -> list[str]:
    """Every category whose keywords appear in subject + body, else ``general``."""
    text = request.text.lower()
    categories = [
        category
        for category, keywords in CATEGORY_KEYWORDS.items()
        if any(keyword in text for keyword in keywords)
    ]
    return categories or [GENERAL]


def prioritize(categories: list[str]) -> str:
    if "urgent" in categories:
        return "high"
    if "bug" in categories:
        return "medium"
    if "feature-request" in categories:
        return "low"
    return "normal"


def triage_confidence(categories: list[str], priority: str) -> float:
    confidence = 0.5

    if categories and categories[0] != GENERAL:
        confidence += 0.2
    if priority != "normal":
        confidence += 0.2
    if len(categories) == 1:
        confidence += 0.1

    return min(confidence, 1.0)


class TriageAgent:
    """Keyword triage: categories, priority and a confidence heuristic."""

    name = "TriageAgent"

    def __init__(self, settings: Settings | None = None, logger: DiagnosticLogger | None = None):
        self.settings = settings or get_settings()
        self.runtime = AgentRuntime(self.name, logger)

    def process(self, input: SupportRequest | dict) -> AgentDecision:
        request = SupportRequest.model_validate(input)
        return self.runtime.run(request, self._decide, "Triage decision")

    def _categorize(self, request: SupportRequest) -> list[str]:
        try:
            return categorize(request)
        except Exception as e:
            self.runtime.logger.log("warning", "Categorization failed, falling back to general", {"error": str(e)})
            return [GENERAL]

    def _decide(self, request: SupportRequest) -> AgentDecision:
        categories = self._categorize(request)
        priority = prioritize(categories)
        confidence = triage_confidence(categories, priority)

        return AgentDecision(
            action="triage",
            confidence=confidence,
            reasoning=f"Categorized as {', '.join(categories)} with {priority} priority",
            requires_human_approval=confidence < self.settings.CONFIDENCE_THRESHOLD,
            metadata={"categories": categories, "priority": priority},
        )
