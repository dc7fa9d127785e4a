"""
Node handlers for the question graph.

Question nodes are routed by keywords in the question's own text. Routes
are registered with ``@router.register(keyword)`` and checked in
registration order; the first keyword found in the question wins.
"""
from dataclasses import dataclass
from typing import Any, Callable

from helpdesk.agent.consensus import calculate_consensus
from helpdesk.agent.state import SupportRequest
from helpdesk.question_graph.state import QuestionNode

QuestionAnswerer = Callable[[SupportRequest], dict]

UNANSWERED = {"answer": "Unable to process question", "confidence": 0.3}


@dataclass
class Route:
    """A registered question route."""
    keyword: str
    answer: QuestionAnswerer
    description: str


class QuestionRouter:
    """
    Registry of keyword routes for question nodes.

    Usage:
        @router.register("urgency")
        def assess_urgency(request: SupportRequest) -> dict:
            '''How urgent the request is.'''
            ...
    """

    def __init__(self):
        self._routes: list[Route] = []

    def register(self, keyword: str):
        """
        Decorator to register an answerer for questions containing ``keyword``.

        Args:
            keyword: Lowercase substring looked up in the question text
        """
        def decorator(func: QuestionAnswerer) -> QuestionAnswerer:
            description = ""
            if func.__doc__:
                description = func.__doc__.strip().split("\n")[0]

            self._routes.append(Route(keyword=keyword, answer=func, description=description))
            return func
        return decorator

    def keywords(self) -> list[str]:
        return [route.keyword for route in self._routes]

    def route(self, question: str) -> QuestionAnswerer | None:
        lower_question = question.lower()
        for route in self._routes:
            if route.keyword in lower_question:
                return route.answer
        return None

    def answer(self, question: str, request: SupportRequest) -> dict:
        answerer = self.route(question)
        if answerer is None:
            return dict(UNANSWERED)
        return answerer(request)


router = QuestionRouter()


# =============================================================================
# Question answerers
# =============================================================================

@router.register("intent")
def detect_intent(request: SupportRequest) -> dict:
    """Primary intent of the request."""
    text = request.text.lower()

    if "refund" in text:
        return {"answer": "refund_request", "confidence": 0.9}
    if "bug" in text:
        return {"answer": "bug_report", "confidence": 0.85}
    if "feature" in text:
        return {"answer": "feature_request", "confidence": 0.8}
    if "help" in text:
        return {"answer": "support_request", "confidence": 0.75}

    return {"answer": "general_inquiry", "confidence": 0.5}


@router.register("category")
def categorize(request: SupportRequest) -> dict:
    """Topical categories of the request."""
    text = request.text.lower()
    categories = [
        category
        for category in ("technical", "billing", "account", "security")
        if category in text
    ] or ["general"]

    return {"answer": categories, "confidence": 0.7 + len(categories) * 0.05}


@router.register("urgency")
def assess_urgency(request: SupportRequest) -> dict:
    """How urgent the request is."""
    text = request.text.lower()

    if "urgent" in text or "critical" in text:
        return {"answer": "high", "confidence": 0.95}
    if "asap" in text or "important" in text:
        return {"answer": "medium", "confidence": 0.8}

    return {"answer": "normal", "confidence": 0.7}


@router.register("automatically")
def can_automate(request: SupportRequest) -> dict:
    """Whether the request can be handled without a person."""
    intent = detect_intent(request)["answer"]

    if intent in ("general_inquiry", "support_request"):
        return {"answer": True, "confidence": 0.7}

    return {"answer": False, "confidence": 0.8}


@router.register("escalate")
def should_escalate(request: SupportRequest) -> dict:
    """Whether the request needs human support."""
    if assess_urgency(request)["answer"] == "high":
        return {"answer": True, "confidence": 0.9}

    text = request.text.lower()
    if any(keyword in text for keyword in ("legal", "security", "breach")):
        return {"answer": True, "confidence": 0.95}

    return {"answer": False, "confidence": 0.6}


# =============================================================================
# Node kind handlers
# =============================================================================

NodeHandler = Callable[[QuestionNode, SupportRequest, list[dict], float], dict]


def process_question(node: QuestionNode, request: SupportRequest, previous: list[dict], threshold: float) -> dict:
    return router.answer(node.content, request)


def process_analysis(node: QuestionNode, request: SupportRequest, previous: list[dict], threshold: float) -> dict:
    return {
        "type": "analysis",
        "summary": f"Analyzed {request.subject}",
        "key_points": [],
        "confidence": 0.7,
    }


def process_synthesis(node: QuestionNode, request: SupportRequest, previous: list[dict], threshold: float) -> dict:
    """Combine earlier answers and score their agreement."""
    overall_confidence = calculate_consensus(previous)

    return {
        "type": "synthesis",
        "combined_insights": [_insight(d) for d in previous],
        "overall_confidence": overall_confidence,
        "recommendation": (
            "Proceed with automated handling"
            if overall_confidence > threshold
            else "Escalate to human review"
        ),
    }


def process_action(node: QuestionNode, request: SupportRequest, previous: list[dict], threshold: float) -> dict:
    return {
        "type": "action",
        "action": "notify",
        "target": "support_team",
        "confidence": 0.8,
    }


def process_decision(node: QuestionNode, request: SupportRequest, previous: list[dict], threshold: float) -> dict:
    consensus = calculate_consensus(previous)

    return {
        "type": "decision",
        "decision": "approve" if consensus > threshold else "review",
        "consensus": consensus,
        "reasoning": "Based on multi-agent analysis",
    }


def _insight(decision: dict) -> Any:
    answer = decision.get("answer")
    return answer if answer is not None else decision.get("summary")


NODE_HANDLERS: dict[str, NodeHandler] = {
    "question": process_question,
    "analysis": process_analysis,
    "synthesis": process_synthesis,
    "action": process_action,
    "decision": process_decision,
}
