"""
Summarization Agent

Extractive summarizer: keeps the three highest-scoring sentences, ordered
by score, and hard-truncates to the length budget.
"""
import re

from helpdesk.agent.logging import DiagnosticLogger
from helpdesk.agent.runtime import AgentRuntime
from helpdesk.agent.state import AgentDecision, SummarizationInput
from helpdesk.config import Settings, get_settings


IMPORTANT_WORDS = [
    "important", "critical", "urgent", "bug", "error",
    "feature", "request", "issue", "problem",
]

# A trailing fragment without terminal punctuation still counts as a sentence
SENTENCE_PATTERN = re.compile(r"[^.!?]+(?:[.!?]+|$)")

TOP_SENTENCES = 3
ELLIPSIS = "..."


def split_sentences(text: str) -> list[str]:
    sentences = (match.strip() for match in SENTENCE_PATTERN.findall(text))
    return [s for s in sentences if s]


def score_sentence(sentence: str) -> float:
    lower = sentence.lower()
    score = float(sum(1 for word in IMPORTANT_WORDS if word in lower))
    # Prefer shorter sentences
    score += 1 / (len(sentence) / 100)
    return score


def truncate(summary: str, max_length: int) -> str:
    if len(summary) > max_length:
        return summary[:max_length - len(ELLIPSIS)] + ELLIPSIS
    return summary


def summarize(text: str, max_length: int) -> str:
    ranked = sorted(split_sentences(text), key=score_sentence, reverse=True)
    return truncate(" ".join(ranked[:TOP_SENTENCES]), max_length)


def compression_confidence(summary_length: int, original_length: int) -> float:
    ratio = summary_length / original_length if original_length else 0.0

    if ratio < 0.1:
        return 0.6  # Too short
    if ratio > 0.5:
        return 0.7  # Not much reduction
    return 0.85


class SummarizationAgent:
    """Extractive summaries scored by keyword hits and brevity."""

    name = "SummarizationAgent"

    def __init__(self, settings: Settings | None = None, logger: DiagnosticLogger | None = None):
        self.settings = settings or get_settings()
        self.runtime = AgentRuntime(self.name, logger)

    def process(self, input: SummarizationInput | dict) -> AgentDecision:
        summary_input = SummarizationInput.model_validate(input)
        return self.runtime.run(summary_input, self._decide, "Summarization complete")

    def _summarize(self, summary_input: SummarizationInput) -> str:
        try:
            return summarize(summary_input.text, summary_input.max_length)
        except Exception as e:
            self.runtime.logger.log("warning", "Summarization failed, returning empty summary", {"error": str(e)})
            return ""

    def _decide(self, summary_input: SummarizationInput) -> AgentDecision:
        summary = self._summarize(summary_input)
        confidence = compression_confidence(len(summary), len(summary_input.text))

        return AgentDecision(
            action="summarize",
            confidence=confidence,
            reasoning="Generated summary of input text",
            requires_human_approval=confidence < self.settings.CONFIDENCE_THRESHOLD,
            suggested_response=summary,
            metadata={
                "original_length": len(summary_input.text),
                "summary_length": len(summary),
            },
        )
