"""
State definitions for the support decision pipeline.
"""
import operator
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field


class SupportRequest(BaseModel):
    """An inbound support request (email or form submission)."""
    model_config = ConfigDict(populate_by_name=True)

    subject: str = ""
    body: str = ""
    sender: str = Field(default="", alias="from")
    issue_number: int | None = None
    # Only the graph-based entry point needs an id
    id: str | None = None

    @property
    def text(self) -> str:
        """Subject and body joined the way every keyword scan reads them."""
        return f"{self.subject} {self.body}"


class TextInput(BaseModel):
    """Input for the intent detector."""
    text: str


class SummarizationInput(BaseModel):
    """Input for the summarizer."""
    text: str
    max_length: int = Field(default=200, ge=3)


class AutoReplyInput(BaseModel):
    """Input for the auto-reply generator."""
    intent: str
    context: dict[str, Any] = Field(default_factory=dict)


class AgentDecision(BaseModel):
    """The uniform output of any agent."""
    action: str
    confidence: float = Field(ge=0.0, le=1.0, allow_inf_nan=False)
    reasoning: str = ""
    requires_human_approval: bool = False
    suggested_response: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class PipelineState(BaseModel):
    """
    State that flows through the LangGraph pipeline.

    Each agent step writes its own decision slot and appends to ``decisions``
    so the final step sees them in execution order.
    """
    request: SupportRequest

    triage_decision: AgentDecision | None = None
    intent_decision: AgentDecision | None = None
    summary_decision: AgentDecision | None = None
    reply_decision: AgentDecision | None = None
    decisions: Annotated[list[AgentDecision], operator.add] = Field(default_factory=list)

    # Filled by the decide step
    final_action: str = "escalate"
    requires_approval: bool = True
    highest_confidence: float = 0.0
    consensus: float = 0.0
    recommendation: str = ""


class ProcessResult(BaseModel):
    """Outcome of running one request through the four-agent pipeline."""
    decisions: list[AgentDecision]
    final_action: str
    requires_approval: bool
    highest_confidence: float = 0.0
    consensus: float = 0.0
    recommendation: str = ""

    def find(self, action: str) -> AgentDecision | None:
        """First decision with the given action label."""
        return next((d for d in self.decisions if d.action == action), None)

    @property
    def triage(self) -> AgentDecision | None:
        return self.find("triage")

    @property
    def intent(self) -> AgentDecision | None:
        return self.find("route")

    @property
    def summary(self) -> AgentDecision | None:
        return self.find("summarize")

    @property
    def auto_reply(self) -> AgentDecision | None:
        """The auto-reply agent's decision, whether it replied or escalated."""
        return next(
            (d for d in self.decisions if d.action in ("auto_reply", "escalate")),
            None,
        )
