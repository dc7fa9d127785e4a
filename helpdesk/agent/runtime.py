"""
Shared decision pipeline for agents.

Every agent owns an ``AgentRuntime`` and calls ``run`` from its ``process``
method: the agent supplies the kind-specific decide step, the runtime
applies the agent's policies, logs the final decision and notifies
``decision`` observers.
"""
import uuid
from typing import Any, Callable, Protocol

from helpdesk.agent.events import EventEmitter
from helpdesk.agent.logging import DiagnosticLogger, get_logger
from helpdesk.agent.policies import AgentPolicy, apply_policies
from helpdesk.agent.state import AgentDecision


class AgentProcessingError(Exception):
    """An unexpected internal error while an agent was deciding."""

    def __init__(self, agent: str, cause: Exception):
        super().__init__(f"{agent} failed to process input: {cause}")
        self.agent = agent
        self.cause = cause


class AgentRuntime:
    """Policies, observers and logging shared by every agent kind."""

    def __init__(self, name: str, logger: DiagnosticLogger | None = None):
        self.id = str(uuid.uuid4())
        self.name = name
        self.logger = logger or get_logger(name)
        self.policies: list[AgentPolicy] = []
        self.events = EventEmitter(self.logger)

    def add_policy(self, policy: AgentPolicy) -> None:
        """Attach a policy; policies stay sorted by descending priority."""
        self.policies.append(policy)
        self.policies.sort(key=lambda p: -p.priority)

    def on_decision(self, listener: Callable[[AgentDecision], None]) -> None:
        self.events.on("decision", listener)

    def run(
        self,
        input: Any,
        decide: Callable[[Any], AgentDecision],
        message: str,
    ) -> AgentDecision:
        """
        Build, post-process and publish a decision.

        Args:
            input: Validated agent input
            decide: Kind-specific step producing the tentative decision
            message: Log line for the final decision

        Raises:
            AgentProcessingError: if ``decide`` fails unexpectedly
        """
        try:
            decision = decide(input)
        except Exception as e:
            self.logger.log("error", f"{self.name} failed", {"error": str(e)})
            raise AgentProcessingError(self.name, e) from e

        decision = apply_policies(input, decision, self.policies, self.logger)

        self.logger.log("info", message, decision.model_dump())
        self.events.emit("decision", decision)

        return decision


class Agent(Protocol):
    """Anything the orchestrator can run as a pipeline step."""
    name: str
    runtime: AgentRuntime

    def process(self, input: Any) -> AgentDecision:
        ...
