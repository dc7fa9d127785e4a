"""
Policy engine.

A policy is an ordered list of rules attached to an agent. After the agent
builds its tentative decision, every enabled policy runs (highest priority
first) and each rule whose condition holds applies its action to the
decision.

Conditions are a closed vocabulary of predicate models tagged by ``kind``;
they only read the agent input and the decision. Actions are looked up by
name in ``ACTION_HANDLERS``; ``register_action`` adds new ones.
"""
from typing import Annotated, Any, Callable, Literal, Union

from pydantic import BaseModel, Field, model_validator

from helpdesk.agent.logging import DiagnosticLogger
from helpdesk.agent.state import AgentDecision


def _read_field(source: Any, name: str) -> Any:
    """Read an attribute or mapping key from an agent input."""
    if isinstance(source, dict):
        return source.get(name)
    return getattr(source, name, None)


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------

class ConfidenceBelow(BaseModel):
    kind: Literal["confidence_below"] = "confidence_below"
    threshold: float

    def evaluate(self, input: Any, decision: AgentDecision) -> bool:
        return decision.confidence < self.threshold


class ConfidenceAtLeast(BaseModel):
    kind: Literal["confidence_at_least"] = "confidence_at_least"
    threshold: float

    def evaluate(self, input: Any, decision: AgentDecision) -> bool:
        return decision.confidence >= self.threshold


class ActionIs(BaseModel):
    kind: Literal["action_is"] = "action_is"
    action: str

    def evaluate(self, input: Any, decision: AgentDecision) -> bool:
        return decision.action == self.action


class RequiresApproval(BaseModel):
    kind: Literal["requires_approval"] = "requires_approval"
    value: bool = True

    def evaluate(self, input: Any, decision: AgentDecision) -> bool:
        return decision.requires_human_approval is self.value


class CategoryIncludes(BaseModel):
    """Triage decisions carry their categories in ``metadata["categories"]``."""
    kind: Literal["category_includes"] = "category_includes"
    category: str

    def evaluate(self, input: Any, decision: AgentDecision) -> bool:
        return self.category in (decision.metadata.get("categories") or [])


class MetadataEquals(BaseModel):
    """Equality on a metadata key, or membership when the stored value is a list."""
    kind: Literal["metadata_equals"] = "metadata_equals"
    key: str
    value: Any

    def evaluate(self, input: Any, decision: AgentDecision) -> bool:
        stored = decision.metadata.get(self.key)
        if isinstance(stored, list):
            return self.value in stored
        return stored == self.value


class InputContains(BaseModel):
    """Case-insensitive substring match on one field of the agent input."""
    kind: Literal["input_contains"] = "input_contains"
    field: str
    keyword: str

    def evaluate(self, input: Any, decision: AgentDecision) -> bool:
        value = _read_field(input, self.field)
        if value is None:
            return False
        return self.keyword.lower() in value.lower()


class MissingSuggestion(BaseModel):
    kind: Literal["missing_suggestion"] = "missing_suggestion"

    def evaluate(self, input: Any, decision: AgentDecision) -> bool:
        return not decision.suggested_response


class AllOf(BaseModel):
    kind: Literal["all_of"] = "all_of"
    conditions: list["Condition"]

    def evaluate(self, input: Any, decision: AgentDecision) -> bool:
        return all(c.evaluate(input, decision) for c in self.conditions)


class AnyOf(BaseModel):
    kind: Literal["any_of"] = "any_of"
    conditions: list["Condition"]

    def evaluate(self, input: Any, decision: AgentDecision) -> bool:
        return any(c.evaluate(input, decision) for c in self.conditions)


class Not(BaseModel):
    kind: Literal["not"] = "not"
    condition: "Condition"

    def evaluate(self, input: Any, decision: AgentDecision) -> bool:
        return not self.condition.evaluate(input, decision)


Condition = Annotated[
    Union[
        ConfidenceBelow,
        ConfidenceAtLeast,
        ActionIs,
        RequiresApproval,
        CategoryIncludes,
        MetadataEquals,
        InputContains,
        MissingSuggestion,
        AllOf,
        AnyOf,
        Not,
    ],
    Field(discriminator="kind"),
]

AllOf.model_rebuild()
AnyOf.model_rebuild()
Not.model_rebuild()


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

ActionHandler = Callable[[AgentDecision, dict], AgentDecision]

ACTION_HANDLERS: dict[str, ActionHandler] = {}


def register_action(name: str):
    """
    Decorator to register a rule action.

    Usage:
        @register_action("flag_vip")
        def flag_vip(decision, parameters):
            ...
            return decision
    """
    def decorator(func: ActionHandler) -> ActionHandler:
        ACTION_HANDLERS[name] = func
        return func
    return decorator


@register_action("require_human_approval")
def require_human_approval(decision: AgentDecision, parameters: dict) -> AgentDecision:
    decision.requires_human_approval = True
    return decision


@register_action("set_confidence")
def set_confidence(decision: AgentDecision, parameters: dict) -> AgentDecision:
    # Range is checked when the rule is built
    decision.confidence = float(parameters["value"])
    return decision


@register_action("add_metadata")
def add_metadata(decision: AgentDecision, parameters: dict) -> AgentDecision:
    decision.metadata = {**decision.metadata, **parameters}
    return decision


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------

class PolicyRule(BaseModel):
    """A condition → action pair."""
    condition: Condition
    action: str
    parameters: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_confidence_value(self) -> "PolicyRule":
        if self.action == "set_confidence":
            value = self.parameters.get("value")
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError("set_confidence requires a numeric 'value' parameter")
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"set_confidence value must be within [0, 1], got {value}")
        return self


class AgentPolicy(BaseModel):
    """Ordered rules applied to an agent's decisions."""
    id: str
    name: str
    rules: list[PolicyRule] = Field(default_factory=list)
    priority: int = 0
    enabled: bool = True


def sort_policies(policies: list[AgentPolicy]) -> list[AgentPolicy]:
    """Enabled policies, highest priority first (ties keep insertion order)."""
    return sorted((p for p in policies if p.enabled), key=lambda p: -p.priority)


def evaluate_condition(
    condition: Condition,
    input: Any,
    decision: AgentDecision,
    logger: DiagnosticLogger,
) -> bool:
    """Evaluate a rule condition. Evaluation errors count as False."""
    try:
        return bool(condition.evaluate(input, decision))
    except Exception as e:
        logger.log("error", "Error evaluating condition", {
            "condition": condition.model_dump(),
            "error": str(e),
        })
        return False


def apply_action(
    action: str,
    decision: AgentDecision,
    parameters: dict,
    logger: DiagnosticLogger,
) -> AgentDecision:
    handler = ACTION_HANDLERS.get(action)
    if handler is None:
        logger.log("warning", f"Unknown action: {action}", {"parameters": parameters})
        return decision
    return handler(decision, parameters)


def apply_policies(
    input: Any,
    decision: AgentDecision,
    policies: list[AgentPolicy],
    logger: DiagnosticLogger,
) -> AgentDecision:
    """
    Run a tentative decision through every enabled policy.

    Args:
        input: The agent input the decision was derived from
        decision: Tentative decision; mutated in place
        policies: Policies attached to the agent, in any order
        logger: Sink for condition failures and unknown actions

    Returns:
        The (same) decision after all matching rules were applied
    """
    for policy in sort_policies(policies):
        for rule in policy.rules:
            if evaluate_condition(rule.condition, input, decision, logger):
                decision = apply_action(rule.action, decision, rule.parameters, logger)
    return decision


def human_review_policy(threshold: float, enabled: bool = True) -> AgentPolicy:
    """Default policy: decisions under ``threshold`` need a human."""
    return AgentPolicy(
        id="human-review",
        name="Human Review Policy",
        priority=100,
        enabled=enabled,
        rules=[
            PolicyRule(
                condition=ConfidenceBelow(threshold=threshold),
                action="require_human_approval",
            ),
        ],
    )
