"""
State definitions for the question graph.

A question graph decomposes one support request into sub-questions and
reasoning steps. Nodes name the nodes they depend on; the graph keeps an
execution order in which every dependency precedes its dependents.
"""
import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from helpdesk.config import Settings

NodeKind = Literal["question", "analysis", "synthesis", "action", "decision"]
NodeStatus = Literal["pending", "processing", "completed", "failed"]

# Allowed status moves; anything else is backward or skips a step
TRANSITIONS: dict[str, tuple[str, ...]] = {
    "pending": ("processing",),
    "processing": ("completed", "failed"),
    "completed": (),
    "failed": (),
}


class GraphNotFoundError(KeyError):
    """No graph is registered under the given request id."""

    def __init__(self, graph_id: str):
        super().__init__(graph_id)
        self.graph_id = graph_id

    def __str__(self) -> str:
        return f"Graph {self.graph_id} not found"


class NodeNotFoundError(KeyError):
    """A parent or dependency id does not exist in the graph."""

    def __init__(self, node_id: str):
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self) -> str:
        return f"Node {self.node_id} not found"


class InvalidTransitionError(ValueError):
    """A node status change that would move backward or skip a step."""


class AgentLimitError(RuntimeError):
    """The swarm already runs its maximum number of agents."""


class NodeSpec(BaseModel):
    """Everything a caller supplies when adding a node."""
    kind: NodeKind
    content: str
    parent: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None


class QuestionNode(BaseModel):
    """A unit of reasoning in the question graph."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    kind: NodeKind
    content: str
    parent: str | None = None
    children: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    confidence: float | None = None
    result: Any = None
    status: NodeStatus = "pending"
    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: dict[str, Any] | None = None

    def transition(self, status: NodeStatus) -> None:
        """Move to ``status``; only pending→processing→completed|failed is allowed."""
        if status not in TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Node {self.id} cannot move from {self.status} to {status}"
            )
        self.status = status


class QuestionGraph(BaseModel):
    """One request's reasoning session; owns all of its nodes."""
    root_id: str
    nodes: dict[str, QuestionNode] = Field(default_factory=dict)
    # node id -> ids of nodes that depend on it
    edges: dict[str, list[str]] = Field(default_factory=dict)
    execution_order: list[str] = Field(default_factory=list)

    @classmethod
    def with_root(cls, question: str) -> "QuestionGraph":
        root = QuestionNode(kind="question", content=question)
        return cls(
            root_id=root.id,
            nodes={root.id: root},
            edges={root.id: []},
            execution_order=[root.id],
        )

    @property
    def root(self) -> QuestionNode:
        return self.nodes[self.root_id]

    def add(self, spec: NodeSpec) -> QuestionNode:
        """
        Insert a node built from ``spec`` and recompute the execution order.

        Raises:
            NodeNotFoundError: if the parent or a dependency is unknown
        """
        for node_id in ([spec.parent] if spec.parent else []) + spec.dependencies:
            if node_id not in self.nodes:
                raise NodeNotFoundError(node_id)

        node = QuestionNode(
            kind=spec.kind,
            content=spec.content,
            parent=spec.parent,
            dependencies=list(spec.dependencies),
            metadata=spec.metadata,
        )
        self.nodes[node.id] = node

        if spec.parent:
            self.nodes[spec.parent].children.append(node.id)

        self.edges.setdefault(node.id, [])
        for dependency in node.dependencies:
            self.edges.setdefault(dependency, []).append(node.id)

        self.update_execution_order()
        return node

    def update_execution_order(self) -> list[str]:
        """Depth-first, dependencies first, starting at the root, then any unvisited node."""
        visited: set[str] = set()
        order: list[str] = []

        def visit(node_id: str) -> None:
            if node_id in visited:
                return
            node = self.nodes.get(node_id)
            if node is None:
                return
            visited.add(node_id)
            for dependency in node.dependencies:
                visit(dependency)
            order.append(node_id)

        visit(self.root_id)
        for node_id in self.nodes:
            visit(node_id)

        self.execution_order = order
        return order


class SwarmConfig(BaseModel):
    """Limits and thresholds for the swarm orchestrator."""
    max_agents: int = Field(default=10, ge=1)
    consensus_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    max_graphs: int = Field(default=100, ge=1)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SwarmConfig":
        return cls(
            max_agents=settings.SWARM_MAX_AGENTS,
            consensus_threshold=settings.SWARM_CONSENSUS_THRESHOLD,
            max_graphs=settings.MAX_GRAPHS,
        )


class SwarmAgent(BaseModel):
    """A worker registered with the swarm."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    kind: str
    capabilities: list[str] = Field(default_factory=list)
    status: str = "active"
    created_at: datetime = Field(default_factory=datetime.now)


class GraphProcessResult(BaseModel):
    """Outcome of running one request through its question graph."""
    request_id: str
    graph: QuestionGraph
    decisions: list[dict[str, Any]]
    consensus: float
    recommendation: str
