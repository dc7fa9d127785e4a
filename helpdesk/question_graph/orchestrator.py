"""
Swarm orchestrator for the question graph.

Flow for one request:
1. Create a graph whose root asks how to handle the request
2. Decompose the request into sub-questions (children of the root)
3. Optionally append analysis → synthesis → action/decision nodes
4. Walk the execution order, dispatching each node to its kind handler
5. Score the collected results into a consensus and a recommendation

Graphs stay in the store until ``release_graph`` or ``shutdown``.
"""
import uuid
from typing import Any, Callable

from helpdesk.agent.consensus import calculate_consensus, synthesize_recommendation
from helpdesk.agent.events import EventEmitter
from helpdesk.agent.logging import DiagnosticLogger, get_logger
from helpdesk.agent.prompts import BASE_QUESTIONS, CONDITIONAL_QUESTIONS, ROOT_QUESTION
from helpdesk.agent.state import SupportRequest
from helpdesk.config import Settings, get_settings
from helpdesk.question_graph.handlers import NODE_HANDLERS, NodeHandler
from helpdesk.question_graph.state import (
    AgentLimitError,
    GraphProcessResult,
    NodeSpec,
    QuestionGraph,
    QuestionNode,
    SwarmAgent,
    SwarmConfig,
)
from helpdesk.question_graph.store import GraphStore


def decompose_question(request: SupportRequest | dict) -> list[str]:
    """
    Sub-questions for a request: the base set, then topical follow-ups.
    """
    request = SupportRequest.model_validate(request)
    text = request.text.lower()

    questions = list(BASE_QUESTIONS)
    for keywords, follow_ups in CONDITIONAL_QUESTIONS:
        if any(keyword in text for keyword in keywords):
            questions.extend(follow_ups)

    return questions


class SwarmOrchestrator:
    """
    Builds and executes one question graph per request.

    Events:
        initialized: after ``initialize``
        nodeAdded: ``{"graph_id", "node"}`` after every ``add_node``
        agentSpawned: the new ``SwarmAgent``
        shutdown: after ``shutdown``
    """

    def __init__(
        self,
        config: SwarmConfig | None = None,
        settings: Settings | None = None,
        logger: DiagnosticLogger | None = None,
    ):
        self.settings = settings or get_settings()
        self.config = config or SwarmConfig.from_settings(self.settings)
        self.logger = logger or get_logger("SwarmOrchestrator")
        self.events = EventEmitter(self.logger)
        self.graphs = GraphStore(self.config.max_graphs, self.logger)
        self.agents: dict[str, SwarmAgent] = {}
        self.handlers: dict[str, NodeHandler] = dict(NODE_HANDLERS)
        self.initialized = False

    def on(self, event: str, listener: Callable[[Any], None]) -> None:
        self.events.on(event, listener)

    def initialize(self) -> None:
        self.initialized = True
        self.logger.log("info", "Swarm orchestrator initialized", self.config.model_dump())
        self.events.emit("initialized")

    # =========================================================================
    # Graph construction
    # =========================================================================

    def create_graph(self, request_id: str, initial_question: str) -> QuestionGraph:
        """Register a fresh single-node graph under ``request_id``."""
        graph = QuestionGraph.with_root(initial_question)
        self.graphs.put(request_id, graph)
        self.logger.log("info", f"Created graph for request {request_id}", {"root_id": graph.root_id})
        return graph

    def get_graph(self, graph_id: str) -> QuestionGraph:
        return self.graphs.get(graph_id)

    def add_node(self, graph_id: str, spec: NodeSpec | dict) -> QuestionNode:
        """
        Add a node to a registered graph.

        Raises:
            GraphNotFoundError: if ``graph_id`` is not registered
            NodeNotFoundError: if the parent or a dependency is unknown
        """
        graph = self.graphs.get(graph_id)
        node = graph.add(NodeSpec.model_validate(spec))

        self.logger.log("debug", f"Added node {node.id} to graph {graph_id}", {
            "kind": node.kind,
            "content": node.content,
        })
        self.events.emit("nodeAdded", {"graph_id": graph_id, "node": node})

        return node

    def decompose_question(self, request: SupportRequest | dict) -> list[str]:
        return decompose_question(request)

    def _add_synthesis_tail(self, graph_id: str, request: SupportRequest) -> None:
        graph = self.graphs.get(graph_id)
        question_ids = [
            node_id for node_id, node in graph.nodes.items()
            if node.kind == "question"
        ]

        analysis = self.add_node(graph_id, NodeSpec(
            kind="analysis",
            content=f"Analyze request: {request.subject}",
            parent=graph.root_id,
        ))
        synthesis = self.add_node(graph_id, NodeSpec(
            kind="synthesis",
            content="Combine the answers to every sub-question",
            parent=graph.root_id,
            dependencies=question_ids + [analysis.id],
        ))
        self.add_node(graph_id, NodeSpec(
            kind="action",
            content="Notify the support team",
            parent=synthesis.id,
            dependencies=[synthesis.id],
        ))
        self.add_node(graph_id, NodeSpec(
            kind="decision",
            content="Approve automated handling or send for review",
            parent=synthesis.id,
            dependencies=[synthesis.id],
        ))

    # =========================================================================
    # Execution
    # =========================================================================

    def execute_graph(self, graph_id: str, request: SupportRequest | dict) -> list[dict]:
        """
        Run every node in execution order and collect the results.

        A node that fails is marked ``failed`` and skipped; the walk goes on.

        Raises:
            GraphNotFoundError: if ``graph_id`` is not registered
        """
        graph = self.graphs.get(graph_id)
        request = SupportRequest.model_validate(request)
        decisions: list[dict] = []

        for node_id in graph.execution_order:
            node = graph.nodes.get(node_id)
            if node is None:
                continue

            node.transition("processing")
            try:
                handler = self.handlers[node.kind]
                result = handler(node, request, list(decisions), self.config.consensus_threshold)
            except Exception as e:
                node.transition("failed")
                self.logger.log("error", f"Failed to process node {node_id}", {
                    "graph_id": graph_id,
                    "kind": node.kind,
                    "error": str(e),
                })
                continue

            node.result = result
            confidence = result.get("confidence", result.get("overall_confidence"))
            if isinstance(confidence, (int, float)) and not isinstance(confidence, bool):
                node.confidence = float(confidence)
            node.transition("completed")
            decisions.append(result)

        return decisions

    def process_request(
        self,
        request: SupportRequest | dict,
        include_synthesis: bool = False,
    ) -> GraphProcessResult:
        """
        Build, execute and score the question graph for a request.

        Args:
            request: Inbound request; a missing id gets a fresh one
            include_synthesis: Append analysis, synthesis, action and decision nodes

        Returns:
            GraphProcessResult with the graph, node results, consensus and recommendation
        """
        request = SupportRequest.model_validate(request)
        request_id = request.id or str(uuid.uuid4())

        graph = self.create_graph(request_id, ROOT_QUESTION.format(subject=request.subject))

        for question in self.decompose_question(request):
            self.add_node(request_id, NodeSpec(
                kind="question",
                content=question,
                parent=graph.root_id,
            ))

        if include_synthesis:
            self._add_synthesis_tail(request_id, request)

        decisions = self.execute_graph(request_id, request)
        consensus = calculate_consensus(decisions)
        recommendation = synthesize_recommendation(consensus)

        self.logger.log("info", f"Processed request {request_id}", {
            "nodes": len(graph.nodes),
            "consensus": round(consensus, 3),
            "recommendation": recommendation,
        })

        return GraphProcessResult(
            request_id=request_id,
            graph=graph,
            decisions=decisions,
            consensus=consensus,
            recommendation=recommendation,
        )

    def release_graph(self, request_id: str) -> bool:
        released = self.graphs.release(request_id)
        if released:
            self.logger.log("debug", f"Released graph {request_id}", {})
        return released

    # =========================================================================
    # Swarm lifecycle
    # =========================================================================

    def spawn_agent(self, kind: str, capabilities: list[str] | None = None) -> str:
        """
        Register a swarm agent and return its id.

        Raises:
            AgentLimitError: if ``max_agents`` agents are already active
        """
        if len(self.agents) >= self.config.max_agents:
            raise AgentLimitError(f"Maximum agent limit reached ({self.config.max_agents})")

        agent = SwarmAgent(kind=kind, capabilities=list(capabilities or []))
        self.agents[agent.id] = agent

        self.logger.log("info", f"Spawned agent {agent.id} of type {kind}", {"capabilities": agent.capabilities})
        self.events.emit("agentSpawned", agent)

        return agent.id

    def get_status(self) -> dict:
        return {
            "initialized": self.initialized,
            "active_graphs": len(self.graphs),
            "active_agents": len(self.agents),
            "config": self.config.model_dump(),
            "graphs": [
                {"id": graph_id, "node_count": len(graph.nodes), "root_id": graph.root_id}
                for graph_id, graph in self.graphs.items()
            ],
            "agents": [agent.model_dump(mode="json") for agent in self.agents.values()],
        }

    def shutdown(self) -> None:
        self.graphs.clear()
        self.agents.clear()
        self.initialized = False

        self.logger.log("info", "Swarm orchestrator shutdown complete", {})
        self.events.emit("shutdown")
