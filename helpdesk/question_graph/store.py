"""
In-memory graph store keyed by request id.

Graphs stay registered until the caller releases them. The store is
bounded: registering past ``max_graphs`` evicts the oldest graph.
"""
from collections import OrderedDict

from helpdesk.agent.logging import DiagnosticLogger
from helpdesk.question_graph.state import GraphNotFoundError, QuestionGraph


class GraphStore:
    def __init__(self, max_graphs: int, logger: DiagnosticLogger):
        self.max_graphs = max_graphs
        self._graphs: OrderedDict[str, QuestionGraph] = OrderedDict()
        self._logger = logger

    def __len__(self) -> int:
        return len(self._graphs)

    def __contains__(self, graph_id: str) -> bool:
        return graph_id in self._graphs

    def put(self, graph_id: str, graph: QuestionGraph) -> None:
        """Register a graph, replacing any graph under the same id."""
        self._graphs.pop(graph_id, None)
        self._graphs[graph_id] = graph

        while len(self._graphs) > self.max_graphs:
            evicted_id, _ = self._graphs.popitem(last=False)
            self._logger.log("warning", "Graph store full, evicted oldest graph", {
                "graph_id": evicted_id,
                "max_graphs": self.max_graphs,
            })

    def get(self, graph_id: str) -> QuestionGraph:
        """
        Raises:
            GraphNotFoundError: if no graph is registered under ``graph_id``
        """
        try:
            return self._graphs[graph_id]
        except KeyError:
            raise GraphNotFoundError(graph_id) from None

    def release(self, graph_id: str) -> bool:
        """Drop a graph. Returns whether it was registered."""
        return self._graphs.pop(graph_id, None) is not None

    def items(self) -> list[tuple[str, QuestionGraph]]:
        return list(self._graphs.items())

    def clear(self) -> None:
        self._graphs.clear()
