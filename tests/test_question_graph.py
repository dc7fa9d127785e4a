import pytest

from helpdesk.question_graph import (
    GraphNotFoundError,
    InvalidTransitionError,
    NodeNotFoundError,
    NodeSpec,
    QuestionGraph,
    QuestionNode,
    SwarmConfig,
    SwarmOrchestrator,
)


@pytest.fixture
def swarm(settings, logger) -> SwarmOrchestrator:
    return SwarmOrchestrator(settings=settings, logger=logger)


def assert_dependencies_first(graph: QuestionGraph):
    position = {node_id: i for i, node_id in enumerate(graph.execution_order)}
    for node in graph.nodes.values():
        for dependency in node.dependencies:
            assert position[dependency] < position[node.id]


def test_new_graph_has_a_pending_root(swarm):
    graph = swarm.create_graph("req-1", "How should we handle this?")

    root = graph.root
    assert root.kind == "question"
    assert root.content == "How should we handle this?"
    assert root.status == "pending"
    assert root.children == [] and root.dependencies == []
    assert graph.execution_order == [graph.root_id]
    assert swarm.get_graph("req-1") is graph


def test_children_are_recorded_on_the_parent(swarm):
    graph = swarm.create_graph("req-1", "Root?")

    first = swarm.add_node("req-1", {"kind": "question", "content": "A?", "parent": graph.root_id})
    second = swarm.add_node("req-1", NodeSpec(kind="question", content="B?", parent=graph.root_id))

    assert graph.root.children == [first.id, second.id]
    assert graph.execution_order == [graph.root_id, first.id, second.id]
    assert first.id != second.id


def test_dependencies_run_before_dependents(swarm):
    graph = swarm.create_graph("req-1", "Root?")
    a = swarm.add_node("req-1", NodeSpec(kind="question", content="A?"))
    b = swarm.add_node("req-1", NodeSpec(kind="analysis", content="B", dependencies=[a.id]))
    c = swarm.add_node("req-1", NodeSpec(kind="synthesis", content="C", dependencies=[b.id, graph.root_id]))
    swarm.add_node("req-1", NodeSpec(kind="decision", content="D", dependencies=[c.id, a.id]))

    assert_dependencies_first(graph)
    assert graph.execution_order[0] == graph.root_id


def test_dependency_edges_point_to_successors(swarm):
    graph = swarm.create_graph("req-1", "Root?")
    a = swarm.add_node("req-1", NodeSpec(kind="question", content="A?"))
    b = swarm.add_node("req-1", NodeSpec(kind="analysis", content="B", dependencies=[a.id]))

    assert graph.edges[a.id] == [b.id]
    assert graph.edges[b.id] == []


def test_execution_order_is_complete_and_idempotent(swarm):
    graph = swarm.create_graph("req-1", "Root?")
    for i in range(5):
        swarm.add_node("req-1", NodeSpec(kind="question", content=f"Q{i}?", parent=graph.root_id))
    # Disconnected from the root
    swarm.add_node("req-1", NodeSpec(kind="action", content="Notify"))

    before = list(graph.execution_order)
    after = graph.update_execution_order()

    assert after == before
    assert sorted(after) == sorted(graph.nodes)
    assert len(set(after)) == len(after)


def test_unknown_graph_is_a_named_failure(swarm):
    with pytest.raises(GraphNotFoundError) as exc:
        swarm.add_node("missing", NodeSpec(kind="question", content="A?"))

    assert str(exc.value) == "Graph missing not found"
    # Also a KeyError for mapping-style callers
    assert isinstance(exc.value, KeyError)


def test_unknown_parent_or_dependency_leaves_graph_unchanged(swarm):
    graph = swarm.create_graph("req-1", "Root?")

    with pytest.raises(NodeNotFoundError):
        swarm.add_node("req-1", NodeSpec(kind="question", content="A?", parent="nope"))
    with pytest.raises(NodeNotFoundError):
        swarm.add_node("req-1", NodeSpec(kind="analysis", content="B", dependencies=["nope"]))

    assert list(graph.nodes) == [graph.root_id]
    assert graph.root.children == []


def test_node_added_event(swarm):
    seen = []
    swarm.on("nodeAdded", seen.append)
    graph = swarm.create_graph("req-1", "Root?")

    node = swarm.add_node("req-1", NodeSpec(kind="question", content="A?", parent=graph.root_id))

    assert seen == [{"graph_id": "req-1", "node": node}]


def test_status_moves_forward_only():
    node = QuestionNode(kind="question", content="A?")

    with pytest.raises(InvalidTransitionError):
        node.transition("completed")

    node.transition("processing")
    node.transition("completed")

    with pytest.raises(InvalidTransitionError):
        node.transition("processing")
    with pytest.raises(InvalidTransitionError):
        node.transition("failed")


def test_failed_is_terminal():
    node = QuestionNode(kind="action", content="Notify")
    node.transition("processing")
    node.transition("failed")

    with pytest.raises(InvalidTransitionError):
        node.transition("completed")


def test_store_evicts_oldest_graph(settings, logger):
    swarm = SwarmOrchestrator(config=SwarmConfig(max_graphs=2), settings=settings, logger=logger)

    swarm.create_graph("a", "A?")
    swarm.create_graph("b", "B?")
    swarm.create_graph("c", "C?")

    with pytest.raises(GraphNotFoundError):
        swarm.get_graph("a")
    assert swarm.get_graph("c").root.content == "C?"
    assert "Graph store full, evicted oldest graph" in logger.messages("warning")


def test_release_graph(swarm):
    swarm.create_graph("req-1", "Root?")

    assert swarm.release_graph("req-1") is True
    assert swarm.release_graph("req-1") is False
    with pytest.raises(GraphNotFoundError):
        swarm.get_graph("req-1")


def test_swarm_config_from_settings(make_settings):
    config = SwarmConfig.from_settings(make_settings(SWARM_MAX_AGENTS=3, SWARM_CONSENSUS_THRESHOLD=0.5, MAX_GRAPHS=7))

    assert config == SwarmConfig(max_agents=3, consensus_threshold=0.5, max_graphs=7)
