import pytest

from helpdesk.agent.prompts import RECOMMENDATION_LOW
from helpdesk.question_graph import AgentLimitError, SwarmConfig, SwarmOrchestrator, decompose_question
from helpdesk.question_graph.handlers import router

VAGUE = {"id": "req-vague", "subject": "Vague issue", "body": "Something is wrong", "from": "a@b.c"}


@pytest.fixture
def swarm(settings, logger) -> SwarmOrchestrator:
    return SwarmOrchestrator(settings=settings, logger=logger)


def contents(result) -> list[str]:
    return [node.content for node in result.graph.nodes.values()]


def test_base_decomposition_has_eight_questions():
    questions = decompose_question(VAGUE)

    assert len(questions) == 8
    assert questions[0] == "What is the primary intent of this request?"
    assert questions[-1] == "Should this be escalated to human support?"


@pytest.mark.parametrize("body, expected", [
    ("There is an error on login", ["severity", "reproduce"]),
    ("My billing page double charged me", ["billing dispute", "financial team"]),
    ("We suspect a breach", ["security incident", "security protocols"]),
])
def test_conditional_questions(body, expected):
    questions = decompose_question({"subject": "Help", "body": body})

    assert len(questions) == 10
    for fragment in expected:
        assert any(fragment in q for q in questions)


def test_all_topics_add_all_follow_ups():
    questions = decompose_question({"subject": "Security bug", "body": "Payment failed"})
    assert len(questions) == 14


def test_bug_report_graph_contains_follow_ups(swarm):
    result = swarm.process_request({"subject": "Login bug", "body": "I get an error"})

    assert any("severity" in c for c in contents(result))
    assert any("reproduce" in c for c in contents(result))


def test_vague_request_scores_low_consensus(swarm):
    result = swarm.process_request(VAGUE)

    graph = result.graph
    assert result.request_id == "req-vague"
    assert graph.root.content == "How should we handle support request: Vague issue?"
    assert len(graph.nodes) == 9
    assert graph.execution_order[0] == graph.root_id
    assert all(node.status == "completed" for node in graph.nodes.values())
    assert len(result.decisions) == 9
    assert result.consensus == pytest.approx(0.40, abs=0.01)
    assert result.recommendation == RECOMMENDATION_LOW


def test_question_answers(swarm):
    result = swarm.process_request({
        "subject": "URGENT: security problem",
        "body": "Please help with my account",
    })

    answers = {node.content: node.result for node in result.graph.nodes.values()}
    assert answers["What is the primary intent of this request?"] == {"answer": "support_request", "confidence": 0.75}
    assert answers["What category does this request belong to?"]["answer"] == ["account", "security"]
    assert answers["What category does this request belong to?"]["confidence"] == pytest.approx(0.8)
    assert answers["What is the urgency level?"] == {"answer": "high", "confidence": 0.95}
    assert answers["Can this be handled automatically?"] == {"answer": True, "confidence": 0.7}
    assert answers["Should this be escalated to human support?"] == {"answer": True, "confidence": 0.9}
    assert answers["What resources are needed to resolve this?"] == {
        "answer": "Unable to process question",
        "confidence": 0.3,
    }


def test_router_checks_keywords_in_registration_order():
    assert router.keywords() == ["intent", "category", "urgency", "automatically", "escalate"]
    assert router.route("Is the intent urgent? What category?").__name__ == "detect_intent"
    assert router.route("Unrelated?") is None


def test_synthesis_tail(swarm):
    result = swarm.process_request(VAGUE, include_synthesis=True)
    graph = result.graph

    kinds = [graph.nodes[node_id].kind for node_id in graph.execution_order]
    assert kinds == ["question"] * 9 + ["analysis", "synthesis", "action", "decision"]

    synthesis = next(n for n in graph.nodes.values() if n.kind == "synthesis")
    question_ids = {n.id for n in graph.nodes.values() if n.kind == "question"}
    assert question_ids <= set(synthesis.dependencies)
    assert synthesis.result["recommendation"] == "Escalate to human review"
    assert len(synthesis.result["combined_insights"]) == 10
    assert synthesis.result["combined_insights"][-1] == "Analyzed Vague issue"

    decision = next(n for n in graph.nodes.values() if n.kind == "decision")
    assert decision.dependencies == [synthesis.id]
    assert decision.result["decision"] == "review"
    # Decision results carry a consensus, not a confidence
    assert decision.confidence is None
    assert len(result.decisions) == 13


def test_confident_synthesis_recommends_automation(make_settings, logger):
    swarm = SwarmOrchestrator(config=SwarmConfig(consensus_threshold=0.1), settings=make_settings(), logger=logger)

    result = swarm.process_request(VAGUE, include_synthesis=True)

    synthesis = next(n for n in result.graph.nodes.values() if n.kind == "synthesis")
    decision = next(n for n in result.graph.nodes.values() if n.kind == "decision")
    assert synthesis.result["recommendation"] == "Proceed with automated handling"
    assert decision.result["decision"] == "approve"


def test_node_failure_is_contained(swarm, logger):
    def explode(node, request, previous, threshold):
        raise RuntimeError("analysis backend down")

    swarm.handlers["analysis"] = explode

    result = swarm.process_request(VAGUE, include_synthesis=True)

    statuses = {n.kind: n.status for n in result.graph.nodes.values()}
    assert statuses["analysis"] == "failed"
    assert statuses["synthesis"] == "completed"
    assert statuses["decision"] == "completed"
    assert len(result.decisions) == 12
    assert any(m.startswith("Failed to process node") for m in logger.messages("error"))


def test_missing_request_id_gets_generated(swarm):
    result = swarm.process_request({"subject": "No id", "body": "Body"})

    assert result.request_id
    assert swarm.get_graph(result.request_id) is result.graph


def test_spawn_agent_limit(settings, logger):
    swarm = SwarmOrchestrator(config=SwarmConfig(max_agents=2), settings=settings, logger=logger)
    spawned = []
    swarm.on("agentSpawned", spawned.append)

    first = swarm.spawn_agent("triage", ["categorize"])
    swarm.spawn_agent("intent")

    with pytest.raises(AgentLimitError):
        swarm.spawn_agent("summarizer")

    assert len(swarm.agents) == 2
    assert [a.kind for a in spawned] == ["triage", "intent"]
    assert swarm.agents[first].capabilities == ["categorize"]
    assert swarm.agents[first].status == "active"


def test_status_and_lifecycle_events(swarm):
    events = []
    for name in ("initialized", "shutdown"):
        swarm.on(name, lambda payload, name=name: events.append(name))

    swarm.initialize()
    swarm.spawn_agent("triage")
    result = swarm.process_request(VAGUE)

    status = swarm.get_status()
    assert status["initialized"] is True
    assert status["active_graphs"] == 1
    assert status["active_agents"] == 1
    assert status["config"] == {"max_agents": 10, "consensus_threshold": 0.7, "max_graphs": 100}
    assert status["graphs"] == [{"id": "req-vague", "node_count": 9, "root_id": result.graph.root_id}]

    swarm.shutdown()

    status = swarm.get_status()
    assert status["active_graphs"] == 0
    assert status["active_agents"] == 0
    assert events == ["initialized", "shutdown"]
