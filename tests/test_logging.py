from helpdesk.agent.events import EventEmitter
from helpdesk.agent.logging import ConsoleLogger, _format_value
from helpdesk.agent.state import AgentDecision


def test_records_below_level_are_dropped(capsys):
    logger = ConsoleLogger("TriageAgent", level="warning")

    logger.info("hidden")
    logger.error("shown", {"error": "boom"})

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out
    assert "[TRIAGEAGENT]" in out
    assert "  error: boom" in out


def test_models_are_dumped_and_long_values_truncated():
    decision = AgentDecision(action="triage", confidence=0.5)

    assert '"action": "triage"' in _format_value(decision)
    assert _format_value("x" * 300).endswith("...")
    assert len(_format_value("x" * 300)) == 203


def test_emitter_calls_listeners_in_order(logger):
    emitter = EventEmitter(logger)
    calls = []
    emitter.on("decision", lambda payload: calls.append(("a", payload)))
    emitter.on("decision", lambda payload: calls.append(("b", payload)))

    emitter.emit("decision", 1)

    assert calls == [("a", 1), ("b", 1)]


def test_emitter_off_and_failures(logger):
    emitter = EventEmitter(logger)
    calls = []

    def broken(payload):
        raise ValueError("nope")

    def record(payload):
        calls.append(payload)

    emitter.on("shutdown", broken)
    emitter.on("shutdown", record)
    emitter.emit("shutdown")
    emitter.off("shutdown", record)
    emitter.emit("shutdown")

    assert calls == [None]
    assert emitter.listener_count("shutdown") == 1
    assert logger.messages("error") == ["Listener for 'shutdown' failed"] * 2
