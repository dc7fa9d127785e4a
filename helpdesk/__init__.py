"""
Support Request Decision Engine

Rule-based multi-agent system that grades an inbound support request:
- Agent pipeline: Triage → Intent → Summarize → Auto-Reply → Decide
- Question graph: Decomposes a request into sub-questions, executes them
  in dependency order and scores the consensus
"""
