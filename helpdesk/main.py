"""
FastAPI application for the support decision engine.

Endpoints:
- GET /health - Health check
- GET /agents - Pipeline agents and their policies
- POST /support/analyze - Run the four-agent pipeline
- POST /support/analyze/graph - Run the question graph
- GET /swarm/status - Swarm orchestrator status
"""
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from helpdesk.agent import SupportOrchestrator
from helpdesk.agent.report import format_analysis_comment, format_graph_analysis_comment
from helpdesk.agent.state import AgentDecision, SupportRequest
from helpdesk.config import get_settings
from helpdesk.question_graph import SwarmOrchestrator


# Request/Response models
class AnalyzeRequest(BaseModel):
    """Support request body."""
    model_config = ConfigDict(populate_by_name=True)

    subject: str = Field(..., min_length=1, max_length=500)
    body: str = Field(..., min_length=1, max_length=20000)
    sender: str = Field(default="", alias="from")
    issue_number: int | None = None
    id: str | None = None

    def to_support_request(self) -> SupportRequest:
        return SupportRequest.model_validate(self.model_dump())


class AnalyzeResponse(BaseModel):
    """Pipeline analysis."""
    decisions: list[AgentDecision]
    final_action: str
    requires_approval: bool
    highest_confidence: float
    consensus: float
    recommendation: str
    comment: str


class NodeSummary(BaseModel):
    """One executed question graph node."""
    id: str
    kind: str
    content: str
    status: str
    confidence: float | None = None


class GraphAnalyzeResponse(BaseModel):
    """Question graph analysis."""
    request_id: str
    consensus: float
    recommendation: str
    nodes: list[NodeSummary]
    decisions: list[dict]
    comment: str


@lru_cache()
def get_orchestrator() -> SupportOrchestrator:
    return SupportOrchestrator(get_settings())


@lru_cache()
def get_swarm() -> SwarmOrchestrator:
    swarm = SwarmOrchestrator(settings=get_settings())
    swarm.initialize()
    return swarm


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    settings = get_settings()
    problems = settings.validate()
    if problems:
        print(f"WARNING: Invalid configuration: {problems}")
        print("Decisions may not be graded as expected.")
    else:
        print("Configuration validated successfully")

    get_orchestrator()
    get_swarm()

    yield

    # Shutdown
    get_swarm().shutdown()


# Create FastAPI app
app = FastAPI(
    title="Support Decision Engine",
    description="Rule-based multi-agent grading of inbound support requests",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    problems = settings.validate()

    return {
        "status": "healthy" if not problems else "degraded",
        "config_problems": problems,
    }


@app.get("/agents")
async def list_agents():
    """Pipeline agents with their attached policies."""
    return {
        "agents": [
            {
                "id": agent.runtime.id,
                "name": agent.name,
                "policies": [
                    {"id": p.id, "name": p.name, "priority": p.priority, "enabled": p.enabled}
                    for p in agent.runtime.policies
                ],
            }
            for agent in get_orchestrator().get_all_agents()
        ]
    }


@app.post("/support/analyze", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest):
    """
    Run a request through triage, intent, summarization and auto-reply.

    Returns the ordered decisions, the final action and a markdown comment
    for the issue tracker.
    """
    try:
        result = await get_orchestrator().aprocess_request(request.to_support_request())
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    return AnalyzeResponse(
        **result.model_dump(),
        comment=format_analysis_comment(result),
    )


@app.post("/support/analyze/graph", response_model=GraphAnalyzeResponse)
async def analyze_graph(request: AnalyzeRequest):
    """
    Decompose a request into a question graph and score the answers.

    The graph is released once the response is built.
    """
    swarm = get_swarm()
    try:
        result = swarm.process_request(request.to_support_request())
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    try:
        graph = result.graph
        return GraphAnalyzeResponse(
            request_id=result.request_id,
            consensus=result.consensus,
            recommendation=result.recommendation,
            nodes=[
                NodeSummary(
                    id=graph.nodes[node_id].id,
                    kind=graph.nodes[node_id].kind,
                    content=graph.nodes[node_id].content,
                    status=graph.nodes[node_id].status,
                    confidence=graph.nodes[node_id].confidence,
                )
                for node_id in graph.execution_order
            ],
            decisions=result.decisions,
            comment=format_graph_analysis_comment(result, swarm.config.consensus_threshold),
        )
    finally:
        swarm.release_graph(result.request_id)


@app.get("/swarm/status")
async def swarm_status():
    """Active graphs, active agents and limits of the swarm orchestrator."""
    return get_swarm().get_status()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "helpdesk.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
    )
