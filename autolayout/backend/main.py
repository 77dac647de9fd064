"""
Autolayout Backend - FastAPI Application

This is the HTTP entry point for the layout engine.
It provides:
- Layout of node/edge diagrams into canvas primitives
- Validation and structural summaries of diagram input
- Conversion of raw model responses (rate limited) into laid-out elements
- CORS configuration for local frontend development
"""
import time
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

from ..analysis import summarize_diagram
from ..config import ServerSettings
from ..engine import build_scene, elements_to_json, layout_diagram
from ..errors import DiagramFormatError, RateLimitError
from ..generation import parse_diagram_response
from ..log import configure_logging
from ..models import Diagram, Edge, Node
from ..ratelimit import RateLimiter
from ..validation import validate_diagram, validation_summary


# Request size limits for directly submitted diagrams
MAX_REQUEST_NODES = 2000
MAX_REQUEST_EDGES = 10000


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


# --- Request Models ---

class DiagramRequest(BaseModel):
    """A diagram submitted for validation or summary."""
    nodes: list[Node] = Field(default_factory=list, max_length=MAX_REQUEST_NODES)
    edges: list[Edge] = Field(default_factory=list, max_length=MAX_REQUEST_EDGES)

    def to_diagram(self) -> Diagram:
        return Diagram(nodes=self.nodes, edges=self.edges)


class LayoutRequest(DiagramRequest):
    """A diagram to lay out."""
    now: Optional[int] = None  # ms; server clock when omitted
    scene: bool = False        # also return a full scene document


class FromResponseRequest(BaseModel):
    """Raw model output to validate and lay out."""
    content: str
    max_shapes: Optional[int] = None
    now: Optional[int] = None
    scene: bool = False


def _layout_payload(diagram: Diagram, now: int, scene: bool) -> dict:
    elements = layout_diagram(diagram.nodes, diagram.edges, now=now)
    payload = {"success": True, "elements": elements_to_json(elements)}
    if scene:
        payload["scene"] = build_scene(elements)
    return payload


def create_app(
    settings: Optional[ServerSettings] = None,
    clock: Callable[[], int] = wall_clock_ms
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Server settings (read from the environment when omitted)
        clock: Millisecond clock used for rate limiting and default seeds

    Returns:
        Configured FastAPI app; its rate limiter lives on ``app.state``
    """
    settings = settings or ServerSettings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan handler for startup/shutdown tasks."""
        configure_logging(settings.log_level)
        logger.info("Autolayout backend ready on {}:{}", settings.host, settings.port)
        yield
        logger.info("Autolayout backend shutting down")

    app = FastAPI(
        title="Autolayout API",
        description="Diagram auto-layout engine for canvas boards",
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.clock = clock
    app.state.rate_limiter = RateLimiter(settings.min_request_interval_ms)

    # CORS for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Health Check ---

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    # --- Layout ---

    @app.post("/api/layout")
    def layout(request: LayoutRequest, http_request: Request):
        """Lay out nodes and edges into canvas primitives."""
        now = request.now if request.now is not None else http_request.app.state.clock()
        logger.info("Layout request: {} nodes, {} edges", len(request.nodes), len(request.edges))
        return _layout_payload(request.to_diagram(), now, request.scene)

    # --- Analysis & Validation (plain def: CPU-bound, run in the threadpool) ---

    @app.post("/api/diagram/validate")
    def validate(request: DiagramRequest):
        """
        Validate a diagram for structural issues.

        Returns a list of issues (errors, warnings, info) and a summary.
        """
        issues = validate_diagram(request.to_diagram())
        return {
            "success": True,
            "issues": [issue.to_dict() for issue in issues],
            "summary": validation_summary(issues)
        }

    @app.post("/api/diagram/summary")
    def summary(request: DiagramRequest):
        """Get a structural summary of a diagram."""
        return {
            "success": True,
            "summary": summarize_diagram(request.to_diagram()).to_dict()
        }

    # --- Model Responses ---

    @app.post("/api/diagram/from-response")
    async def from_response(request: FromResponseRequest, http_request: Request):
        """
        Turn a raw model response into laid-out primitives.

        Rate limited: one accepted request per configured interval.
        """
        state = http_request.app.state
        current = state.clock()
        try:
            state.rate_limiter.check(current)
        except RateLimitError as e:
            raise HTTPException(
                status_code=429,
                detail=str(e),
                headers={"Retry-After": str(max(1, -(-e.retry_after_ms // 1000)))}
            )

        try:
            diagram = parse_diagram_response(request.content, request.max_shapes)
        except DiagramFormatError as e:
            raise HTTPException(status_code=422, detail=e.to_dict())

        now = request.now if request.now is not None else current
        return _layout_payload(diagram, now, request.scene)

    return app


app = create_app()


def run(settings: Optional[ServerSettings] = None) -> None:
    """Serve the module-level app with uvicorn."""
    import uvicorn

    settings = settings or app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)


# --- Run with uvicorn ---

if __name__ == "__main__":
    run()
