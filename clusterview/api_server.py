"""clusterview FastAPI server.

Exposes the view controller over HTTP:
  GET  /health                        — liveness check
  GET  /state                         — threshold, view and load status
  POST /load                          — ingest a document from disk
  GET  /clusters                      — current cluster frame
  POST /threshold                     — set the threshold (clamped)
  POST /slider                        — set the slider position (0–1)
  POST /view                          — switch pie / bubble / force
  GET  /clusters/{cluster_id}/detail  — detail line for a visible cluster
  GET  /edit/{assoc_id}               — id + current weight for the editor
  POST /edit                          — apply a weight edit
  GET  /export                        — download the edited document
  GET  /visualize                     — rendered HTML for the current frame

All endpoints run on the event loop thread, so triggers never overlap.

Run with:
    uvicorn clusterview.api_server:app --port 8000

Or directly:
    python -m clusterview.api_server
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field

# Walk up from this file (clusterview/api_server.py) to the project root and load .env.
# Variables already in the environment (e.g. set by `clusterview serve`) win.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env", override=False)

from clusterview.config import build_controller
from clusterview.domain.models import RenderFrame, ViewMode, granularity_hint
from clusterview.services.controller import ViewController
from clusterview.services.ingestion import DocumentError

log = logging.getLogger(__name__)

# ── Global state (initialised in lifespan) ──────────────────────────────────

_controller: ViewController | None = None
_slider_position: float | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the controller at startup and load the configured document."""
    global _controller, _slider_position

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config_path = os.environ.get("CLUSTERVIEW_CONFIG", "config.yaml")
    log.info("Loading config from %s …", config_path)
    _controller = build_controller(config_path)
    _slider_position = None

    document = os.environ.get("CLUSTERVIEW_DOCUMENT")
    if document:
        try:
            _controller.load_document(document)
            log.info("Loaded %s", document)
        except (DocumentError, FileNotFoundError):
            # Rendering stays a no-op until a document loads
            log.exception("Failed to load %s", document)

    log.info("API server is ready.")
    yield
    log.info("Shutdown complete.")


app = FastAPI(
    title="clusterview API",
    description=(
        "Threshold clustering of a weighted item graph, with a granularity "
        "slider, pie/bubble/force views and an inline link-weight editor."
    ),
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ── Pydantic models ────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    status: str = Field(..., description="Server health status", examples=["healthy"])


class StateResponse(BaseModel):
    loaded: bool = Field(..., description="Whether a document has been loaded")
    threshold: float = Field(..., description="Current threshold in [0, 0.96]")
    view: ViewMode = Field(..., description="Active view mode")
    nodes: int = Field(0, description="Number of nodes loaded")
    links: int = Field(0, description="Number of links loaded")
    hint: str | None = Field(None, description="Granularity label of the last slider position")


class LoadRequest(BaseModel):
    document_path: str = Field(
        ...,
        description="Path to a JSON document on the server's filesystem.",
        examples=["data/data.json"],
    )


class ThresholdRequest(BaseModel):
    threshold: float = Field(..., description="Minimum link weight; clamped to [0, 0.96].")


class SliderRequest(BaseModel):
    position: float = Field(..., ge=0, le=1, description="Slider position in [0, 1].")


class ViewRequest(BaseModel):
    view: ViewMode = Field(..., description="pie, bubble or force")


class EditRequest(BaseModel):
    id: str = Field(..., description="Link id or 'source->target' key")
    weight: float = Field(..., ge=0, le=1, description="New weight in [0, 1]")


class ClusterModel(BaseModel):
    id: str
    weight: float
    items: list[str]
    size: int


class LinkModel(BaseModel):
    source: str
    target: str
    weight: float


class FrameResponse(BaseModel):
    loaded: bool = Field(..., description="False while no document is loaded")
    threshold: float
    view: ViewMode
    clusters: list[ClusterModel] = Field(default_factory=list)
    links: list[LinkModel] = Field(default_factory=list)
    hint: str | None = None


class DetailResponse(BaseModel):
    id: str
    detail: str


class EditTargetResponse(BaseModel):
    id: str
    weight: float
    kind: str


class EditResponse(BaseModel):
    updated: int = Field(..., description="Number of links changed")
    frame: FrameResponse


# ── helpers ──


def _get_controller() -> ViewController:
    if _controller is None:
        raise HTTPException(status_code=503, detail="Server not initialised")
    return _controller


def _frame_response(frame: RenderFrame | None) -> FrameResponse:
    ctl = _get_controller()
    hint = granularity_hint(_slider_position) if _slider_position is not None else None
    if frame is None:
        return FrameResponse(loaded=False, threshold=ctl.threshold, view=ctl.view, hint=hint)
    return FrameResponse(
        loaded=True,
        threshold=frame.threshold,
        view=frame.view,
        clusters=[ClusterModel(id=c.id, weight=c.weight, items=c.items, size=c.size)
                  for c in frame.clusters],
        links=[LinkModel(source=l.source, target=l.target, weight=l.weight)
               for l in frame.links],
        hint=hint,
    )


# ── Endpoints ───────────────────────────────────────────────────────────────


@app.get("/health", response_model=HealthResponse, tags=["System"], summary="Health check")
async def health():
    return HealthResponse(status="healthy")


@app.get("/state", response_model=StateResponse, tags=["System"], summary="Controller state")
async def state():
    ctl = _get_controller()
    graph = ctl.state
    return StateResponse(
        loaded=ctl.loaded,
        threshold=ctl.threshold,
        view=ctl.view,
        nodes=len(graph.nodes) if graph else 0,
        links=len(graph.edges) if graph else 0,
        hint=granularity_hint(_slider_position) if _slider_position is not None else None,
    )


@app.post(
    "/load",
    response_model=FrameResponse,
    tags=["Data"],
    summary="Load a document",
    description="Ingest a node-list or raw-label JSON document and render it.",
)
async def load(req: LoadRequest):
    ctl = _get_controller()
    try:
        frame = ctl.load_document(req.document_path)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except DocumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _frame_response(frame)


@app.get("/clusters", response_model=FrameResponse, tags=["Clusters"], summary="Current clusters")
async def clusters():
    return _frame_response(_get_controller().render())


@app.post("/threshold", response_model=FrameResponse, tags=["Clusters"], summary="Set threshold")
async def set_threshold(req: ThresholdRequest):
    global _slider_position
    _slider_position = None
    return _frame_response(_get_controller().set_threshold(req.threshold))


@app.post("/slider", response_model=FrameResponse, tags=["Clusters"], summary="Move the slider")
async def set_slider(req: SliderRequest):
    global _slider_position
    _slider_position = req.position
    return _frame_response(_get_controller().set_slider(req.position))


@app.post("/view", response_model=FrameResponse, tags=["Clusters"], summary="Switch view")
async def set_view(req: ViewRequest):
    return _frame_response(_get_controller().set_view(req.view))


@app.get(
    "/clusters/{cluster_id}/detail",
    response_model=DetailResponse,
    tags=["Clusters"],
    summary="Cluster detail",
)
async def cluster_detail(cluster_id: str):
    text = _get_controller().select(cluster_id)
    if text is None:
        raise HTTPException(status_code=404, detail=f"No visible cluster: {cluster_id}")
    return DetailResponse(id=cluster_id, detail=text)


@app.get(
    "/edit/{assoc_id:path}",
    response_model=EditTargetResponse,
    tags=["Editor"],
    summary="Editor pre-fill",
)
async def edit_target(assoc_id: str):
    target = _get_controller().edit_target(assoc_id)
    if target is None:
        raise HTTPException(status_code=404, detail=f"Unknown id: {assoc_id}")
    return EditTargetResponse(id=target.id, weight=target.weight, kind=target.kind)


@app.post("/edit", response_model=EditResponse, tags=["Editor"], summary="Apply a weight edit")
async def apply_edit(req: EditRequest):
    ctl = _get_controller()
    if not ctl.loaded:
        raise HTTPException(status_code=409, detail="No data loaded")
    updated = ctl.apply_edit(req.id, req.weight)
    if not updated:
        raise HTTPException(status_code=404, detail=f"No link matches: {req.id}")
    return EditResponse(updated=updated, frame=_frame_response(ctl.last_frame))


@app.get("/export", tags=["Editor"], summary="Download the edited document")
async def export():
    ctl = _get_controller()
    if not ctl.loaded:
        raise HTTPException(status_code=409, detail="No data loaded")
    return JSONResponse(
        content=ctl.export_snapshot(),
        headers={"Content-Disposition": 'attachment; filename="data.json"'},
    )


@app.get("/visualize", tags=["Clusters"], summary="Rendered chart", response_class=HTMLResponse)
async def visualize():
    ctl = _get_controller()
    if ctl.render() is None:
        html = "<html><body><h2>No data loaded. POST /load a document first.</h2></body></html>"
    else:
        html = ctl.last_output or ""
    return HTMLResponse(content=html)


# ── Run directly ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("CLUSTERVIEW_HOST", "127.0.0.1")
    port = int(os.environ.get("CLUSTERVIEW_PORT", "8000"))
    uvicorn.run(
        "clusterview.api_server:app",
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
