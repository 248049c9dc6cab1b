"""FastAPI server for the WildGuard map engine."""
import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator
from typing import Optional

import session as sessions
from assistant import AssistantService
from errors import MapEngineError
from geo import GeoBounds, GeoPoint, ProjectedPoint, project, unproject
from logger import setup_logger

logger = setup_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Stop any running ticker before the loop goes away
    current = sessions.reset_session()
    if current is not None:
        await current.playback.aclose()


# Create FastAPI app
api = FastAPI(title="WildGuard Map Engine API", version="1.0.0", lifespan=lifespan)

# Enable CORS for the dashboard frontend
api.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

assistant_service = AssistantService()


# === Global Exception Handlers ===

@api.exception_handler(MapEngineError)
async def engine_error_handler(request: Request, exc: MapEngineError):
    """Handle all MapEngineError subclasses with consistent JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": exc.message}
    )


@api.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=422,
        content={"status": "error", "message": str(exc)}
    )


@api.exception_handler(Exception)
async def general_error_handler(request: Request, exc: Exception):
    """Handle unexpected errors with consistent JSON response."""
    logger.error(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": "Internal server error"}
    )


# Pydantic models for request/response
class SeekUpdate(BaseModel):
    offset_hours: float


class SpeedUpdate(BaseModel):
    speed_multiplier: float


class SkipRequest(BaseModel):
    direction: str

    @field_validator('direction')
    @classmethod
    def validate_direction(cls, v: str) -> str:
        if v not in ("back", "forward"):
            raise ValueError("direction must be 'back' or 'forward'")
        return v


class FleetAdvance(BaseModel):
    delta_seconds: float

    @field_validator('delta_seconds')
    @classmethod
    def validate_delta(cls, v: float) -> float:
        if v < 0:
            raise ValueError("delta_seconds must be non-negative")
        return v


class StatusUpdate(BaseModel):
    status: str


class BoundsModel(BaseModel):
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float


class ProjectRequest(BaseModel):
    lat: float
    lng: float
    margin_pct: float = 0.0
    bounds: Optional[BoundsModel] = None


class UnprojectRequest(BaseModel):
    x: float
    y: float
    bounds: Optional[BoundsModel] = None


class AssistantQuery(BaseModel):
    query: str

    @field_validator('query')
    @classmethod
    def validate_query(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('query must not be empty')
        return v


def _bounds_for(model: Optional[BoundsModel]) -> GeoBounds:
    if model is None:
        return sessions.get_session().bounds
    return GeoBounds(**model.model_dump())


# Routes

@api.get("/api/health")
async def health():
    """API health check."""
    return {"status": "ok", "message": "WildGuard Map Engine API"}


# =============================================================================
# PLAYBACK ENDPOINTS
# =============================================================================

def _playback_response() -> dict:
    return {"status": "success", "playback": sessions.get_session().playback.get_state().to_dict()}


@api.get("/playback")
async def get_playback_state():
    """Current offset, play state, speed and active events."""
    return _playback_response()


@api.post("/playback/play")
async def play():
    sessions.get_session().playback.play()
    return _playback_response()


@api.post("/playback/pause")
async def pause():
    sessions.get_session().playback.pause()
    return _playback_response()


@api.put("/playback/seek")
async def seek(update: SeekUpdate):
    sessions.get_session().playback.seek(update.offset_hours)
    return _playback_response()


@api.put("/playback/speed")
async def set_speed(update: SpeedUpdate):
    sessions.get_session().playback.set_speed(update.speed_multiplier)
    return _playback_response()


@api.post("/playback/skip")
async def skip(request: SkipRequest):
    playback = sessions.get_session().playback
    if request.direction == "back":
        playback.skip_back()
    else:
        playback.skip_forward()
    return _playback_response()


# =============================================================================
# FLEET ENDPOINTS
# =============================================================================

@api.get("/fleet/entities")
async def get_fleet_entities():
    entities = sessions.get_session().fleet.get_entities()
    return {"status": "success", "entities": [e.to_dict() for e in entities]}


@api.get("/fleet/stats")
async def get_fleet_stats():
    return {"status": "success", "stats": sessions.get_session().fleet.get_stats().to_dict()}


@api.post("/fleet/advance")
async def advance_fleet(advance: FleetAdvance):
    """Advance drone movement by delta_seconds of simulated time."""
    moved = sessions.get_session().advance_fleet(advance.delta_seconds)
    return {"status": "success", "moved": moved}


@api.put("/fleet/{entity_id}/status")
async def update_drone_status(entity_id: str, update: StatusUpdate):
    entity = sessions.get_session().set_drone_status(entity_id, update.status)
    return {"status": "success", "entity": entity.to_dict()}


# =============================================================================
# MAP ENDPOINTS
# =============================================================================

@api.post("/map/project")
async def project_point(request: ProjectRequest):
    """Project a lat/lng into viewport percent."""
    bounds = _bounds_for(request.bounds)
    point = project(GeoPoint(lat=request.lat, lng=request.lng), bounds, request.margin_pct)
    return {"status": "success", "point": point.to_dict()}


@api.post("/map/unproject")
async def unproject_point(request: UnprojectRequest):
    """Viewport percent back to lat/lng."""
    bounds = _bounds_for(request.bounds)
    point = unproject(ProjectedPoint(x=request.x, y=request.y), bounds)
    return {"status": "success", "point": point.to_dict()}


@api.get("/map/frame")
async def get_frame():
    """The frame every overlay last rendered."""
    return {"status": "success", "frame": sessions.get_session().frame.to_dict()}


@api.get("/map/overlays")
async def get_overlays():
    current = sessions.get_session()
    return {
        "status": "success",
        "frame_id": current.frame.frame_id,
        "in_sync": current.overlays_in_sync(),
        "layers": current.render_overlays()
    }


# =============================================================================
# ASSISTANT ENDPOINTS
# =============================================================================

@api.post("/assistant/ask")
async def ask_assistant(request: AssistantQuery):
    """Forward a ranger query to the assistant with live dashboard context."""
    context = sessions.get_session().build_assistant_context()
    response = await asyncio.to_thread(assistant_service.ask, request.query, context)
    return {"status": "success", "response": response}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(api, host="0.0.0.0", port=8000)
