"""Event Manager REST API."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from client.models import Event, EventInput, EventStatus, StatusUpdate

from .config import Settings
from .database import EventNotFoundError, EventStore, EventValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_store(request: Request) -> EventStore:
    return request.app.state.store


@router.get("/health")
async def health(store: EventStore = Depends(get_store)):
    connected = await store.ping()
    return {
        "status": "OK",
        "database": "connected" if connected else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/events", response_model=list[Event])
async def list_events(
    status: EventStatus | None = None,
    store: EventStore = Depends(get_store),
):
    """List every event, optionally restricted to one status."""
    return await store.find_all(status)


@router.get("/events/{event_id}", response_model=Event)
async def get_event(event_id: int, store: EventStore = Depends(get_store)):
    """Get a single event by ID."""
    try:
        return await store.find_by_id(event_id)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")


@router.post("/events", response_model=Event, status_code=201)
async def create_event(body: EventInput, store: EventStore = Depends(get_store)):
    try:
        return await store.insert(body)
    except EventValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.put("/events/{event_id}", response_model=Event)
async def replace_event(
    event_id: int, body: EventInput, store: EventStore = Depends(get_store)
):
    try:
        return await store.replace(event_id, body)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")
    except EventValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.patch("/events/{event_id}/status", response_model=Event)
async def update_event_status(
    event_id: int, body: StatusUpdate, store: EventStore = Depends(get_store)
):
    try:
        return await store.patch_status(event_id, body.status)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")


@router.delete("/events/{event_id}", status_code=204)
async def delete_event(event_id: int, store: EventStore = Depends(get_store)):
    try:
        await store.delete(event_id)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")
    return Response(status_code=204)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API around the store named by *settings*.

    The store is opened on startup unless one is already attached to
    ``app.state.store``; an attached store belongs to the caller and is
    left open on shutdown.
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "store", None) is None
        if owned:
            app.state.store = await EventStore.open(settings.database_path)
        try:
            yield
        finally:
            if owned:
                await app.state.store.close()
                app.state.store = None

    app = FastAPI(title="Event Manager", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {
            "message": "Event Manager API is running",
            "database": settings.database_path,
            "endpoints": {"events": "/api/events", "health": "/api/health"},
        }

    app.include_router(router)
    return app
