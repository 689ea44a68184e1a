"""Score view sessions: rendering, navigation, pointer input and pending annotations."""

import asyncio
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from galant.core.errors import ScoreLoadError
from galant.db.session import get_db
from galant.dependencies import get_current_active_user, get_score_session, get_session_registry
from galant.models.user import User
from galant.overlay.geometry import Point, Rect
from galant.overlay.session import ScoreSession, SessionRegistry
from galant.overlay.staging import TemporaryAnnotation
from galant.schemas.annotation import SchemaAnnotationResponse
from galant.schemas.session import (
    BoundsUpdate,
    ClickRequest,
    ClickResponse,
    DropResponse,
    MeasureJump,
    PageRequest,
    PendingAnnotationCreate,
    PendingAnnotationResponse,
    PendingListResponse,
    PointerAction,
    PointerEvent,
    PointerResponse,
    SchemaSelection,
    SessionCreate,
    SessionResponse,
)
from galant.services.annotation_service import AnnotationService, PieceAnnotationGateway
from galant.services.piece_service import PieceService
from galant.services.schema_service import SchemaService

logger = structlog.get_logger(__name__)

router = APIRouter()

SessionDep = Annotated[ScoreSession, Depends(get_score_session)]

_background_loads: set[asyncio.Task] = set()


def _session_response(session: ScoreSession) -> SessionResponse:
    return SessionResponse(
        id=session.id,
        piece_id=session.piece_id,
        status=session.status,
        page=session.page,
        page_count=session.page_count,
        schema_id=session.schema.id if session.schema else None,
        highlighted=session.tracker.highlighted,
        selected=session.selection.selected_id,
        pending_count=len(session.staged),
        error=str(session.load_error) if session.load_error else None,
    )


def _pending_item(annotation: TemporaryAnnotation) -> PendingAnnotationResponse:
    return PendingAnnotationResponse(
        local_id=annotation.local_id,
        event_id=annotation.event.id,
        index=annotation.event.index,
        category=annotation.category,
        value=annotation.value,
        piece_location=annotation.piece_location,
        measure=annotation.measure,
    )


def _pending_response(session: ScoreSession) -> PendingListResponse:
    measure_range = session.staged.measure_range()
    return PendingListResponse(
        items=[_pending_item(a) for a in session.staged],
        measure_start=measure_range[0] if measure_range else None,
        measure_end=measure_range[1] if measure_range else None,
    )


async def _load_in_background(session: ScoreSession, symbolic_data: str) -> None:
    try:
        await session.load(symbolic_data)
    except ScoreLoadError as e:
        # Reported through the session status
        logger.info("Background score load failed", session_id=session.id, error=str(e))


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    session_data: SessionCreate,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionResponse:
    """
    Open a score view on a piece.

    With **wait** the response is sent once the score is laid out, and a
    score the engine cannot parse returns 422. Without it the score loads in
    the background; poll the session status.
    """
    piece = await PieceService(db).get_piece(session_data.piece_id)
    if not piece:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Piece not found")

    session = registry.create(piece_id=piece.id)
    if session_data.wait:
        try:
            await session.load(piece.score_data)
        except ScoreLoadError:
            registry.remove(session.id)
            raise
    else:
        task = asyncio.create_task(_load_in_background(session, piece.score_data))
        _background_loads.add(task)
        task.add_done_callback(_background_loads.discard)

    logger.info("Opened score session", session_id=session.id, piece_id=str(piece.id))
    return _session_response(session)


@router.get("/{session_id}", response_model=SessionResponse, status_code=status.HTTP_200_OK)
async def get_session(
    session: SessionDep,
    wait: bool = Query(False, description="Wait until the score has loaded"),
) -> SessionResponse:
    """Session status; 409 when waiting times out, 422 when the load failed."""
    if wait:
        await session.wait_ready()
    return _session_response(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> None:
    """Close a score view."""
    if not registry.remove(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Score session not found")


@router.get("/{session_id}/page", status_code=status.HTTP_200_OK)
async def render_page(
    session: SessionDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    persisted: bool = Query(True, description="Include saved schema annotations"),
) -> Response:
    """Current page as SVG with the selection highlight and annotation markers."""
    annotations = []
    if persisted and session.piece_id is not None:
        service = AnnotationService(db)
        annotations = service.overlay_annotations(await service.list_for_piece(session.piece_id))

    markup = session.compose(annotations)
    return Response(
        content=markup,
        media_type="image/svg+xml",
        headers={"X-Page": str(session.page), "X-Page-Count": str(session.page_count)},
    )


@router.post("/{session_id}/page", response_model=SessionResponse, status_code=status.HTTP_200_OK)
async def go_to_page(session: SessionDep, page_data: PageRequest) -> SessionResponse:
    """Show a page; out-of-range pages are clamped."""
    session.go_to_page(page_data.page)
    return _session_response(session)


@router.post("/{session_id}/next", response_model=SessionResponse, status_code=status.HTTP_200_OK)
async def next_page(session: SessionDep) -> SessionResponse:
    session.next_page()
    return _session_response(session)


@router.post("/{session_id}/previous", response_model=SessionResponse, status_code=status.HTTP_200_OK)
async def previous_page(session: SessionDep) -> SessionResponse:
    session.previous_page()
    return _session_response(session)


@router.post("/{session_id}/jump", response_model=SessionResponse, status_code=status.HTTP_200_OK)
async def jump_to_measure(session: SessionDep, jump: MeasureJump) -> SessionResponse:
    """Show the page with a measure; 404 "Measure not found" leaves the page unchanged."""
    session.jump_to_measure(jump.measure)
    return _session_response(session)


@router.post("/{session_id}/pointer", response_model=PointerResponse, status_code=status.HTTP_200_OK)
async def pointer(session: SessionDep, event: PointerEvent) -> PointerResponse:
    """
    Forward pointer input over the page.

    A release carrying an **eventId** stages that schema event on the note it
    landed on.
    """
    point = Point(event.x, event.y) if event.x is not None else None
    drop = None
    pending = None

    if event.action == PointerAction.MOVE:
        session.pointer_move(point)
    elif event.action == PointerAction.RELEASE:
        if event.event_id is not None:
            staged = session.drop(event.event_id, point)
            if staged is not None:
                pending = _pending_item(staged)
                drop = DropResponse(element_id=staged.piece_location, measure=staged.measure)
        else:
            landed = session.pointer_release(point)
            if landed is not None:
                drop = DropResponse(element_id=landed.element_id, measure=landed.measure)
    else:
        session.pointer_leave()

    return PointerResponse(
        phase=session.tracker.phase.value,
        highlighted=session.tracker.highlighted,
        drop=drop,
        pending=pending,
    )


@router.post("/{session_id}/click", response_model=ClickResponse, status_code=status.HTTP_200_OK)
async def click(session: SessionDep, click_data: ClickRequest) -> ClickResponse:
    """Toggle selection of a note, by id or nearest to a point."""
    point = Point(click_data.x, click_data.y) if click_data.x is not None and click_data.y is not None else None
    return ClickResponse(selected=session.click(click_data.element_id, point))


@router.put("/{session_id}/bounds", status_code=status.HTTP_204_NO_CONTENT)
async def record_bounds(session: SessionDep, bounds_data: BoundsUpdate) -> None:
    """Element bounds as laid out by the client, for the current page."""
    session.record_bounds(
        {element_id: Rect(b.x, b.y, b.width, b.height) for element_id, b in bounds_data.bounds.items()}
    )


@router.put("/{session_id}/schema", response_model=SessionResponse, status_code=status.HTTP_200_OK)
async def select_schema(
    session: SessionDep,
    selection: SchemaSelection,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionResponse:
    """Choose the schema whose events are being placed; switching drops pending annotations."""
    if selection.schema_id is None:
        session.select_schema(None)
    else:
        service = SchemaService(db)
        schema = await service.get_schema(selection.schema_id)
        if not schema:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schema not found")
        session.select_schema(service.to_selection(schema))
    return _session_response(session)


@router.get("/{session_id}/pending", response_model=PendingListResponse, status_code=status.HTTP_200_OK)
async def list_pending(session: SessionDep) -> PendingListResponse:
    return _pending_response(session)


@router.post("/{session_id}/pending", response_model=PendingListResponse, status_code=status.HTTP_200_OK)
async def add_pending(session: SessionDep, pending: PendingAnnotationCreate) -> PendingListResponse:
    """
    Stage a schema event.

    With an **elementId** the event is placed on that note. Without one it
    toggles: placed on the selected note, or retracted if already pending.
    """
    if pending.element_id is not None:
        session.place(pending.event_id, pending.element_id)
    else:
        session.toggle_event(pending.event_id)
    return _pending_response(session)


@router.delete("/{session_id}/pending", response_model=PendingListResponse, status_code=status.HTTP_200_OK)
async def clear_pending(session: SessionDep) -> PendingListResponse:
    session.staged.clear()
    return _pending_response(session)


@router.delete(
    "/{session_id}/pending/events/{event_id}",
    response_model=PendingListResponse,
    status_code=status.HTTP_200_OK,
)
async def remove_pending_event(session: SessionDep, event_id: UUID) -> PendingListResponse:
    """Retract every pending placement of one schema event."""
    session.staged.remove_by_event(event_id)
    return _pending_response(session)


@router.delete(
    "/{session_id}/pending/{local_id}",
    response_model=PendingListResponse,
    status_code=status.HTTP_200_OK,
)
async def remove_pending(session: SessionDep, local_id: str) -> PendingListResponse:
    session.staged.remove(local_id)
    return _pending_response(session)


@router.post(
    "/{session_id}/pending/submit",
    response_model=SchemaAnnotationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_pending(
    session: SessionDep,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SchemaAnnotationResponse:
    """
    Save the pending annotations as one schema annotation of the piece.

    Returns 409 when nothing is pending or no schema is selected, 422 when the
    annotation is rejected. Pending annotations are kept on failure.
    """
    if session.piece_id is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Session has no piece")

    service = AnnotationService(db)
    gateway = PieceAnnotationGateway(service, session.piece_id, current_user.id)
    link = await session.submit(gateway)
    return SchemaAnnotationResponse.model_validate(service.to_response(link))
