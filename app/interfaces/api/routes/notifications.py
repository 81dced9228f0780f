"""Endpoints and websocket handler for notifications."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

import anyio
from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Response,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from app.application.use_cases.notifications import (
    InvalidRecipient,
    MissingTemplateField,
    NotificationNotFound,
    StorageWriteFailure,
    UnknownNotificationKind,
    aggregate_unread,
    build_unread_sources,
    count_unread_by_category,
    delete_notification as delete_notification_uc,
    dispatch_notification,
    get_unread_count as get_unread_count_uc,
    list_notifications as list_notifications_uc,
    mark_all_read as mark_all_read_uc,
    mark_many_read,
    mark_read as mark_read_uc,
    mark_unread as mark_unread_uc,
    resolve_kind,
)
from app.config import get_settings
from app.domain.entities import (
    USER_ORIGINATED_KINDS,
    Notification,
    NotificationKind,
    ReadStatus,
)
from app.infrastructure.database import get_db
from app.infrastructure.notifications import (
    InitialSync,
    NotificationConnectionManager,
    NotificationPublisher,
    Pong,
)
from app.infrastructure.repositories import NotificationRepository
from app.interfaces.api.dependencies import (
    SERVICE_ROLE,
    get_current_roles,
    get_current_user_id,
    get_notification_publisher,
    get_session_factory,
    resolve_user_id,
)
from app.interfaces.api.schemas import (
    NotificationCreate,
    NotificationMarkAllReadRequest,
    NotificationMarkAllReadResponse,
    NotificationMarkReadRequest,
    NotificationMarkResponse,
    NotificationPageRead,
    NotificationRead,
    UnreadCountRead,
    UnreadSummaryRead,
)
from app.utils import now_in_app_timezone

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)

_INITIAL_SYNC_LIMIT = 50


def _to_read_model(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(notification)


@router.get("/", response_model=NotificationPageRead)
def list_notifications(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    unread_only: bool = False,
    kind: NotificationKind | None = None,
    read_status: ReadStatus = ReadStatus.ALL,
    search: str | None = Query(None, max_length=100),
    created_from: datetime | None = None,
    created_to: datetime | None = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationPageRead:
    """Return the caller's notifications, newest first, narrowed by the history filters."""

    try:
        result = list_notifications_uc(
            db,
            recipient_id=user_id,
            page=page,
            page_size=page_size,
            unread_only=unread_only,
            kind=kind,
            read_status=read_status,
            search=search,
            created_from=created_from,
            created_to=created_to,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return NotificationPageRead(
        items=[_to_read_model(item) for item in result.items],
        page=result.page,
        page_size=result.page_size,
        total=result.total,
    )


@router.post("/", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    roles: frozenset[str] = Depends(get_current_roles),
    publisher: NotificationPublisher = Depends(get_notification_publisher),
) -> NotificationRead:
    """Dispatch an event on behalf of the caller.

    Users may only raise events about their own actions; every other kind
    requires a token carrying the ``service`` role.
    """

    try:
        kind = resolve_kind(payload.kind)
    except UnknownNotificationKind as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if kind not in USER_ORIGINATED_KINDS and SERVICE_ROLE not in roles:
        logger.warning("User %s may not dispatch %s notifications", user_id, kind.value)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="この通知を作成する権限がありません",
        )

    try:
        notification = dispatch_notification(
            db,
            kind=kind,
            recipient_id=payload.recipient_id,
            sender_id=user_id,
            context_data=payload.context_data,
            priority=payload.priority,
            publisher=publisher,
        )
    except (UnknownNotificationKind, MissingTemplateField, InvalidRecipient) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except StorageWriteFailure as exc:
        logger.exception("Notification dispatch failed for %s", payload.recipient_id)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="通知の作成に失敗しました",
        ) from exc
    return _to_read_model(notification)


@router.get("/unread-count", response_model=UnreadCountRead)
def get_unread_count(
    exclude: list[NotificationKind] = Query(default=[]),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> UnreadCountRead:
    """Return the number of unread notifications, optionally skipping kinds."""

    return UnreadCountRead(
        count=get_unread_count_uc(db, recipient_id=user_id, exclude_kinds=exclude)
    )


@router.get("/unread-summary", response_model=UnreadSummaryRead)
async def get_unread_summary(
    user_id: str = Depends(get_current_user_id),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> UnreadSummaryRead:
    """Return the badge total aggregated from notifications and chat."""

    timeout = get_settings().unread_source_timeout_seconds
    summary = await aggregate_unread(
        build_unread_sources(session_factory, user_id), timeout=timeout
    )
    by_category: dict[str, int] = {}
    try:
        by_category = await anyio.to_thread.run_sync(_count_by_category, session_factory, user_id)
    except Exception:
        logger.warning("Unread category breakdown unavailable for %s", user_id, exc_info=True)

    return UnreadSummaryRead(
        total=summary.total,
        by_source=summary.by_source,
        failed_sources=summary.failed_sources,
        partial=summary.partial,
        by_category=by_category,
        computed_at=summary.computed_at,
    )


def _count_by_category(session_factory: Callable[[], Session], user_id: str) -> dict[str, int]:
    with session_factory() as session:
        return count_unread_by_category(session, recipient_id=user_id)


@router.post("/mark-as-read", response_model=NotificationMarkResponse)
def mark_notifications_read(
    payload: NotificationMarkReadRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationMarkResponse:
    """Mark the given notifications as read."""

    marked = mark_many_read(db, ids=payload.unique_ids(), recipient_id=user_id)
    return NotificationMarkResponse(marked=marked)


@router.post("/read-all", response_model=NotificationMarkAllReadResponse)
def mark_all_notifications_read(
    payload: NotificationMarkAllReadRequest | None = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationMarkAllReadResponse:
    """Mark everything the caller had seen as of ``as_of`` as read."""

    payload = payload or NotificationMarkAllReadRequest()
    as_of = payload.as_of or now_in_app_timezone()
    marked = mark_all_read_uc(db, recipient_id=user_id, kind=payload.kind, as_of=as_of)
    return NotificationMarkAllReadResponse(marked=marked, as_of=as_of)


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationRead:
    try:
        notification = mark_read_uc(db, notification_id=notification_id, recipient_id=user_id)
    except NotificationNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="通知が見つかりません") from exc
    return _to_read_model(notification)


@router.post("/{notification_id}/unread", response_model=NotificationRead)
def mark_notification_unread(
    notification_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationRead:
    try:
        notification = mark_unread_uc(db, notification_id=notification_id, recipient_id=user_id)
    except NotificationNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="通知が見つかりません") from exc
    return _to_read_model(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    try:
        delete_notification_uc(db, notification_id=notification_id, recipient_id=user_id)
    except NotificationNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="通知が見つかりません") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams new notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    try:
        user_id = resolve_user_id(token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    manager = websocket.app.state.delivery_channel
    if not isinstance(manager, NotificationConnectionManager):
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
        return

    session_factory = websocket.app.state.session_factory
    pending = await anyio.to_thread.run_sync(_load_unread, session_factory, user_id)
    idle_timeout = get_settings().ws_idle_timeout_seconds

    await manager.connect(user_id, websocket)
    try:
        await websocket.send_json(InitialSync(tuple(pending)).to_wire())
        while True:
            try:
                message = await asyncio.wait_for(websocket.receive_json(), timeout=idle_timeout)
            except asyncio.TimeoutError:
                logger.info("Closing idle notification socket for %s", user_id)
                await websocket.close(code=status.WS_1001_GOING_AWAY)
                break
            except (ValueError, KeyError):
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json(Pong().to_wire())
            elif message_type == "ack":
                ids = [item for item in message.get("ids") or [] if isinstance(item, int)]
                if ids:
                    await anyio.to_thread.run_sync(_acknowledge, session_factory, user_id, ids)
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(user_id, websocket)


def _load_unread(session_factory: Callable[[], Session], user_id: str) -> list[Notification]:
    with session_factory() as session:
        return list(
            NotificationRepository(session).list_unread_for_recipient(
                user_id, limit=_INITIAL_SYNC_LIMIT
            )
        )


def _acknowledge(session_factory: Callable[[], Session], user_id: str, ids: list[int]) -> int:
    with session_factory() as session:
        return mark_many_read(session, ids=ids, recipient_id=user_id)
