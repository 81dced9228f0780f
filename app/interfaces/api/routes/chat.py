"""Chat endpoints that feed the unread badge."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.application.use_cases.chat import (
    count_unread_messages,
    list_chat_rooms as list_chat_rooms_uc,
    mark_room_read,
    open_chat_room,
    post_chat_message,
)
from app.infrastructure.database import get_db
from app.infrastructure.notifications import NotificationPublisher
from app.interfaces.api.dependencies import get_current_user_id, get_notification_publisher
from app.interfaces.api.schemas import (
    ChatMarkReadResponse,
    ChatMessageCreate,
    ChatMessageRead,
    ChatRoomCreate,
    ChatRoomRead,
    ChatUnreadRead,
)

router = APIRouter(prefix="/chat-rooms", tags=["chat"])


@router.post("/", response_model=ChatRoomRead, status_code=status.HTTP_201_CREATED)
def create_chat_room(
    payload: ChatRoomCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> ChatRoomRead:
    try:
        room = open_chat_room(
            db, job_id=payload.job_id, user1_id=user_id, user2_id=payload.participant_id
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ChatRoomRead.model_validate(room)


@router.get("/", response_model=list[ChatRoomRead])
def list_chat_rooms(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> list[ChatRoomRead]:
    return [ChatRoomRead.model_validate(room) for room in list_chat_rooms_uc(db, user_id=user_id)]


@router.get("/unread-count", response_model=ChatUnreadRead)
def get_chat_unread_count(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> ChatUnreadRead:
    """Return unread messages from other participants, in total and per room."""

    counter = count_unread_messages(db, user_id=user_id)
    return ChatUnreadRead(
        total_unread=counter.total_unread, unread_by_room=counter.unread_by_room
    )


@router.post(
    "/{room_id}/messages",
    response_model=ChatMessageRead,
    status_code=status.HTTP_201_CREATED,
)
def send_chat_message(
    room_id: int,
    payload: ChatMessageCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    publisher: NotificationPublisher = Depends(get_notification_publisher),
) -> ChatMessageRead:
    """Post a message; the other participant is notified on a best-effort basis."""

    try:
        message = post_chat_message(
            db,
            room_id=room_id,
            sender_id=user_id,
            sender_name=payload.sender_name,
            body=payload.body,
            publisher=publisher,
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="チャットルームが見つかりません") from exc
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="このチャットルームに参加していません") from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ChatMessageRead.model_validate(message)


@router.post("/{room_id}/mark-as-read", response_model=ChatMarkReadResponse)
def mark_chat_room_read(
    room_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> ChatMarkReadResponse:
    try:
        marked = mark_room_read(db, room_id=room_id, user_id=user_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="チャットルームが見つかりません") from exc
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="このチャットルームに参加していません") from exc
    return ChatMarkReadResponse(marked_count=marked)
