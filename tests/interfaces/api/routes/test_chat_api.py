"""Integration tests for the chat endpoints feeding the unread badge."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from main import create_app


@pytest.fixture()
def client():
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture()
def room(client: TestClient, auth_headers) -> dict:
    response = client.post(
        "/chat-rooms/",
        json={"job_id": "job-1", "participant_id": "worker-1"},
        headers=auth_headers("client-1"),
    )
    assert response.status_code == 201
    return response.json()


def test_room_requires_two_participants(client: TestClient, auth_headers) -> None:
    response = client.post(
        "/chat-rooms/", json={"participant_id": "client-1"}, headers=auth_headers("client-1")
    )

    assert response.status_code == 400


def test_rooms_are_listed_for_both_participants(client: TestClient, room, auth_headers) -> None:
    for user_id in ("client-1", "worker-1"):
        rooms = client.get("/chat-rooms/", headers=auth_headers(user_id)).json()
        assert [item["id"] for item in rooms] == [room["id"]]

    assert client.get("/chat-rooms/", headers=auth_headers("outsider")).json() == []


def test_messages_count_as_unread_for_the_other_participant(
    client: TestClient, room, auth_headers
) -> None:
    for body in ("はじめまして", "よろしくお願いします"):
        response = client.post(
            f"/chat-rooms/{room['id']}/messages",
            json={"body": body, "sender_name": "Taro"},
            headers=auth_headers("worker-1"),
        )
        assert response.status_code == 201

    client_counter = client.get("/chat-rooms/unread-count", headers=auth_headers("client-1")).json()
    worker_counter = client.get("/chat-rooms/unread-count", headers=auth_headers("worker-1")).json()

    assert client_counter == {"total_unread": 2, "unread_by_room": {str(room["id"]): 2}}
    assert worker_counter == {"total_unread": 0, "unread_by_room": {}}

    notifications = client.get("/notifications/", headers=auth_headers("client-1")).json()
    assert notifications["total"] == 2
    assert notifications["items"][0]["kind"] == "new_message"
    assert notifications["items"][0]["message"] == "Taroさんからメッセージが届きました。"


def test_mark_room_read_clears_counter(client: TestClient, room, auth_headers) -> None:
    client.post(
        f"/chat-rooms/{room['id']}/messages",
        json={"body": "完了しました", "sender_name": "Taro"},
        headers=auth_headers("worker-1"),
    )

    response = client.post(
        f"/chat-rooms/{room['id']}/mark-as-read", headers=auth_headers("client-1")
    )

    assert response.json() == {"success": True, "marked_count": 1}
    counter = client.get("/chat-rooms/unread-count", headers=auth_headers("client-1")).json()
    assert counter["total_unread"] == 0


def test_outsiders_cannot_post_or_mark(client: TestClient, room, auth_headers) -> None:
    headers = auth_headers("outsider")

    posted = client.post(
        f"/chat-rooms/{room['id']}/messages",
        json={"body": "hi", "sender_name": "Mallory"},
        headers=headers,
    )
    marked = client.post(f"/chat-rooms/{room['id']}/mark-as-read", headers=headers)
    missing = client.post(
        "/chat-rooms/999/messages",
        json={"body": "hi", "sender_name": "Taro"},
        headers=auth_headers("worker-1"),
    )

    assert posted.status_code == 403
    assert marked.status_code == 403
    assert missing.status_code == 404
    assert missing.json()["detail"] == "チャットルームが見つかりません"


def test_blank_message_is_rejected(client: TestClient, room, auth_headers) -> None:
    response = client.post(
        f"/chat-rooms/{room['id']}/messages",
        json={"body": "   ", "sender_name": "Taro"},
        headers=auth_headers("worker-1"),
    )

    assert response.status_code == 400
