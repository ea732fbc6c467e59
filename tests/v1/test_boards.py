# tests/v1/test_boards.py
"""Tests for board endpoints."""

from fastapi import status
from sqlalchemy import update

from position_keeper.models import Card


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_create_board_appends(client) -> None:
    """Boards created without a rank go to the end."""
    first = client.post("/api/v1/boards/", json={"name": "Roadmap"})
    second = client.post("/api/v1/boards/", json={"name": "Bugs"})
    assert first.status_code == status.HTTP_201_CREATED
    assert second.status_code == status.HTTP_201_CREATED
    assert first.json()["rank"] == 1
    assert second.json()["rank"] == 2


def test_create_board_at_rank(client, make_board) -> None:
    make_board("one")
    make_board("two")
    response = client.post("/api/v1/boards/", json={"name": "zero", "rank": 1})
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["rank"] == 1

    listed = client.get("/api/v1/boards/").json()
    assert [(b["name"], b["rank"]) for b in listed] == [("zero", 1), ("one", 2), ("two", 3)]


def test_create_board_rank_is_clamped(client, make_board) -> None:
    make_board("one")
    response = client.post("/api/v1/boards/", json={"name": "far", "rank": 50})
    assert response.json()["rank"] == 2

    response = client.post("/api/v1/boards/", json={"name": "zero", "rank": 0})
    assert response.json()["rank"] == 1


def test_create_board_rejects_negative_rank(client) -> None:
    response = client.post("/api/v1/boards/", json={"name": "bad", "rank": -1})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_get_board(client, board) -> None:
    response = client.get(f"/api/v1/boards/{board.id}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["name"] == board.name


def test_get_nonexistent_board(client) -> None:
    response = client.get("/api/v1/boards/99999")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_move_board(client, make_board) -> None:
    boards = [make_board(name) for name in ("a", "b", "c")]
    response = client.patch(f"/api/v1/boards/{boards[2].id}", json={"rank": 1})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["rank"] == 1

    listed = client.get("/api/v1/boards/").json()
    assert [b["name"] for b in listed] == ["c", "a", "b"]


def test_rename_board_keeps_rank(client, make_board) -> None:
    make_board("a")
    target = make_board("b")
    response = client.patch(f"/api/v1/boards/{target.id}", json={"name": "renamed"})
    assert response.json() == {"id": target.id, "name": "renamed", "rank": 2}


def test_delete_board_closes_gap(client, make_board, make_cards) -> None:
    boards = [make_board(name) for name in ("a", "b", "c")]
    make_cards(boards[0], "XY")

    response = client.delete(f"/api/v1/boards/{boards[0].id}")
    assert response.status_code == status.HTTP_204_NO_CONTENT

    listed = client.get("/api/v1/boards/").json()
    assert [(b["name"], b["rank"]) for b in listed] == [("b", 1), ("c", 2)]
    assert client.get(f"/api/v1/boards/{boards[0].id}/cards").status_code == 404


def test_list_cards_by_lane(client, board, make_cards) -> None:
    make_cards(board, "AB")
    make_cards(board, "XYZ", lane="done")

    response = client.get(f"/api/v1/boards/{board.id}/cards")
    assert response.status_code == status.HTTP_200_OK
    assert [(c["lane"], c["title"], c["position"]) for c in response.json()] == [
        ("done", "X", 1), ("done", "Y", 2), ("done", "Z", 3),
        ("todo", "A", 1), ("todo", "B", 2),
    ]

    response = client.get(f"/api/v1/boards/{board.id}/cards", params={"lane": "todo"})
    assert [c["title"] for c in response.json()] == ["A", "B"]


def test_create_card(client, board, make_cards) -> None:
    make_cards(board, "AB")
    response = client.post(
        f"/api/v1/boards/{board.id}/cards",
        json={"title": "C"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["lane"] == "todo"
    assert data["position"] == 3


def test_create_card_at_position(client, board, make_cards, lane_positions) -> None:
    make_cards(board, "AB")
    response = client.post(
        f"/api/v1/boards/{board.id}/cards",
        json={"title": "X", "position": 1},
    )
    assert response.json()["position"] == 1
    assert lane_positions(board) == {"X": 1, "A": 2, "B": 3}


def test_create_card_position_is_clamped(client, board, make_cards) -> None:
    make_cards(board, "AB")
    response = client.post(
        f"/api/v1/boards/{board.id}/cards",
        json={"title": "X", "position": 10},
    )
    assert response.json()["position"] == 3


def test_create_card_on_missing_board(client) -> None:
    response = client.post("/api/v1/boards/99999/cards", json={"title": "X"})
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_create_card_requires_title(client, board) -> None:
    response = client.post(f"/api/v1/boards/{board.id}/cards", json={"title": ""})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_compact_lane(client, db_session, board, make_cards, lane_positions) -> None:
    make_cards(board, "ABC")
    db_session.execute(update(Card).where(Card.title == "A").values(position=8))

    response = client.post(f"/api/v1/boards/{board.id}/lanes/todo/compact")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"board_id": board.id, "lane": "todo", "renumbered": 3}
    assert lane_positions(board) == {"B": 1, "C": 2, "A": 3}
