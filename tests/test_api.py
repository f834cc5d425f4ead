"""Tests for the FastAPI tic-tac-toe interface."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tictactoe import ui
from tictactoe.ui import app


client = TestClient(app)
ui.COMPUTER_THINK_DELAY = (0.0, 0.0)


def _new_game(**payload):
    response = client.post("/api/game", json=payload)
    assert response.status_code == 200
    return response.json()


def test_create_game_and_first_move():
    payload = _new_game(mode="human-vs-computer", difficulty="hard")
    assert payload["currentPlayer"] == "X"
    assert payload["cells"] == [""] * 9
    assert payload["moveLog"] == []
    assert payload["state"] == "awaiting-human"

    game_id = payload["id"]
    move_response = client.post(f"/api/game/{game_id}/move", json={"index": 0})
    assert move_response.status_code == 200
    state = move_response.json()
    assert state["accepted"] is True
    assert state["moveLog"][0] == {"player": "X", "index": 0}
    assert state["cells"][0] == "X"
    assert state["currentPlayer"] == "O"
    assert state["computerPending"] is True

    # TestClient runs background tasks before returning
    follow_up = client.get(f"/api/game/{game_id}")
    assert follow_up.status_code == 200
    final_state = follow_up.json()
    assert final_state["currentPlayer"] == "X"
    assert final_state["computerPending"] is False
    assert final_state["lastMove"] == {"player": "O", "index": 4}
    assert final_state["cells"][4] == "O"


def test_defaults_to_hard_computer_game():
    payload = _new_game()
    assert payload["mode"] == "human-vs-computer"
    assert payload["difficulty"] == "hard"


def test_occupied_cell_is_ignored():
    game_id = _new_game(mode="human-vs-human")["id"]
    assert client.post(f"/api/game/{game_id}/move", json={"index": 0}).status_code == 200

    duplicate_move = client.post(f"/api/game/{game_id}/move", json={"index": 0})
    assert duplicate_move.status_code == 200
    state = duplicate_move.json()
    assert state["accepted"] is False
    assert state["currentPlayer"] == "O"
    assert len(state["moveLog"]) == 1


def test_human_vs_human_win_reports_line():
    game_id = _new_game(mode="human-vs-human")["id"]
    for index in (0, 3, 1, 4, 2):
        state = client.post(f"/api/game/{game_id}/move", json={"index": index}).json()
    assert state["status"] == "win"
    assert state["winner"] == "X"
    assert state["winningLine"] == [0, 1, 2]
    assert state["state"] == "finished"
    assert state["currentPlayer"] is None


def test_rejects_unsupported_settings():
    assert client.post("/api/game", json={"mode": "online"}).status_code == 422
    assert client.post("/api/game", json={"difficulty": "medium"}).status_code == 422


def test_rejects_out_of_range_index():
    game_id = _new_game()["id"]
    assert client.post(f"/api/game/{game_id}/move", json={"index": 9}).status_code == 422
    assert client.post(f"/api/game/{game_id}/move", json={"index": -1}).status_code == 422


def test_reset_switches_mode_and_clears_board():
    game_id = _new_game()["id"]
    client.post(f"/api/game/{game_id}/move", json={"index": 0})
    response = client.post(
        f"/api/game/{game_id}/reset", json={"mode": "human-vs-human"}
    )
    assert response.status_code == 200
    state = response.json()
    assert state["id"] == game_id
    assert state["mode"] == "human-vs-human"
    assert state["difficulty"] == "hard"
    assert state["cells"] == [""] * 9
    assert state["moveLog"] == []
    assert state["generation"] == 1


def test_difficulty_change_keeps_board():
    game_id = _new_game(difficulty="hard")["id"]
    client.post(f"/api/game/{game_id}/move", json={"index": 0})
    response = client.post(
        f"/api/game/{game_id}/difficulty", json={"difficulty": "easy"}
    )
    assert response.status_code == 200
    state = response.json()
    assert state["difficulty"] == "easy"
    assert state["cells"][0] == "X"
    assert state["cells"].count("O") == 1
    assert (
        client.post(
            f"/api/game/{game_id}/difficulty", json={"difficulty": "brutal"}
        ).status_code
        == 422
    )


def test_stale_computer_move_is_dropped():
    game_id = _new_game()["id"]
    entry = ui.GAMES[game_id]
    with entry.lock:
        update = ui.submit_human_move(entry.session, 0)
    client.post(f"/api/game/{game_id}/reset", json={})
    ui._run_computer_turn(game_id, update.generation)
    state = client.get(f"/api/game/{game_id}").json()
    assert state["cells"] == [""] * 9
    assert state["currentPlayer"] == "X"


def test_missing_game_returns_404():
    assert client.get("/api/game/missing").status_code == 404
    assert client.post("/api/game/missing/move", json={"index": 0}).status_code == 404
    assert client.post("/api/game/missing/reset", json={}).status_code == 404


def test_index_serves_page():
    response = client.get("/")
    assert response.status_code == 200
    assert "winnerModal" in response.text
