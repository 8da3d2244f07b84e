# src/connect4_client/services/api_client.py

from __future__ import annotations
import logging
from typing import Any, Dict, Optional

import requests

from connect4_client.config import API_BASE_URL, API_TIMEOUT_SEC, ROWS, COLS
from connect4_client.core.board import Board
from connect4_client.services.base import MoveResponse, StartGameResponse
from connect4_client.types import SessionStatus

logger = logging.getLogger(__name__)

DESERIALIZE_FAILED = "Failed to deserialize response"


def _ci(d: Dict[str, Any]) -> Dict[str, Any]:
    # The server is not consistent about key casing.
    return {str(k).lower(): v for k, v in d.items()}


class ApiClient:
    """
    HTTP access to the game server.

    Every call returns a response object; transport errors and bad payloads
    come back as success=False with a message, never as exceptions.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = API_TIMEOUT_SEC,
        session: Optional[requests.Session] = None,
        rows: int = ROWS,
        cols: int = COLS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()
        self.rows = rows
        self.cols = cols

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _post_json(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.http.post(self._url(path), json=body, timeout=self.timeout)
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("response body is not an object")
        return _ci(data)

    def _game(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        game = data.get("game")
        return _ci(game) if isinstance(game, dict) else None

    # --- game authority -----------------------------------------------

    def start_game(self, player_id: int) -> StartGameResponse:
        try:
            data = self._post_json("/api/Games/start", {"playerId": player_id})
        except ValueError:
            # requests' JSONDecodeError is a ValueError too
            return StartGameResponse(success=False, message=DESERIALIZE_FAILED)
        except requests.RequestException as e:
            logger.warning("start_game failed: %s", e)
            return StartGameResponse(success=False, message=f"Error starting game: {e}")

        message = str(data.get("message") or "")
        if not data.get("success"):
            return StartGameResponse(success=False, message=message)

        game = self._game(data)
        if game is None:
            return StartGameResponse(success=False, message=message or DESERIALIZE_FAILED)

        try:
            board = Board.from_rows(game.get("board"), self.rows, self.cols)
        except (TypeError, ValueError) as e:
            logger.warning("start_game: bad board in response: %s", e)
            return StartGameResponse(success=False, message=DESERIALIZE_FAILED)

        return StartGameResponse(
            success=True,
            session_id=game.get("id"),
            board=board,
            status=game.get("status"),
            message=message,
        )

    def submit_move(self, session_id: int, column: int) -> MoveResponse:
        try:
            data = self._post_json("/api/Games/move", {"gameId": session_id, "column": column})
        except ValueError:
            return MoveResponse(success=False, message=DESERIALIZE_FAILED)
        except requests.RequestException as e:
            logger.warning("submit_move failed: %s", e)
            return MoveResponse(success=False, message=f"Error making move: {e}")

        message = str(data.get("message") or "")
        if not data.get("success"):
            return MoveResponse(success=False, message=message)

        game = self._game(data)
        if game is None:
            return MoveResponse(success=False, message=message or DESERIALIZE_FAILED)

        try:
            board = Board.from_rows(game.get("board"), self.rows, self.cols)
            cpu = data.get("cpumove")
            opponent_move = int(cpu) if cpu is not None else None
        except (TypeError, ValueError) as e:
            logger.warning("submit_move: bad payload in response: %s", e)
            return MoveResponse(success=False, message=DESERIALIZE_FAILED)

        return MoveResponse(
            success=True,
            board=board,
            status=game.get("status"),
            opponent_move=opponent_move,
            message=message,
        )

    # --- players --------------------------------------------------------

    def get_player(self, player_id: int) -> Optional[Dict[str, Any]]:
        try:
            resp = self.http.get(self._url(f"/api/Players/byplayerid/{player_id}"), timeout=self.timeout)
            if not resp.ok:
                return None
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("get_player(%s) failed: %s", player_id, e)
            return None
        return data if isinstance(data, dict) else None

    def update_player(self, player: Dict[str, Any]) -> bool:
        key = _ci(player).get("id")
        try:
            resp = self.http.put(self._url(f"/api/Players/{key}"), json=player, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("update_player(%s) failed: %s", key, e)
            return False
        return resp.ok

    def test_connection(self) -> bool:
        try:
            return self.http.get(self._url("/api/Players"), timeout=self.timeout).ok
        except requests.RequestException:
            return False


class PlayerStatsSink:
    """Pushes win/loss/played counters to the server's player record."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def record_outcome(self, player_id: int, outcome: SessionStatus) -> None:
        player = self.client.get_player(player_id)
        if player is None:
            logger.warning("No player record for %s; outcome %s not recorded", player_id, outcome.value)
            return

        def bump(field: str) -> None:
            # Keep whatever casing the server used for the field.
            key = next((k for k in player if k.lower() == field.lower()), field)
            player[key] = int(player.get(key) or 0) + 1

        if outcome == SessionStatus.WON:
            bump("gamesWon")
        elif outcome == SessionStatus.LOST:
            bump("gamesLost")
        bump("gamesPlayed")

        if not self.client.update_player(player):
            logger.warning("Could not update statistics for player %s", player_id)
