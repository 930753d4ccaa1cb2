"""CrashApiClient — HTTP client for the history and statistics endpoints.

All endpoints are session scoped. The base URL is configured when the
session resolves its server, the session id once the init payload
arrives; any call made before then fails fast with ApiConfigError.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from crashclient.core.errors import ApiConfigError, ApiError
from crashclient.core.types import LEADERBOARD_PERIODS, ApiCategory

logger = logging.getLogger(__name__)


class CrashApiClient:
    """Thin requests wrapper. Never lets raw requests exceptions propagate."""

    def __init__(
        self,
        base_url: str | None = None,
        session_id: str | None = None,
        *,
        timeout_s: float = 10.0,
        http: requests.Session | None = None,
    ) -> None:
        self._base_url = ""
        self._session_id: str | None = None
        self._timeout_s = timeout_s
        self._http = http or requests.Session()
        self.set_base_url(base_url)
        self.set_session_id(session_id)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def session_id(self) -> str | None:
        return self._session_id

    def set_base_url(self, url: str | None) -> None:
        if not url:
            return
        self._base_url = url[:-1] if url.endswith("/") else url

    def set_session_id(self, session_id: str | None) -> None:
        self._session_id = session_id

    def close(self) -> None:
        self._http.close()

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def player_history(
        self, limit: int = 10, offset: int = 0, session: str | None = None
    ) -> Any:
        body = {
            "session": self._require_session("/history/", session),
            "limit": limit,
            "offset": offset,
        }
        return self._post("/history/", body)

    def top_cashouts(self, period: str, session: str | None = None) -> Any:
        return self._leaderboard("/topCashouts/", period, session)

    def top_wins(self, period: str, session: str | None = None) -> Any:
        return self._leaderboard("/topWins/", period, session)

    def top_rounds(self, period: str, session: str | None = None) -> Any:
        return self._leaderboard("/topRounds/", period, session)

    def general_round(self, session: str | None = None) -> Any:
        path = "/roundHistory/"
        self._require_base(path)
        body = {"session": session or self._session_id} if (session or self._session_id) else {}
        return self._post(path, body)

    def bet_details(self, bet_id: str, session: str | None = None) -> Any:
        path = f"/details/{bet_id}"
        return self._post(path, {"session": self._require_session(path, session)})

    def round_details(self, round_id: str, session: str | None = None) -> Any:
        path = f"/rounds/{round_id}"
        s = self._require_session(path, session)
        return self._request("GET", path, params={"session": s})

    def fetch(self, category: ApiCategory, params: dict[str, Any]) -> Any:
        """Dispatch a category request; used by the session runner."""
        if category == ApiCategory.PLAYER_HISTORY:
            return self.player_history(
                limit=params.get("limit", 10), offset=params.get("offset", 0)
            )
        if category == ApiCategory.BET_DETAILS:
            return self.bet_details(params["bet_id"])
        if category == ApiCategory.ROUND_DETAILS:
            return self.round_details(params["round_id"])
        if category == ApiCategory.GENERAL_ROUND:
            return self.general_round()
        if category == ApiCategory.TOP_CASHOUTS:
            return self.top_cashouts(params["period"])
        if category == ApiCategory.TOP_WINS:
            return self.top_wins(params["period"])
        if category == ApiCategory.TOP_ROUNDS:
            return self.top_rounds(params["period"])
        raise ValueError(f"Unknown API category: {category}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _leaderboard(self, path: str, period: str, session: str | None) -> Any:
        if period not in LEADERBOARD_PERIODS:
            raise ValueError(f"period must be one of {LEADERBOARD_PERIODS}, got {period!r}")
        body = {"session": self._require_session(path, session), "period": period}
        return self._post(path, body)

    def _require_base(self, path: str) -> None:
        if not self._base_url:
            raise ApiConfigError(path, "API base URL is not configured")

    def _require_session(self, path: str, session: str | None = None) -> str:
        self._require_base(path)
        s = session or self._session_id
        if not s:
            raise ApiConfigError(path, "API session id is not configured")
        return s

    def _post(self, path: str, body: dict[str, Any]) -> Any:
        return self._request("POST", path, json=body)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        self._require_base(path)
        url = f"{self._base_url}{path}"
        try:
            resp = self._http.request(method, url, timeout=self._timeout_s, **kwargs)
            resp.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise ApiError("timeout", path, str(e)) from e
        except requests.exceptions.HTTPError as e:
            raise ApiError("http_error", path, str(e)) from e
        except requests.exceptions.RequestException as e:
            raise ApiError("connection_error", path, str(e)) from e

        try:
            return resp.json()
        except ValueError as e:
            raise ApiError("bad_response", path, f"invalid JSON: {e}") from e
