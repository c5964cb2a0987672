"""Mattermost REST API v4 client: users, teams, bots."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, Optional

import requests
from requests.utils import quote

from mmadmin.config import ServerConfig
from mmadmin.errors import RemoteNotFoundError, TransportError
from mmadmin.models import Bot, BotPatch, Team, User

logger = logging.getLogger("mmadmin.client")

MAX_BACKOFF_SECONDS = 60.0


class Client:
    """Thin wrapper around a requests.Session.

    Lookups raise ``RemoteNotFoundError`` on 404 and ``TransportError`` for
    every other failure, so callers can tell "no such entity" from an outage.
    """

    def __init__(
        self,
        config: ServerConfig,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._base = config.api_url
        self._timeout = config.timeout
        self._max_retries = config.max_retries
        self._retry_base = config.retry_base_seconds
        self._sleep = sleep
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {config.token}",
            "Accept": "application/json",
            "User-Agent": "mmadmin",
        })

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json_body: Any = None,
    ) -> Any:
        url = f"{self._base}/{path.lstrip('/')}"
        attempt = 0
        while True:
            try:
                resp = self._session.request(
                    method, url, params=params, json=json_body, timeout=self._timeout,
                )
            except requests.RequestException as exc:
                raise TransportError(f"{method} {path} failed: {exc}") from exc

            if resp.status_code == 429 and attempt < self._max_retries:
                self._rate_limit_sleep(attempt)
                attempt += 1
                continue
            if resp.status_code >= 400:
                raise self._error_from_response(method, path, resp)
            if not resp.content:
                return None
            try:
                return resp.json()
            except ValueError as exc:
                raise TransportError(
                    f"{method} {path} returned a non-JSON body",
                    status_code=resp.status_code,
                ) from exc

    def _rate_limit_sleep(self, attempt: int) -> None:
        """Exponential backoff sleep for rate limiting."""
        delay = min(self._retry_base * (2 ** attempt), MAX_BACKOFF_SECONDS)
        logger.warning("Rate limited, sleeping %.1fs (attempt %d)", delay, attempt + 1)
        self._sleep(delay)

    @staticmethod
    def _error_from_response(method: str, path: str, resp: requests.Response) -> TransportError:
        message = f"{method} {path} failed"
        error_id = None
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or message
            error_id = body.get("id")
        logger.debug(
            "Request failed: %s %s", method, path,
            extra={"status_code": resp.status_code},
        )
        if resp.status_code == 404:
            return RemoteNotFoundError(message, status_code=404, error_id=error_id)
        return TransportError(message, status_code=resp.status_code, error_id=error_id)

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    @staticmethod
    def _one(factory, data: Any, what: str):
        """Build one entity; a missing or malformed payload is a transport failure."""
        try:
            return factory.from_api(data)
        except (KeyError, TypeError, AttributeError) as exc:
            raise TransportError(f"malformed {what} in response: {exc!r}") from exc

    @classmethod
    def _many(cls, factory, data: Any, what: str) -> list:
        if data is None:
            return []
        if not isinstance(data, list):
            raise TransportError(f"expected a list of {what}, got {type(data).__name__}")
        return [cls._one(factory, item, what) for item in data]

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> User:
        return self._one(User, self._request("GET", _path("users", user_id)), "user")

    def get_user_by_username(self, username: str) -> User:
        return self._one(
            User, self._request("GET", _path("users", "username", username)), "user",
        )

    def get_user_by_email(self, email: str) -> User:
        return self._one(User, self._request("GET", _path("users", "email", email)), "user")

    def get_users(self, page: int, per_page: int) -> list[User]:
        data = self._request("GET", "users", params={"page": page, "per_page": per_page})
        return self._many(User, data, "users")

    def get_users_by_ids(self, user_ids: Iterable[str]) -> list[User]:
        data = self._request("POST", "users/ids", json_body=list(user_ids))
        return self._many(User, data, "users")

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def get_team(self, team_id: str) -> Team:
        return self._one(Team, self._request("GET", _path("teams", team_id)), "team")

    def get_team_by_name(self, name: str) -> Team:
        return self._one(Team, self._request("GET", _path("teams", "name", name)), "team")

    # ------------------------------------------------------------------
    # Bots
    # ------------------------------------------------------------------

    def get_bots(
        self,
        page: int,
        per_page: int,
        include_deleted: bool = False,
        only_orphaned: bool = False,
    ) -> list[Bot]:
        params: dict[str, Any] = {"page": page, "per_page": per_page}
        if include_deleted:
            params["include_deleted"] = "true"
        if only_orphaned:
            params["only_orphaned"] = "true"
        return self._many(Bot, self._request("GET", "bots", params=params), "bots")

    def create_bot(self, username: str, display_name: str = "", description: str = "") -> Bot:
        payload = {
            "username": username,
            "display_name": display_name,
            "description": description,
        }
        return self._one(Bot, self._request("POST", "bots", json_body=payload), "bot")

    def patch_bot(self, bot_user_id: str, patch: BotPatch) -> Bot:
        data = self._request("PUT", _path("bots", bot_user_id), json_body=patch.to_api())
        return self._one(Bot, data, "bot")

    def disable_bot(self, bot_user_id: str) -> Bot:
        return self._one(Bot, self._request("POST", _path("bots", bot_user_id, "disable")), "bot")

    def enable_bot(self, bot_user_id: str) -> Bot:
        return self._one(Bot, self._request("POST", _path("bots", bot_user_id, "enable")), "bot")

    def assign_bot(self, bot_user_id: str, owner_id: str) -> Bot:
        data = self._request("POST", _path("bots", bot_user_id, "assign", owner_id))
        return self._one(Bot, data, "bot")


def _path(*segments: str) -> str:
    """Join path segments, quoting each so '/', '?' or '#' stay inside it."""
    return "/".join(quote(str(segment), safe="@") for segment in segments)
