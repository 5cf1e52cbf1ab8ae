"""Microsoft Graph directory lookups (users, groups, team channels).

Only reads are performed. The bearer token is acquired elsewhere and passed in; this
module never authenticates on its own.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests

from teams_callflow.errors import DirectoryError, NotFoundError
from teams_callflow.models.tenant import DirectoryGroup, DirectoryUser, TeamChannel

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_TIMEOUT = 30


def session_from_token(token: str) -> requests.Session:
    session = requests.Session()
    session.headers.update(
        {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
    )
    return session


class GraphDirectory:
    def __init__(
        self,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        base_url: str = GRAPH_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if session is None:
            if not token:
                raise ValueError("GraphDirectory needs a bearer token or a prepared session")
            session = session_from_token(token)
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._users: Dict[str, DirectoryUser] = {}
        self._groups: Dict[str, DirectoryGroup] = {}
        self._channels: Dict[Tuple[str, str], TeamChannel] = {}

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s", url)
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise DirectoryError(url, f"Request failed: {exc}") from exc
        if resp.status_code == 404:
            return None
        if resp.status_code >= 400:
            raise DirectoryError(url, "Directory request was rejected", resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise DirectoryError(url, "Response was not JSON", resp.status_code) from exc

    def get_user(self, user_id: str) -> DirectoryUser:
        if user_id in self._users:
            return self._users[user_id]
        data = self._get(f"/users/{user_id}", {"$select": "id,displayName,businessPhones"})
        if data is None:
            raise NotFoundError("User", user_id)
        phones = data.get("businessPhones") or []
        user = DirectoryUser(
            id=data.get("id") or user_id,
            display_name=data.get("displayName") or user_id,
            phone_number=phones[0] if phones else None,
        )
        self._users[user_id] = user
        return user

    def get_group(self, group_id: str) -> DirectoryGroup:
        if group_id in self._groups:
            return self._groups[group_id]
        data = self._get(f"/groups/{group_id}", {"$select": "id,displayName"})
        if data is None:
            raise NotFoundError("Group", group_id)
        group = DirectoryGroup(id=data.get("id") or group_id, display_name=data.get("displayName") or group_id)
        self._groups[group_id] = group
        return group

    def get_channel(self, team_id: str, channel_id: str) -> TeamChannel:
        key = (team_id, channel_id)
        if key in self._channels:
            return self._channels[key]
        data = self._get(f"/teams/{team_id}/channels/{channel_id}", {"$select": "id,displayName"})
        if data is None:
            raise NotFoundError("Channel", channel_id)
        channel = TeamChannel(
            team_id=team_id,
            id=data.get("id") or channel_id,
            display_name=data.get("displayName") or channel_id,
        )
        self._channels[key] = channel
        return channel


__all__ = ["GraphDirectory", "session_from_token", "GRAPH_BASE_URL"]
