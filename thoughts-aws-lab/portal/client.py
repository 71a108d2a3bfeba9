"""HTTP client for the Thoughts API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class PortalApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class UnauthorizedError(PortalApiError):
    pass


class ThoughtsClient:
    """Client for the single method-routed Thoughts endpoint."""

    def __init__(
        self,
        api_url: str,
        username: str,
        password: str,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            api_url: Full URL of the Thoughts endpoint
            username: Basic-auth username
            password: Basic-auth password
            http_client: Optional preconfigured httpx client (tests inject a MockTransport)
        """
        self.api_url = api_url
        self.http_client = http_client or httpx.Client(timeout=30.0)
        self.auth = httpx.BasicAuth(username, password)

    def close(self) -> None:
        self.http_client.close()

    def _send(self, method: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        logger.debug("%s %s", method, self.api_url)
        response = self.http_client.request(method, self.api_url, json=payload, auth=self.auth)

        try:
            data = response.json()
        except ValueError:
            data = {"message": response.text}

        if response.status_code == 401:
            raise UnauthorizedError(401, data.get("message", "Unauthorized"))
        if response.is_error:
            message = data.get("message", response.reason_phrase)
            if data.get("error"):
                message = f"{message}: {data['error']}"
            raise PortalApiError(response.status_code, message)
        return data

    def list_thoughts(self) -> List[Dict[str, Any]]:
        return self._send("GET")["thoughts"]

    def create_thought(self, content: str, category: str = "general") -> Dict[str, Any]:
        return self._send("POST", {"content": content, "category": category})["thought"]

    def update_thought(self, thought: Dict[str, Any], **changes) -> Dict[str, Any]:
        payload = {"id": thought["id"], "timestamp": thought["timestamp"], **changes}
        return self._send("PUT", payload)["thought"]

    def delete_thought(self, thought: Dict[str, Any]) -> Dict[str, Any]:
        payload = {"id": thought["id"], "timestamp": thought["timestamp"]}
        return self._send("DELETE", payload)["thought"]
