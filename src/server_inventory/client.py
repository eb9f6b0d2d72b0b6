"""
HTTP client for the inventory API.
"""

import asyncio
import aiohttp
from typing import Any, Dict, List, Optional
from loguru import logger
from pydantic import ValidationError
from server_inventory.constants import AUTHORIZATION_HEADER
from server_inventory.exceptions import ApiError, AuthenticationError, NotAuthenticatedError
from server_inventory.schemas import (
    LoginArgs,
    LoginResponse,
    RegisterArgs,
    ServerFields,
    ServerList,
    ServerRecord,
    validate,
)
from server_inventory.session import SessionStore


class ApiClient:
    """
    One short-lived aiohttp session per call; no retries, no client-side timeout
    beyond aiohttp's own defaults.
    """

    def __init__(self, base_url: str, session_store: SessionStore):
        self.base_url = base_url.rstrip("/")
        self.session_store = session_store

    def _auth_headers(self) -> Dict[str, str]:
        token = self.session_store.get_token()
        if not token:
            raise NotAuthenticatedError("Not logged in")
        return {AUTHORIZATION_HEADER: f"Bearer {token}"}

    @staticmethod
    async def _error_message(resp) -> str:
        try:
            body = await resp.json(content_type=None)
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        text = await resp.text()
        return text.strip() or f"Request failed with status {resp.status}"

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        auth: bool = True,
    ) -> Any:
        headers = self._auth_headers() if auth else {}
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")
        try:
            async with aiohttp.ClientSession() as session:
                async with session.request(method, url, headers=headers, json=payload) as resp:
                    if resp.status == 401:
                        raise AuthenticationError(await self._error_message(resp), resp.status)
                    if resp.status >= 400:
                        raise ApiError(await self._error_message(resp), resp.status)
                    try:
                        return await resp.json(content_type=None)
                    except ValueError as exc:
                        raise ApiError(f"Malformed response from {url}", resp.status) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning(f"{method} {url} failed: {exc}")
            reason = str(exc) or type(exc).__name__
            raise ApiError(f"Unable to reach {self.base_url}: {reason}") from exc

    @staticmethod
    def _parse(model, data: Any):
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise ApiError(
                f"Unexpected {model.__name__} payload: {exc.error_count()} error(s)"
            ) from exc

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "/health", auth=False)

    async def login(self, username: str, password: str) -> LoginResponse:
        args = validate(LoginArgs, {"username": username, "password": password})
        data = await self._request("POST", "/api/auth/login", args.model_dump(), auth=False)
        return self._parse(LoginResponse, data)

    async def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        args = validate(RegisterArgs, {"username": username, "email": email, "password": password})
        return await self._request("POST", "/api/auth/register", args.model_dump(), auth=False)

    async def list_servers(self) -> List[ServerRecord]:
        data = await self._request("GET", "/api/servers")
        return self._parse(ServerList, data or {}).servers or []

    async def get_server(self, server_id: str) -> ServerRecord:
        data = await self._request("GET", f"/api/servers/{server_id}")
        return self._parse(ServerRecord, data)

    async def create_server(self, fields: ServerFields) -> ServerRecord:
        data = await self._request("POST", "/api/servers", fields.payload())
        return self._parse(ServerRecord, data)

    async def update_server(self, server_id: str, fields: ServerFields) -> ServerRecord:
        data = await self._request("PUT", f"/api/servers/{server_id}", fields.payload())
        return self._parse(ServerRecord, data)

    async def delete_server(self, server_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/servers/{server_id}")
