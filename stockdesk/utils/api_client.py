# stockdesk/utils/api_client.py
import httpx
import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException
from pydantic import ValidationError

from stockdesk.config import settings
from stockdesk.schemas.stock import MovementQuery, StockMovementRecord

logger = logging.getLogger(__name__)


class BackendError(HTTPException):
    """Failed call to the inventory backend, carrying its status code."""


def _error_message(response: httpx.Response) -> str:
    # The backend answers errors as {"error": "..."}
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or body)
    return str(body)


class InventoryApiClient:
    def __init__(self, base_url: str = None, timeout: float = None, transport: httpx.AsyncBaseTransport = None):
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.API_TIMEOUT
        # Tests swap in an httpx.MockTransport
        self.transport = transport

    def _headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(method, url, params=params, json=json, headers=self._headers(token))
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                message = _error_message(e.response)
                logger.error(f"Backend {method} {path} failed with {e.response.status_code}: {message}")
                raise BackendError(status_code=e.response.status_code, detail=message) from e
            except httpx.RequestError as e:
                logger.error(f"Backend {method} {path} unreachable: {e}")
                raise BackendError(status_code=502, detail="Inventory backend unavailable") from e

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def get(self, path: str, token: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, token, params=params)

    async def post(self, path: str, token: str, json: Any = None) -> Any:
        return await self.request("POST", path, token, json=json)

    async def put(self, path: str, token: str, json: Any = None) -> Any:
        return await self.request("PUT", path, token, json=json)

    async def delete(self, path: str, token: str) -> Any:
        return await self.request("DELETE", path, token)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        return await self.request("POST", "/auth/login", json={"email": email, "password": password})

    async def profile(self, token: str) -> Dict[str, Any]:
        return await self.get("/profile", token)

    async def list_movements(self, query: MovementQuery, token: str) -> Tuple[List[StockMovementRecord], int]:
        data = await self.get("/stock-movements", token, params=query.to_params()) or {}
        rows = data.get("stock_movements") or []
        records = []
        for row in rows:
            try:
                records.append(StockMovementRecord.model_validate(row))
            except ValidationError as e:
                logger.warning("Skipping malformed stock movement %s: %s", row.get("id") if isinstance(row, dict) else row, e)
        return records, int(data.get("total") or len(records))


api_client = InventoryApiClient()


def get_api_client() -> InventoryApiClient:
    return api_client
