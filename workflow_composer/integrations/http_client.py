import httpx
from typing import Any, Dict, Optional
from workflow_composer.core.logging import logger

class HttpClient:
    """Process-wide httpx client shared by the prompt store, notifier and n8n client."""

    _client: httpx.AsyncClient | None = None

    @classmethod
    async def get_client(cls) -> httpx.AsyncClient:
        if cls._client is None or cls._client.is_closed:
            logger.info("Initializing shared HTTP client")
            cls._client = httpx.AsyncClient(
                timeout=httpx.Timeout(15.0),
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=50),
                headers={"Accept": "application/json"},
            )
        return cls._client

    @classmethod
    async def close_client(cls):
        if cls._client and not cls._client.is_closed:
            logger.info("Closing shared HTTP client")
            await cls._client.aclose()
            cls._client = None

async def get_http_client() -> httpx.AsyncClient:
    return await HttpClient.get_client()

def bearer_headers(token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}

async def post_json(
    url: str,
    payload: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> httpx.Response:
    client = client or await get_http_client()
    response = await client.post(url, json=payload, headers=headers or {})
    response.raise_for_status()
    return response
