import httpx
from datetime import date
from typing import Any, Dict, Optional

from workflow_composer.config import settings
from workflow_composer.core.errors import CredentialMissingError, ProviderError
from workflow_composer.core.logging import logger

class N8nClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url if base_url is not None else settings.N8N_URL
        self.api_token = api_token if api_token is not None else settings.N8N_API_TOKEN
        self._http_client = http_client

    def _ensure_configured(self):
        if not self.base_url:
            raise CredentialMissingError("n8n", "N8N_URL", stage="deploy")
        if not self.api_token:
            raise CredentialMissingError("n8n", "N8N_API_TOKEN", stage="deploy")

    @staticmethod
    def build_payload(document: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": document.get("name") or f"Automation {date.today().isoformat()}",
            "nodes": document.get("nodes") or [],
            "connections": document.get("connections") or {},
            "active": True,
            "settings": document.get("settings") or {},
        }

    async def create_workflow(self, document: Dict[str, Any]) -> Dict[str, Any]:
        self._ensure_configured()
        payload = self.build_payload(document)
        headers = {"Authorization": f"Bearer {self.api_token}", "Accept": "application/json"}

        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    f"{self.base_url.rstrip('/')}/rest/workflows", json=payload, headers=headers
                )
            else:
                async with httpx.AsyncClient(base_url=self.base_url, timeout=30.0) as client:
                    response = await client.post("/rest/workflows", json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise ProviderError("n8n", f"n8n unreachable: {e}", stage="deploy") from e

        if response.status_code >= 400:
            logger.error(f"n8n API error: {response.status_code} {response.text}")
            raise ProviderError("n8n", response.text, status_code=response.status_code, stage="deploy")

        result = response.json()
        logger.info(f"Workflow '{payload['name']}' created in n8n with id {result.get('id')}")
        return {"id": str(result.get("id")), "name": payload["name"]}
