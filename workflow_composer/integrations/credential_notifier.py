import httpx
from pydantic import BaseModel
from typing import Optional

from workflow_composer.config import settings
from workflow_composer.core.logging import logger
from workflow_composer.integrations.http_client import post_json

class CredentialGap(BaseModel):
    service: str
    required_credential_name: str
    workflow_id: Optional[str] = None
    stage: Optional[str] = None
    message: Optional[str] = None

class CredentialNotifier:
    """
    Side channel for missing provider credentials. Delivery problems are
    logged and never raised: the stage fails whether or not the alert lands.
    """

    def __init__(self, webhook_url: Optional[str] = None, http_client: Optional[httpx.AsyncClient] = None):
        self.webhook_url = webhook_url if webhook_url is not None else settings.CREDENTIAL_ALERT_WEBHOOK_URL
        self._http_client = http_client

    async def notify(self, gap: CredentialGap) -> bool:
        logger.warning(
            f"Missing credential {gap.required_credential_name} for {gap.service}",
            extra={"extra_fields": gap.model_dump()},
        )
        if not self.webhook_url:
            return False

        payload = gap.model_dump()
        payload["type"] = "credential_request"
        if not payload.get("message"):
            payload["message"] = (
                f"Configure {gap.required_credential_name} to let the {gap.stage or gap.service} "
                "stage run."
            )
        try:
            await post_json(self.webhook_url, payload, client=self._http_client)
        except httpx.HTTPError as e:
            logger.error(f"Failed to deliver credential request for {gap.service}: {e}")
            return False

        logger.info(f"Credential request sent for {gap.service} ({gap.required_credential_name})")
        return True
