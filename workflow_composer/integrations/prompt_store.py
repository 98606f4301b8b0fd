import httpx
from typing import Optional

from workflow_composer.config import settings
from workflow_composer.core.logging import logger
from workflow_composer.engine.prompting import PromptTemplate
from workflow_composer.engine.default_prompts import DEFAULT_TEMPLATES
from workflow_composer.integrations.http_client import bearer_headers, get_http_client

class PromptTemplateLoader:
    """
    Fetches stage prompt templates from the external template store.
    Falls back to the embedded default when the store is not configured,
    unreachable, or returns something that is not a usable template.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url if base_url is not None else settings.PROMPT_STORE_URL
        self.headers = bearer_headers(api_key if api_key is not None else settings.PROMPT_STORE_API_KEY)
        self._http_client = http_client

    async def load(self, stage_name: str) -> PromptTemplate:
        default = DEFAULT_TEMPLATES[stage_name]
        if not self.base_url:
            return default

        url = f"{self.base_url.rstrip('/')}/api/prompt-templates/{stage_name}"
        try:
            client = self._http_client or await get_http_client()
            response = await client.get(url, headers=self.headers)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Prompt store unavailable for stage {stage_name}, using default template: {e}")
            return default

        system_prompt = payload.get("system_prompt") if isinstance(payload, dict) else None
        if not isinstance(system_prompt, str) or not system_prompt.strip():
            logger.warning(f"Prompt store returned no template for stage {stage_name}, using default")
            return default

        user_template = payload.get("user_prompt")
        if not isinstance(user_template, str) or not user_template.strip():
            user_template = default.user_template

        return PromptTemplate(
            stage_name=stage_name,
            system_prompt=system_prompt,
            user_template=user_template,
            source="store",
        )
