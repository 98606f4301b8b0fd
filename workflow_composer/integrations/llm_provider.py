import httpx
import openai
import anthropic
from typing import Optional
from openai import AsyncOpenAI
from anthropic import AsyncAnthropic

from workflow_composer.core.errors import ProviderError
from workflow_composer.core.logging import logger
from workflow_composer.schemas.provider import ProviderConfig

class LLMClient:
    """
    Calls one configured model provider. Each pipeline stage owns its own
    client built from its ProviderConfig; SDK clients are created lazily and
    never retry on their own.
    """

    def __init__(self, config: ProviderConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._http_client = http_client
        self._openai_client: Optional[AsyncOpenAI] = None
        self._anthropic_client: Optional[AsyncAnthropic] = None

    def _get_openai_client(self) -> AsyncOpenAI:
        if self._openai_client is None:
            self._openai_client = AsyncOpenAI(
                api_key=self.config.api_key,
                base_url=self.config.endpoint_url,
                timeout=self.config.timeout,
                max_retries=0,
                http_client=self._http_client,
            )
        return self._openai_client

    def _get_anthropic_client(self) -> AsyncAnthropic:
        if self._anthropic_client is None:
            self._anthropic_client = AsyncAnthropic(
                api_key=self.config.api_key,
                base_url=self.config.endpoint_url,
                timeout=self.config.timeout,
                max_retries=0,
                http_client=self._http_client,
            )
        return self._anthropic_client

    async def chat_completion(
        self,
        user_prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_response: bool = False,
    ) -> str:
        provider = self.config.provider_name
        logger.info(f"LLM Chat Completion: provider={provider} model={self.config.model_id}")

        try:
            if self.config.provider_kind in ("openai", "openai_compatible"):
                return await self._openai_completion(user_prompt, system_prompt, temperature, max_tokens, json_response)
            elif self.config.provider_kind == "anthropic":
                return await self._anthropic_completion(user_prompt, system_prompt, temperature, max_tokens)
            else:
                raise ProviderError(provider, f"Unsupported provider kind {self.config.provider_kind}")

        except (openai.APIStatusError, anthropic.APIStatusError) as e:
            logger.error(f"LLM API call failed: provider={provider} status={e.status_code}")
            raise ProviderError(provider, _status_error_text(e), status_code=e.status_code) from e
        except (openai.APITimeoutError, anthropic.APITimeoutError) as e:
            logger.error(f"LLM API call timed out: provider={provider}")
            raise ProviderError(provider, f"request timed out after {self.config.timeout}s") from e
        except (openai.APIConnectionError, anthropic.APIConnectionError) as e:
            logger.error(f"LLM API unreachable: provider={provider} error={e}")
            raise ProviderError(provider, f"provider unreachable: {e}") from e

    async def _openai_completion(
        self,
        user_prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        json_response: bool,
    ) -> str:
        client = self._get_openai_client()
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        kwargs = {}
        if json_response:
            kwargs["response_format"] = {"type": "json_object"}

        response = await client.chat.completions.create(
            model=self.config.model_id,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def _anthropic_completion(
        self,
        user_prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
    ) -> str:
        client = self._get_anthropic_client()
        response = await client.messages.create(
            model=self.config.model_id,
            system=system_prompt if system_prompt else "",
            messages=[{"role": "user", "content": user_prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return "".join(block.text for block in response.content if getattr(block, "type", None) == "text")

def _status_error_text(error) -> str:
    # Prefer the provider's raw body over the SDK's formatted message
    try:
        text = error.response.text
    except httpx.ResponseNotRead:
        text = ""
    return text or error.message
