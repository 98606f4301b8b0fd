from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional

class ProviderConfig(BaseModel):
    """Connection settings for the model provider behind one pipeline stage."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    provider_name: str
    provider_kind: Literal["openai", "openai_compatible", "anthropic"]
    api_key: Optional[str] = Field(default=None, repr=False)  # do NOT log
    api_key_name: str
    model_id: str
    endpoint_url: Optional[str] = None
    timeout: float = 120.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.strip())
