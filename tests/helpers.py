from typing import Any, Dict, List, Optional

from workflow_composer.engine.stages import (
    PlannerStageExecutor,
    RefinerStageExecutor,
    OptimizerStageExecutor,
    FinalizerStageExecutor,
)
from workflow_composer.integrations.credential_notifier import CredentialGap, CredentialNotifier
from workflow_composer.integrations.prompt_store import PromptTemplateLoader
from workflow_composer.schemas.provider import ProviderConfig
from workflow_composer.services.execution_trace_service import TraceRecorder

class FakeLLMClient:
    """Stands in for LLMClient. Replays queued responses; an Exception in the queue is raised."""

    def __init__(self, *responses: Any):
        self.responses: List[Any] = list(responses)
        self.calls: List[Dict[str, Any]] = []

    async def chat_completion(
        self,
        user_prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_response: bool = False,
    ) -> str:
        self.calls.append({
            "user_prompt": user_prompt,
            "system_prompt": system_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "json_response": json_response,
        })
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

class RecordingNotifier(CredentialNotifier):
    def __init__(self):
        super().__init__(webhook_url="")
        self.gaps: List[CredentialGap] = []

    async def notify(self, gap: CredentialGap) -> bool:
        self.gaps.append(gap)
        return False

STAGE_CLASSES = {
    "planner": PlannerStageExecutor,
    "refiner": RefinerStageExecutor,
    "optimizer": OptimizerStageExecutor,
    "finalizer": FinalizerStageExecutor,
}

def provider_config(stage_name: str, api_key: Optional[str] = "test-key") -> ProviderConfig:
    return ProviderConfig(
        provider_name=f"{stage_name}-provider",
        provider_kind="anthropic" if stage_name == "refiner" else "openai",
        api_key=api_key,
        api_key_name=f"{stage_name.upper()}_API_KEY",
        model_id="test-model",
        timeout=5.0,
    )

def build_stages(
    clients: Dict[str, FakeLLMClient],
    session_factory=None,
    notifier: Optional[CredentialNotifier] = None,
    missing_keys: tuple = (),
):
    recorder = TraceRecorder(session_factory) if session_factory is not None else None
    return [
        cls(
            provider_config(name, api_key=None if name in missing_keys else "test-key"),
            llm_client=clients[name],
            prompt_loader=PromptTemplateLoader(base_url=""),
            trace_recorder=recorder,
            notifier=notifier or RecordingNotifier(),
        )
        for name, cls in STAGE_CLASSES.items()
    ]
