from abc import ABC
from typing import Any, Dict, Optional, Set
import asyncio
import time

from workflow_composer.core.errors import CredentialMissingError, ProviderError
from workflow_composer.core.logging import logger
from workflow_composer.engine.extraction import ExtractionResult, extract_json
from workflow_composer.engine.prompting import PromptContext
from workflow_composer.integrations.credential_notifier import CredentialGap, CredentialNotifier
from workflow_composer.integrations.llm_provider import LLMClient
from workflow_composer.integrations.prompt_store import PromptTemplateLoader
from workflow_composer.schemas.execution import StageResult
from workflow_composer.schemas.provider import ProviderConfig

RAW_RESPONSE_LIMIT = 4000

# Strong references to in-flight credential alerts until they finish
_NOTIFICATION_TASKS: Set[asyncio.Task] = set()

class StageOutput:
    """Structured output of a stage plus an optional degradation note."""

    def __init__(self, data: Any, note: Optional[str] = None):
        self.data = data
        self.note = note

    @property
    def degraded(self) -> bool:
        return self.note is not None

class BaseStageExecutor(ABC):
    """
    One pipeline stage: render the prompt, call the stage's provider and
    extract structured output. Generation parameters are fixed per stage.
    """

    stage_number: int
    stage_name: str
    temperature: float = 0.7
    max_tokens: int = 2000
    json_response: bool = False

    def __init__(
        self,
        provider: ProviderConfig,
        llm_client: Optional[LLMClient] = None,
        prompt_loader: Optional[PromptTemplateLoader] = None,
        trace_recorder=None,
        notifier: Optional[CredentialNotifier] = None,
        timeout: Optional[float] = None,
    ):
        self.provider = provider
        self.llm_client = llm_client or LLMClient(provider)
        self.prompt_loader = prompt_loader or PromptTemplateLoader()
        self.trace_recorder = trace_recorder
        self.notifier = notifier or CredentialNotifier()
        self.timeout = timeout if timeout is not None else provider.timeout

    async def execute(self, stage_input: Any, workflow_id: str) -> StageResult:
        """
        Run the stage and return its completed StageResult.
        Raises CredentialMissingError or ProviderError after recording the
        failed snapshot.
        """
        running = StageResult(
            workflow_id=workflow_id,
            stage_number=self.stage_number,
            stage_name=self.stage_name,
            input=stage_input,
        )
        await self._record(running)
        logger.info(
            f"Stage {self.stage_number} ({self.stage_name}) started",
            extra={"extra_fields": {"workflow_id": workflow_id, "stage": self.stage_name}},
        )

        start_time = time.time()
        try:
            await self._check_credentials(workflow_id)
            output = await self._run(stage_input, workflow_id)
        except (CredentialMissingError, ProviderError) as e:
            e.stage = self.stage_name
            duration = int((time.time() - start_time) * 1000)
            await self._record(running.fail(e.message, duration))
            logger.error(f"Stage {self.stage_name} failed for workflow {workflow_id}: {e.message}")
            raise
        except Exception as e:
            duration = int((time.time() - start_time) * 1000)
            await self._record(running.fail(f"Unexpected error: {e}", duration))
            logger.exception(f"Stage {self.stage_name} crashed for workflow {workflow_id}")
            raise

        duration = int((time.time() - start_time) * 1000)
        completed = running.complete(output.data, duration, note=output.note)
        await self._record(completed)
        logger.info(
            f"Stage {self.stage_number} ({self.stage_name}) completed in {duration}ms",
            extra={"extra_fields": {
                "workflow_id": workflow_id,
                "stage": self.stage_name,
                "outcome": completed.outcome.value,
            }},
        )
        return completed

    async def _check_credentials(self, workflow_id: str):
        if self.provider.has_credentials:
            return
        gap = CredentialGap(
            service=self.provider.provider_name,
            required_credential_name=self.provider.api_key_name,
            workflow_id=workflow_id,
            stage=self.stage_name,
        )
        task = asyncio.create_task(self.notifier.notify(gap))
        _NOTIFICATION_TASKS.add(task)
        task.add_done_callback(_NOTIFICATION_TASKS.discard)
        # Let the alert start without waiting for delivery
        await asyncio.sleep(0)
        raise CredentialMissingError(self.provider.provider_name, self.provider.api_key_name, stage=self.stage_name)

    async def _run(self, stage_input: Any, workflow_id: str) -> StageOutput:
        template = await self.prompt_loader.load(self.stage_name)
        context = PromptContext(self.build_variables(stage_input, workflow_id))
        prompts = context.render(template)

        try:
            raw_text = await self._complete(prompts)
        except ProviderError as e:
            fallback = self.on_provider_error(stage_input, e)
            if fallback is None:
                raise
            logger.warning(f"Stage {self.stage_name} using fallback output: {e.message}")
            return fallback

        extraction = extract_json(raw_text)
        if not extraction.ok:
            logger.warning(
                f"Stage {self.stage_name} could not extract JSON, continuing with partial output",
                extra={"extra_fields": {"workflow_id": workflow_id, "reason": extraction.failure_reason}},
            )
            return self.degrade(stage_input, raw_text, extraction)

        return StageOutput(self.postprocess(extraction.value, stage_input))

    async def _complete(self, prompts: Dict[str, str]) -> str:
        # A provider that does not answer in time counts as a provider error
        try:
            return await asyncio.wait_for(
                self.llm_client.chat_completion(
                    user_prompt=prompts["user_prompt"],
                    system_prompt=prompts["system_prompt"],
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    json_response=self.json_response,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise ProviderError(self.provider.provider_name, f"stage timed out after {self.timeout}s")

    def build_variables(self, stage_input: Any, workflow_id: str) -> Dict[str, Any]:
        return {"input": stage_input, "workflow_id": workflow_id, "stage": self.stage_name}

    def postprocess(self, output: Any, stage_input: Any) -> Any:
        return output

    def degrade(self, stage_input: Any, raw_text: str, extraction: ExtractionResult) -> StageOutput:
        """
        Keep the upstream data, annotated, so later stages can still run.
        """
        note = f"{self.stage_name} response could not be parsed as JSON ({extraction.failure_reason})"
        data = dict(stage_input) if isinstance(stage_input, dict) else {"input": stage_input}
        data.update({
            "processing_status": "partial",
            "processing_note": note,
            "raw_response": (raw_text or "")[:RAW_RESPONSE_LIMIT],
        })
        return StageOutput(data, note=note)

    def on_provider_error(self, stage_input: Any, error: ProviderError) -> Optional[StageOutput]:
        """
        Return a replacement output to absorb a provider error, or None to fail the stage.
        """
        return None

    async def _record(self, result: StageResult):
        if self.trace_recorder is not None:
            await self.trace_recorder.record(result)
