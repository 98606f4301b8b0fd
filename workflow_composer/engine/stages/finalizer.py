from datetime import datetime, timezone
from typing import Any, Dict, Optional
import uuid

from workflow_composer.core.errors import ProviderError
from workflow_composer.engine.extraction import ExtractionResult
from workflow_composer.engine.stages.base import BaseStageExecutor, StageOutput
from workflow_composer.engine.stages.registry import register_stage

DEFAULT_WORKFLOW_NAME = "Generated Workflow"

def specification_name(stage_input: Any) -> str:
    if isinstance(stage_input, dict):
        specification = stage_input.get("workflow_specification")
        if isinstance(specification, dict) and isinstance(specification.get("name"), str) and specification["name"].strip():
            return specification["name"]
        if isinstance(stage_input.get("objective"), str) and stage_input["objective"].strip():
            return stage_input["objective"][:80]
    return DEFAULT_WORKFLOW_NAME

def fallback_document(name: str, reason: str) -> Dict[str, Any]:
    """Smallest importable workflow: a single manual trigger."""
    return {
        "name": name,
        "nodes": [
            {
                "id": str(uuid.uuid4()),
                "name": "Manual Trigger",
                "type": "n8n-nodes-base.manualTrigger",
                "typeVersion": 1,
                "position": [240, 300],
                "parameters": {},
            }
        ],
        "connections": {},
        "active": False,
        "settings": {"executionOrder": "v1"},
        "versionId": str(uuid.uuid4()),
        "updatedAt": datetime.now(timezone.utc).isoformat(),
        "meta": {"fallback": True, "reason": reason},
    }

@register_stage("finalizer")
class FinalizerStageExecutor(BaseStageExecutor):
    """Converts the optimized specification into importable n8n workflow JSON."""

    stage_number = 4
    stage_name = "finalizer"
    temperature = 0.1
    max_tokens = 3000
    json_response = True

    def postprocess(self, output: Any, stage_input: Any) -> Any:
        if not isinstance(output, dict):
            return output

        # Some responses wrap the document: {"workflow": {...}}
        wrapped = output.get("workflow")
        if "nodes" not in output and isinstance(wrapped, dict) and "nodes" in wrapped:
            output = wrapped

        document = dict(output)
        if not document.get("name"):
            document["name"] = specification_name(stage_input)
        if not document.get("versionId"):
            document["versionId"] = str(uuid.uuid4())
        if not document.get("updatedAt"):
            document["updatedAt"] = datetime.now(timezone.utc).isoformat()
        return document

    def degrade(self, stage_input: Any, raw_text: str, extraction: ExtractionResult) -> StageOutput:
        note = f"finalizer response could not be parsed ({extraction.failure_reason}); emitted fallback workflow"
        return StageOutput(fallback_document(specification_name(stage_input), note), note=note)

    def on_provider_error(self, stage_input: Any, error: ProviderError) -> Optional[StageOutput]:
        note = f"finalizer provider unavailable ({error.message}); emitted fallback workflow"
        return StageOutput(fallback_document(specification_name(stage_input), note), note=note)
