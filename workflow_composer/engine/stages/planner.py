from typing import Any, Dict
from workflow_composer.engine.stages.base import BaseStageExecutor
from workflow_composer.engine.stages.registry import register_stage

@register_stage("planner")
class PlannerStageExecutor(BaseStageExecutor):
    """Turns the user's request into a structured automation plan."""

    stage_number = 1
    stage_name = "planner"
    temperature = 0.7
    max_tokens = 1500

    def build_variables(self, stage_input: Any, workflow_id: str) -> Dict[str, Any]:
        variables = super().build_variables(stage_input, workflow_id)
        if isinstance(stage_input, dict) and "prompt" in stage_input:
            variables["input"] = stage_input["prompt"]
        return variables
