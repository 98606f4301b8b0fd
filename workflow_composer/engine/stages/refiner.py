from workflow_composer.engine.stages.base import BaseStageExecutor
from workflow_composer.engine.stages.registry import register_stage

@register_stage("refiner")
class RefinerStageExecutor(BaseStageExecutor):
    """Adds error handling, validation and monitoring to the plan."""

    stage_number = 2
    stage_name = "refiner"
    temperature = 0.3
    max_tokens = 2000
