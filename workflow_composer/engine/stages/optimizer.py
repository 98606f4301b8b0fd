from workflow_composer.engine.stages.base import BaseStageExecutor
from workflow_composer.engine.stages.registry import register_stage

@register_stage("optimizer")
class OptimizerStageExecutor(BaseStageExecutor):
    """Adds node specifications and performance work to the refined plan."""

    stage_number = 3
    stage_name = "optimizer"
    temperature = 0.1
    max_tokens = 2500
    json_response = True
