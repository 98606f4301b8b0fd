from typing import List

from .base import BaseStageExecutor, StageOutput
from .planner import PlannerStageExecutor
from .refiner import RefinerStageExecutor
from .optimizer import OptimizerStageExecutor
from .finalizer import FinalizerStageExecutor
from .registry import STAGE_ORDER, get_stage_class

def build_stage_executors(
    settings,
    prompt_loader=None,
    trace_recorder=None,
    notifier=None,
) -> List[BaseStageExecutor]:
    """Instantiate the four stages in pipeline order with their own provider config."""
    executors = []
    for stage_name in STAGE_ORDER:
        executor_cls = get_stage_class(stage_name)
        executors.append(executor_cls(
            settings.provider_for_stage(stage_name),
            prompt_loader=prompt_loader,
            trace_recorder=trace_recorder,
            notifier=notifier,
        ))
    return executors

__all__ = [
    "BaseStageExecutor",
    "StageOutput",
    "PlannerStageExecutor",
    "RefinerStageExecutor",
    "OptimizerStageExecutor",
    "FinalizerStageExecutor",
    "STAGE_ORDER",
    "build_stage_executors",
]
